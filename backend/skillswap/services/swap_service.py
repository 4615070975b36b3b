"""
SkillSwap Backend: Swap Request Service (Workflow & State Machine)
==================================================================

What:  Create / list / accept / reject / delete for swap requests, with the
       authorization rule that gates each transition.
Who:   Constructed per HTTP request by the swap router with that request's
       AsyncSession; tests construct it directly against SQLite.

State Machine:
    ┌─────────┐ accept (accepter) ┌──────────┐
    │ pending │──────────────────▶│ accepted │
    │         │ reject (accepter) ├──────────┤
    │         │──────────────────▶│ rejected │
    │         │ delete (requester)└──────────┘
    │         │──────────────────▶ (row removed)
    └─────────┘

    Checks run in a fixed order: existence (404), role (403), state (400).
    The transition itself is a conditional statement on `status = 'pending'`;
    if a concurrent caller got there first, zero rows match and the loser sees
    InvalidStateError. The record is never touched when a check fails.

Duplicate pending requests:
    create() looks for an existing pending row for the ordered pair and then
    inserts. The partial unique index on swap_requests turns the remaining
    race into an IntegrityError. After rolling back, the pair is looked up
    again: a pending row means ConflictError, anything else (a requester id
    with no user row, for one) is a DatabaseError.

Enrichment:
    Participant names/photos are joined onto results by the projection
    functions at the bottom of this module, after the state logic has run.
"""

import logging
import uuid
from typing import List, Optional, Protocol

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.exceptions import (
    ConflictError,
    DatabaseError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from skillswap.models.swap_request import SwapRequest, SwapStatus
from skillswap.models.user import User
from skillswap.schemas.swap_request import (
    SwapFeedback,
    SwapRequestDetail,
    SwapRequestView,
)
from skillswap.schemas.user import UserSummary
from skillswap.services.user_service import UserDirectory

logger = logging.getLogger(__name__)


class UserLookup(Protocol):
    """The slice of the user directory the workflow depends on."""

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        ...


def _clean(value: Optional[str]) -> str:
    return value.strip() if value else ""


class SwapRequestService:
    """
    Business logic for the swap-request lifecycle.

    Args:
        db: Session all reads and writes go through (commit is the caller's job)
        users: Directory used to resolve the accepter; defaults to a
               UserDirectory over the same session
    """

    def __init__(self, db: AsyncSession, users: Optional[UserLookup] = None):
        self.db = db
        self.users = users if users is not None else UserDirectory(db)

    # ── Create ────────────────────────────────────────────────────────────

    async def create(
        self,
        requester_id: uuid.UUID,
        accepter_id: Optional[uuid.UUID],
        offered_skill: Optional[str],
        wanted_skill: Optional[str],
        message: Optional[str] = None,
    ) -> SwapRequestDetail:
        """
        Open a new pending request from `requester_id` to `accepter_id`.

        Raises:
            ValidationError: missing/blank field, or a request to oneself
            NotFoundError: the accepter does not exist
            ConflictError: a pending request for this ordered pair already exists
        """
        offered_skill = _clean(offered_skill)
        wanted_skill = _clean(wanted_skill)
        message = _clean(message) or None

        if accepter_id is None or not offered_skill or not wanted_skill:
            raise ValidationError(
                message="All required fields must be provided",
                context={
                    "required": [
                        "accepter_id",
                        "requester_offered_skill",
                        "accepter_wanted_skill",
                    ]
                },
            )

        accepter = await self.users.find_by_id(accepter_id)
        if accepter is None:
            raise NotFoundError(
                resource="user",
                resource_id=str(accepter_id),
                message="Accepter not found",
            )

        if requester_id == accepter_id:
            raise ValidationError(
                message="You cannot send a swap request to yourself",
                field="accepter_id",
            )

        existing = await self._pending_request_id(requester_id, accepter_id)
        if existing is not None:
            raise ConflictError(context={"existing_request_id": str(existing)})

        swap = SwapRequest(
            requester_id=requester_id,
            accepter_id=accepter_id,
            requester_offered_skill=offered_skill,
            accepter_wanted_skill=wanted_skill,
            message=message,
            status=SwapStatus.PENDING.value,
        )

        self.db.add(swap)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            # Only the pending-pair index makes this a duplicate; a foreign key
            # or check failure is a persistence error
            existing = await self._pending_request_id(requester_id, accepter_id)
            if existing is not None:
                logger.info(
                    "Concurrent duplicate pending request %s -> %s rejected",
                    requester_id,
                    accepter_id,
                )
                raise ConflictError(context={"existing_request_id": str(existing)})
            logger.error("Integrity error creating swap request: %s", str(e.orig))
            raise DatabaseError(
                message="Could not create the swap request. Please try again.",
                context={"error_type": type(e).__name__},
            )
        except SQLAlchemyError as e:
            logger.error("Database error creating swap request: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the swap request. Please try again.",
                context={"error_type": type(e).__name__},
            )

        await self.db.refresh(swap, attribute_names=["requester", "accepter"])
        logger.info(
            "Swap request %s created: %s -> %s (%s for %s)",
            swap.id,
            requester_id,
            accepter_id,
            offered_skill,
            wanted_skill,
        )
        return to_detail(swap)

    # ── Read ──────────────────────────────────────────────────────────────

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        status: Optional[SwapStatus] = None,
    ) -> List[SwapRequestView]:
        """
        Every request the user sent or received, newest first.

        Participation is the query itself (requester OR accepter), so there is
        no separate authorization step.
        """
        query = select(SwapRequest).where(
            or_(
                SwapRequest.requester_id == user_id,
                SwapRequest.accepter_id == user_id,
            )
        )
        if status is not None:
            query = query.where(SwapRequest.status == SwapStatus(status).value)
        query = query.order_by(SwapRequest.created_at.desc())

        try:
            result = await self.db.execute(query)
            requests = list(result.unique().scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing swap requests: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve swap requests. Please try again.",
                context={"user_id": str(user_id)},
            )

        return [to_view(request, user_id) for request in requests]

    async def get(self, request_id: uuid.UUID) -> SwapRequest:
        swap = await self._find(request_id)
        if swap is None:
            raise NotFoundError(
                resource="swap request",
                resource_id=str(request_id),
                message="Swap request not found",
            )
        return swap

    # ── Transitions ───────────────────────────────────────────────────────

    async def accept(self, request_id: uuid.UUID, acting_user_id: uuid.UUID) -> SwapRequestDetail:
        """pending → accepted, by the accepter only."""
        return await self._respond(request_id, acting_user_id, SwapStatus.ACCEPTED, "accept")

    async def reject(self, request_id: uuid.UUID, acting_user_id: uuid.UUID) -> SwapRequestDetail:
        """pending → rejected, by the accepter only."""
        return await self._respond(request_id, acting_user_id, SwapStatus.REJECTED, "reject")

    async def delete(self, request_id: uuid.UUID, acting_user_id: uuid.UUID) -> None:
        """
        Withdraw a pending request, by the requester only.

        This is a hard delete; the `cancelled` status is never written.
        """
        swap = await self.get(request_id)

        if swap.requester_id != acting_user_id:
            raise ForbiddenError(message="You can only delete your own requests")

        if not swap.is_pending:
            raise InvalidStateError(
                message="You can only delete pending requests",
                current_status=swap.status,
            )

        statement = (
            delete(SwapRequest)
            .where(
                SwapRequest.id == request_id,
                SwapRequest.requester_id == acting_user_id,
                SwapRequest.status == SwapStatus.PENDING.value,
            )
            .execution_options(synchronize_session=False)
        )
        rowcount = await self._execute_rowcount(statement, request_id)
        if rowcount == 0:
            raise InvalidStateError(message="You can only delete pending requests")

        self.db.expunge(swap)
        logger.info("Swap request %s deleted by requester %s", request_id, acting_user_id)

    async def _respond(
        self,
        request_id: uuid.UUID,
        acting_user_id: uuid.UUID,
        target: SwapStatus,
        verb: str,
    ) -> SwapRequestDetail:
        swap = await self.get(request_id)

        if swap.accepter_id != acting_user_id:
            raise ForbiddenError(message=f"You can only {verb} requests sent to you")

        if not swap.is_pending:
            raise InvalidStateError(current_status=swap.status)

        statement = (
            update(SwapRequest)
            .where(
                SwapRequest.id == request_id,
                SwapRequest.accepter_id == acting_user_id,
                SwapRequest.status == SwapStatus.PENDING.value,
            )
            .values(status=target.value)
            .execution_options(synchronize_session=False)
        )
        rowcount = await self._execute_rowcount(statement, request_id)
        if rowcount == 0:
            # Another caller moved it out of pending between our read and write
            raise InvalidStateError()

        await self.db.refresh(swap)
        logger.info(
            "Swap request %s %s by %s",
            request_id,
            target.value,
            acting_user_id,
        )
        return to_detail(swap)

    # ── Persistence helpers ───────────────────────────────────────────────

    async def _find(self, request_id: uuid.UUID) -> Optional[SwapRequest]:
        try:
            return await self.db.get(SwapRequest, request_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching swap request %s: %s", request_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the swap request. Please try again.",
                context={"request_id": str(request_id)},
            )

    async def _pending_request_id(
        self, requester_id: uuid.UUID, accepter_id: uuid.UUID
    ) -> Optional[uuid.UUID]:
        return await self._execute_scalar(
            select(SwapRequest.id).where(
                SwapRequest.requester_id == requester_id,
                SwapRequest.accepter_id == accepter_id,
                SwapRequest.status == SwapStatus.PENDING.value,
            )
        )

    async def _execute_scalar(self, statement):
        try:
            result = await self.db.execute(statement)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error checking swap requests: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def _execute_rowcount(self, statement, request_id: uuid.UUID) -> int:
        try:
            result = await self.db.execute(statement)
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error("Database error updating swap request %s: %s", request_id, str(e))
            raise DatabaseError(
                message="Could not update the swap request. Please try again.",
                context={"request_id": str(request_id)},
            )


# ══════════════════════════════════════════════════════════════════════════
# Read-side projections
# ══════════════════════════════════════════════════════════════════════════


def to_detail(swap: SwapRequest) -> SwapRequestDetail:
    """Record plus contact-safe summaries of both participants."""
    feedback = None
    if swap.feedback_rating is not None or swap.feedback_comment:
        feedback = SwapFeedback(rating=swap.feedback_rating, comment=swap.feedback_comment)

    return SwapRequestDetail(
        id=swap.id,
        requester=UserSummary.model_validate(swap.requester),
        accepter=UserSummary.model_validate(swap.accepter),
        requester_offered_skill=swap.requester_offered_skill,
        accepter_wanted_skill=swap.accepter_wanted_skill,
        message=swap.message,
        status=SwapStatus(swap.status),
        feedback=feedback,
        created_at=swap.created_at,
        updated_at=swap.updated_at,
    )


def to_view(swap: SwapRequest, viewer_id: uuid.UUID) -> SwapRequestView:
    """The row as `viewer_id` sees it in their combined sent/received list."""
    return SwapRequestView(
        id=swap.id,
        requester_name=swap.requester.name,
        requester_photo_url=swap.requester.profile_photo_url,
        accepter_name=swap.accepter.name,
        accepter_photo_url=swap.accepter.profile_photo_url,
        requester_offered_skill=swap.requester_offered_skill,
        accepter_wanted_skill=swap.accepter_wanted_skill,
        message=swap.message,
        status=SwapStatus(swap.status),
        created_at=swap.created_at,
        is_requester=swap.requester_id == viewer_id,
    )
