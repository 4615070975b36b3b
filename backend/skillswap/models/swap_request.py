"""
SkillSwap Backend: SwapRequest SQLAlchemy Model
===============================================

What:  ORM model representing the `swap_requests` table.
Who:   Owned exclusively by SwapRequestService.

Lifecycle:
    [pending] --accept (by accepter)--> [accepted]
    [pending] --reject (by accepter)--> [rejected]
    [pending] --delete (by requester)--> row removed

    `cancelled` and `completed` (and the feedback columns) are part of the
    schema but no operation sets them yet.

Duplicate prevention:
    A partial unique index over (requester_id, accepter_id) restricted to
    status = 'pending' guarantees at most one pending request per ordered pair,
    even when two inserts race past the service-level check. Rows in any other
    status are unconstrained, so a pair may swap again after a rejection.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from skillswap.database import Base
from skillswap.models.user import User, utcnow


class SwapStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in SwapStatus)
_PENDING_ONLY = text("status = 'pending'")


class SwapRequest(Base):
    """
    A proposal from `requester` to `accepter` to trade one skill for another.

    Both participants are eagerly joined on every load so responses can be
    enriched without extra round trips (async sessions cannot lazy-load).
    """

    __tablename__ = "swap_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    requester_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    accepter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    requester_offered_skill: Mapped[str] = mapped_column(Text, nullable=False)

    accepter_wanted_skill: Mapped[str] = mapped_column(Text, nullable=False)

    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SwapStatus.PENDING.value,
        server_default=text("'pending'"),
    )

    # Reserved for post-swap feedback
    feedback_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    feedback_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    requester: Mapped[User] = relationship(foreign_keys=[requester_id], lazy="joined")
    accepter: Mapped[User] = relationship(foreign_keys=[accepter_id], lazy="joined")

    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_swap_requests_status"),
        CheckConstraint("requester_id <> accepter_id", name="ck_swap_requests_distinct_users"),
        CheckConstraint(
            "feedback_rating IS NULL OR (feedback_rating >= 1 AND feedback_rating <= 5)",
            name="ck_swap_requests_feedback_rating",
        ),
        Index(
            "uq_swap_requests_pending_pair",
            "requester_id",
            "accepter_id",
            unique=True,
            postgresql_where=_PENDING_ONLY,
            sqlite_where=_PENDING_ONLY,
        ),
        Index("idx_swap_requests_requester", "requester_id", "created_at"),
        Index("idx_swap_requests_accepter", "accepter_id", "created_at"),
    )

    @property
    def is_pending(self) -> bool:
        return self.status == SwapStatus.PENDING.value

    def __repr__(self) -> str:
        return (
            f"<SwapRequest(id={self.id}, requester={self.requester_id}, "
            f"accepter={self.accepter_id}, status='{self.status}')>"
        )
