"""
SkillSwap Backend: Swap Request Route Handlers
==============================================

What:  HTTP surface of the swap-request workflow.
How:   Each handler resolves the acting user from the bearer token, builds a
       SwapRequestService over the request's session and maps the result to
       JSON. Domain errors are turned into responses by the global handlers.

    POST   /api/swap-requests              create (201)
    GET    /api/swap-requests/me?status=   list sent + received
    PUT    /api/swap-requests/{id}/accept  accepter only, pending only
    PUT    /api/swap-requests/{id}/reject  accepter only, pending only
    DELETE /api/swap-requests/{id}         requester only, pending only
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.auth import get_current_user_id
from skillswap.database import get_db_session
from skillswap.exceptions import ValidationError
from skillswap.models.swap_request import SwapStatus
from skillswap.schemas.common import ErrorResponse, MessageResponse
from skillswap.schemas.swap_request import (
    SwapRequestCreate,
    SwapRequestMutationResponse,
    SwapRequestView,
)
from skillswap.services.swap_service import SwapRequestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/swap-requests", tags=["Swap Requests"])

_TRANSITION_ERRORS = {
    400: {"description": "Request is no longer pending", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Acting user has the wrong role", "model": ErrorResponse},
    404: {"description": "Swap request not found", "model": ErrorResponse},
}


async def get_swap_service(db: AsyncSession = Depends(get_db_session)) -> SwapRequestService:
    return SwapRequestService(db)


def parse_status_filter(status: Optional[str]) -> Optional[SwapStatus]:
    """Empty means "no filter"; anything else must be a known status."""
    if not status:
        return None
    try:
        return SwapStatus(status.strip().lower())
    except ValueError:
        raise ValidationError(
            message=f"Unknown status '{status}'",
            field="status",
            context={"allowed": [s.value for s in SwapStatus]},
        )


@router.post(
    "",
    status_code=201,
    response_model=SwapRequestMutationResponse,
    responses={
        400: {"description": "Missing field, self-request or duplicate pending request", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Accepter not found", "model": ErrorResponse},
    },
    summary="Send a swap request",
)
async def create_swap_request(
    body: SwapRequestCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: SwapRequestService = Depends(get_swap_service),
) -> SwapRequestMutationResponse:
    swap = await service.create(
        requester_id=user_id,
        accepter_id=body.accepter_id,
        offered_skill=body.requester_offered_skill,
        wanted_skill=body.accepter_wanted_skill,
        message=body.message,
    )
    return SwapRequestMutationResponse(
        message="Swap request created successfully",
        swap_request=swap,
    )


@router.get(
    "/me",
    response_model=List[SwapRequestView],
    responses={
        400: {"description": "Unknown status filter", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="List the swap requests I sent or received",
    description=(
        "Newest first. Each item carries `is_requester`, which is true for "
        "requests the caller sent and false for requests they received."
    ),
)
async def list_my_swap_requests(
    status: Optional[str] = Query(
        default=None,
        description="Only return requests in this status (pending, accepted, rejected, cancelled, completed)",
    ),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: SwapRequestService = Depends(get_swap_service),
) -> List[SwapRequestView]:
    return await service.list_for_user(user_id, parse_status_filter(status))


@router.put(
    "/{request_id}/accept",
    response_model=SwapRequestMutationResponse,
    responses=_TRANSITION_ERRORS,
    summary="Accept a swap request sent to me",
)
async def accept_swap_request(
    request_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: SwapRequestService = Depends(get_swap_service),
) -> SwapRequestMutationResponse:
    swap = await service.accept(request_id, user_id)
    return SwapRequestMutationResponse(
        message="Swap request accepted successfully",
        swap_request=swap,
    )


@router.put(
    "/{request_id}/reject",
    response_model=SwapRequestMutationResponse,
    responses=_TRANSITION_ERRORS,
    summary="Reject a swap request sent to me",
)
async def reject_swap_request(
    request_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: SwapRequestService = Depends(get_swap_service),
) -> SwapRequestMutationResponse:
    swap = await service.reject(request_id, user_id)
    return SwapRequestMutationResponse(
        message="Swap request rejected successfully",
        swap_request=swap,
    )


@router.delete(
    "/{request_id}",
    response_model=MessageResponse,
    responses=_TRANSITION_ERRORS,
    summary="Withdraw a pending swap request I sent",
)
async def delete_swap_request(
    request_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: SwapRequestService = Depends(get_swap_service),
) -> MessageResponse:
    await service.delete(request_id, user_id)
    return MessageResponse(message="Swap request deleted successfully")
