"""
SkillSwap Backend: Swap Request Schemas
=======================================

What:  API contract for the swap-request workflow.

Two read shapes exist on purpose:
    - SwapRequestDetail: the record plus both participants, returned by the
      mutating endpoints.
    - SwapRequestView: the caller-oriented row returned by GET /me. It
      flattens names/photos and adds `is_requester`, so one list serves both
      the "sent" and the "received" tabs.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from skillswap.models.swap_request import SwapStatus
from skillswap.schemas.user import UserSummary


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SwapRequestCreate(BaseModel):
    """
    What:  Body of POST /api/swap-requests.

    Every field is optional at the schema level: absent or blank values are
    reported by the service as a 400 validation error with one message,
    instead of FastAPI's per-field 422. The requester is never read from the
    body; it is always the authenticated user.
    """
    accepter_id: Optional[uuid.UUID] = None
    requester_offered_skill: Optional[str] = None
    accepter_wanted_skill: Optional[str] = None
    message: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SwapFeedback(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = None


class SwapRequestDetail(BaseModel):
    id: uuid.UUID
    requester: UserSummary
    accepter: UserSummary
    requester_offered_skill: str
    accepter_wanted_skill: str
    message: Optional[str] = None
    status: SwapStatus
    feedback: Optional[SwapFeedback] = None
    created_at: datetime
    updated_at: datetime


class SwapRequestView(BaseModel):
    """One row of GET /api/swap-requests/me, seen from the viewing user's side."""
    id: uuid.UUID
    requester_name: str
    requester_photo_url: Optional[str] = None
    accepter_name: str
    accepter_photo_url: Optional[str] = None
    requester_offered_skill: str
    accepter_wanted_skill: str
    message: Optional[str] = None
    status: SwapStatus
    created_at: datetime
    is_requester: bool = Field(description="True when the viewing user sent this request")


class SwapRequestMutationResponse(BaseModel):
    message: str
    swap_request: SwapRequestDetail
