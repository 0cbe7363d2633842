# backend/slotswap/schemas/swaps.py

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from ..models import SwapStatus
from .slots import SlotRead
from .users import UserBrief


# ──────────────────────────────────────────────────────────────────────────────
# Request Schemas
# ──────────────────────────────────────────────────────────────────────────────

class SwapRequestCreate(BaseModel):
    """Request body for POST /swap-request"""
    my_slot_id: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("my_slot_id", "mySlotId"),
        description="Slot the requester offers",
    )
    their_slot_id: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("their_slot_id", "theirSlotId"),
        description="Slot the requester wants",
    )


class SwapResponseCreate(BaseModel):
    """Request body for POST /swap-response/{request_id}"""
    accept: bool


# ──────────────────────────────────────────────────────────────────────────────
# Read Schemas
# ──────────────────────────────────────────────────────────────────────────────

class SwapRequestRead(BaseModel):
    id: int
    status: SwapStatus

    my_slot_id: Optional[int] = None
    their_slot_id: Optional[int] = None
    requester_id: int
    responder_id: int

    my_slot: Optional[SlotRead] = None
    their_slot: Optional[SlotRead] = None
    requester: Optional[UserBrief] = None
    responder: Optional[UserBrief] = None

    created_at: datetime
    resolved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SwapRequestsListing(BaseModel):
    """Response for GET /swap-requests"""
    incoming: list[SwapRequestRead]
    outgoing: list[SwapRequestRead]


class SwapResolution(BaseModel):
    """Response for POST /swap-response/{request_id}"""
    success: bool = True
    message: str
    request: SwapRequestRead
    my_slot: Optional[SlotRead] = None
    their_slot: Optional[SlotRead] = None
    cascaded_request_ids: list[int] = []

    model_config = {"from_attributes": True}
