"""
Pydantic schemas for slots API.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..models import SlotStatus
from .users import UserBrief


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Slots are stored as naive UTC; aware inputs are converted."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class SlotCreate(BaseModel):
    """Request body for POST /slots. Range order (start < end) is checked by the store."""
    title: str = Field(..., min_length=1, max_length=200)
    start_time: datetime
    end_time: datetime

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be blank")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, v: datetime) -> datetime:
        return to_utc_naive(v)


class SlotUpdate(BaseModel):
    """
    Request body for PATCH /slots/{id}.

    Only title, times and status are mutable. SWAP_PENDING is accepted by the
    schema but refused by the coordinator. An explicit null for times or
    status is refused by the slot store.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[SlotStatus] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc_naive(v)


class SlotRead(BaseModel):
    id: int
    title: str
    start_time: datetime
    end_time: datetime
    status: SlotStatus
    owner_id: int
    owner: Optional[UserBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
