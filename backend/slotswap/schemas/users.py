# backend/slotswap/schemas/users.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=254)

    model_config = {"from_attributes": True}


class UserBrief(BaseModel):
    """Owner/counterparty summary embedded in slot and swap payloads."""
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
