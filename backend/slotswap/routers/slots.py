# backend/slotswap/routers/slots.py
"""
Slots API endpoints.

Creation and every later mutation go through SwapCoordinator, which refuses
to touch a slot locked in SWAP_PENDING.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import Users as DBUsers
from ..schemas.slots import SlotCreate, SlotRead, SlotUpdate
from ..services.events import EventSink, get_event_sink
from ..services.slots import SlotStore
from ..services.swaps import SwapCoordinator

router = APIRouter(prefix="/slots", tags=["slots"])


@router.post("/", response_model=SlotRead, status_code=status.HTTP_201_CREATED)
def create_slot(
    data: SlotCreate,
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
    sink: EventSink = Depends(get_event_sink),
):
    coordinator = SwapCoordinator(db, sink)
    return coordinator.create_slot(user.id, data.title, data.start_time, data.end_time)


@router.get("/me", response_model=list[SlotRead])
def list_my_slots(
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Caller's slots, earliest first."""
    return SlotStore(db).list_owned_by(user.id)


@router.get("/others", response_model=list[SlotRead])
def list_other_slots(
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Everyone else's slots in any status, earliest first."""
    return SlotStore(db).list_not_owned_by(user.id)


@router.patch("/{id}", response_model=SlotRead)
def update_slot(
    id: int,
    data: SlotUpdate,
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
    sink: EventSink = Depends(get_event_sink),
):
    coordinator = SwapCoordinator(db, sink)
    return coordinator.update_slot(user.id, id, data.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_slot(
    id: int,
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
    sink: EventSink = Depends(get_event_sink),
):
    SwapCoordinator(db, sink).delete_slot(user.id, id)
