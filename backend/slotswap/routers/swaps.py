# backend/slotswap/routers/swaps.py
"""
Swap marketplace endpoints.

GET  /swappable-slots          — tradable slots of other users
POST /swap-request             — offer one of my slots for one of theirs
POST /swap-response/{id}       — responder accepts or rejects
GET  /swap-requests            — my pending {incoming, outgoing}
GET  /swap-requests/history    — every request I took part in
GET  /swap-requests/{id}       — one request (participants only)
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import Users as DBUsers
from ..schemas.slots import SlotRead
from ..schemas.swaps import (
    SwapRequestCreate,
    SwapRequestRead,
    SwapRequestsListing,
    SwapResolution,
    SwapResponseCreate,
)
from ..services.errors import AuthorizationError
from ..services.events import EventSink, get_event_sink
from ..services.slots import SlotStore
from ..services.swaps import SwapCoordinator, SwapLedger

router = APIRouter(tags=["swaps"])


@router.get("/swappable-slots", response_model=list[SlotRead])
def list_swappable_slots(
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return SlotStore(db).list_swappable(user.id)


@router.post("/swap-request", response_model=SwapRequestRead, status_code=status.HTTP_201_CREATED)
def create_swap_request(
    data: SwapRequestCreate,
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
    sink: EventSink = Depends(get_event_sink),
):
    coordinator = SwapCoordinator(db, sink)
    return coordinator.request_swap(user.id, data.my_slot_id, data.their_slot_id)


@router.post("/swap-response/{request_id}", response_model=SwapResolution)
def respond_to_swap_request(
    request_id: int,
    data: SwapResponseCreate,
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
    sink: EventSink = Depends(get_event_sink),
):
    outcome = SwapCoordinator(db, sink).respond_to_swap(user.id, request_id, data.accept)

    return SwapResolution(
        success=True,
        message="Swap accepted successfully" if outcome.accepted else "Swap rejected",
        request=SwapRequestRead.model_validate(outcome.request),
        my_slot=SlotRead.model_validate(outcome.my_slot),
        their_slot=SlotRead.model_validate(outcome.their_slot),
        cascaded_request_ids=outcome.cascaded_request_ids,
    )


@router.get("/swap-requests", response_model=SwapRequestsListing)
def list_swap_requests(
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ledger = SwapLedger(db)
    return SwapRequestsListing(
        incoming=[SwapRequestRead.model_validate(s) for s in ledger.list_incoming(user.id)],
        outgoing=[SwapRequestRead.model_validate(s) for s in ledger.list_outgoing(user.id)],
    )


@router.get("/swap-requests/history", response_model=list[SwapRequestRead])
def list_swap_history(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return SwapLedger(db).list_history(user.id, limit=limit, offset=offset)


@router.get("/swap-requests/{request_id}", response_model=SwapRequestRead)
def get_swap_request(
    request_id: int,
    user: DBUsers = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    swap = SwapLedger(db).require(request_id)
    if user.id not in (swap.requester_id, swap.responder_id):
        raise AuthorizationError("Not a participant of this swap request")
    return swap
