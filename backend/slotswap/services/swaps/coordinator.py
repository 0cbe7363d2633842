# backend/slotswap/services/swaps/coordinator.py
"""
Swap coordinator: the request -> accept/reject protocol.

Negotiation states: Requested -> {Accepted, Rejected}, both terminal.

A slot in SWAP_PENDING is locked to exactly one in-flight negotiation.
Only this module moves slots into or out of SWAP_PENDING, and every
validate -> write sequence here runs inside one ``atomic`` block, so the
slot writes and the ledger write commit together or not at all. Slot and
request rows are version-checked on UPDATE; a concurrent transaction that
committed first makes ours fail with a retryable StateError.

Notifications are published after commit and never affect the outcome.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from ...models import SlotStatus, Slots, SwapRequests, SwapStatus
from ..errors import AuthorizationError, StateError, ValidationError
from ..events import SLOT_UPDATED, SWAP_UPDATED, EventSink
from ..slots import SlotStore
from ..transaction import atomic
from .ledger import SwapLedger

logger = logging.getLogger(__name__)


@dataclass
class SwapOutcome:
    """Result of respond_to_swap."""
    request: SwapRequests
    my_slot: Slots
    their_slot: Slots
    cascaded_request_ids: list[int] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.request.status == SwapStatus.ACCEPTED


class SwapCoordinator:
    """Orchestrates slot state transitions across SlotStore and SwapLedger."""

    def __init__(self, db: Session, sink: EventSink):
        self.db = db
        self.sink = sink
        self.slots = SlotStore(db)
        self.ledger = SwapLedger(db)

    # ──────────────────────────────────────────────────────────────────────
    # Negotiation
    # ──────────────────────────────────────────────────────────────────────

    def request_swap(self, requester_id: int, my_slot_id: int, their_slot_id: int) -> SwapRequests:
        """
        Offer my_slot in exchange for their_slot.

        Both slots must be SWAPPABLE. On success both become SWAP_PENDING and
        a PENDING request is recorded, in one transaction.

        Raises:
            ValidationError: same slot on both sides, or self-swap
            NotFoundError: either slot missing
            AuthorizationError: requester does not own my_slot
            StateError: either slot not SWAPPABLE, or lost a concurrent race
        """
        with atomic(self.db, "request_swap"):
            my_slot = self.slots.require(my_slot_id, fresh=True)
            their_slot = self.slots.require(their_slot_id, fresh=True)

            if my_slot_id == their_slot_id:
                raise ValidationError("A slot cannot be swapped with itself")

            if my_slot.owner_id != requester_id:
                raise AuthorizationError("You do not own this slot")
            if their_slot.owner_id == requester_id:
                raise ValidationError("Cannot swap with your own slot")

            if my_slot.status != SlotStatus.SWAPPABLE:
                logger.warning(
                    f"Swap request by user {requester_id} refused: "
                    f"slot {my_slot.id} is {my_slot.status.value}"
                )
                raise StateError("Your slot must be swappable")
            if their_slot.status != SlotStatus.SWAPPABLE:
                logger.warning(
                    f"Swap request by user {requester_id} refused: "
                    f"target slot {their_slot.id} is {their_slot.status.value}"
                )
                raise StateError("The requested slot is no longer swappable")

            my_slot.status = SlotStatus.SWAP_PENDING
            their_slot.status = SlotStatus.SWAP_PENDING

            swap = self.ledger.create_pending(
                my_slot,
                their_slot,
                requester_id=requester_id,
                responder_id=their_slot.owner_id,
            )

        logger.info(
            f"Swap {swap.id} requested: user {requester_id} offers slot {my_slot_id} "
            f"for slot {their_slot_id}"
        )
        self._notify(
            SWAP_UPDATED,
            {
                "message": "New swap request created",
                "swap_request_id": swap.id,
                "status": swap.status.value,
                "requester_id": swap.requester_id,
                "responder_id": swap.responder_id,
            },
        )
        return swap

    def respond_to_swap(self, responder_id: int, request_id: int, accept: bool) -> SwapOutcome:
        """
        Accept or reject a PENDING request.

        Accept exchanges the owners of both slots (both end BUSY) and rejects
        every other PENDING request touching either slot. Reject returns both
        slots to SWAPPABLE.

        Raises:
            NotFoundError: request missing
            AuthorizationError: caller is not the responder
            StateError: request already resolved, slots no longer locked,
                        or lost a concurrent race
        """
        with atomic(self.db, "respond_to_swap"):
            swap = self.ledger.require(request_id)

            if swap.responder_id != responder_id:
                raise AuthorizationError("Not authorized to respond to this swap request")
            if swap.status != SwapStatus.PENDING:
                raise StateError(f"Swap request {swap.id} is already {swap.status.value}")
            if swap.my_slot_id is None or swap.their_slot_id is None:
                raise StateError(f"Swap request {swap.id} references a deleted slot")

            my_slot = self.slots.require(swap.my_slot_id, fresh=True)
            their_slot = self.slots.require(swap.their_slot_id, fresh=True)
            for slot in (my_slot, their_slot):
                if slot.status != SlotStatus.SWAP_PENDING:
                    logger.warning(
                        f"Swap {swap.id} response refused: slot {slot.id} is {slot.status.value}"
                    )
                    raise StateError(f"Slot {slot.id} is no longer locked for this swap")

            cascaded: list[int] = []
            if accept:
                self.slots.exchange_owners(my_slot, their_slot)
                self.ledger.resolve(swap, SwapStatus.ACCEPTED)
                cascaded = self._invalidate_competing(swap, {my_slot.id, their_slot.id})
            else:
                my_slot.status = SlotStatus.SWAPPABLE
                their_slot.status = SlotStatus.SWAPPABLE
                self.ledger.resolve(swap, SwapStatus.REJECTED)

        outcome = SwapOutcome(
            request=swap,
            my_slot=my_slot,
            their_slot=their_slot,
            cascaded_request_ids=cascaded,
        )
        logger.info(
            f"Swap {swap.id} {swap.status.value} by user {responder_id}"
            + (f"; cascade-rejected {cascaded}" if cascaded else "")
        )
        self._notify(
            SWAP_UPDATED,
            {
                "message": "Swap request resolved",
                "swap_request_id": swap.id,
                "status": swap.status.value,
                "requester_id": swap.requester_id,
                "responder_id": swap.responder_id,
                "cascaded_request_ids": cascaded,
            },
        )
        return outcome

    def _invalidate_competing(self, accepted: SwapRequests, pair: set[int]) -> list[int]:
        """
        Reject every other PENDING request touching a slot of the accepted pair.

        Each rejected request's slots outside the pair go back to SWAPPABLE;
        the pair itself stays BUSY under its new owners.
        """
        competing: dict[int, SwapRequests] = {}
        for slot_id in sorted(pair):
            for other in self.ledger.find_conflicting_pending(slot_id, exclude_id=accepted.id):
                competing[other.id] = other

        for other in competing.values():
            for slot_id in (other.my_slot_id, other.their_slot_id):
                if slot_id is None or slot_id in pair:
                    continue
                slot = self.slots.load_fresh(slot_id)
                if slot and slot.status == SlotStatus.SWAP_PENDING:
                    slot.status = SlotStatus.SWAPPABLE
            self.ledger.resolve(other, SwapStatus.REJECTED)
            logger.info(
                f"Swap {other.id} cascade-rejected: slot pair of swap {accepted.id} changed hands"
            )

        return sorted(competing)

    # ──────────────────────────────────────────────────────────────────────
    # Guarded slot edits
    # ──────────────────────────────────────────────────────────────────────

    def create_slot(self, owner_id: int, title: str, start, end) -> Slots:
        with atomic(self.db, "create_slot"):
            slot = self.slots.create_slot(owner_id, title, start, end)
        return slot

    def update_slot(self, actor_id: int, slot_id: int, fields: dict[str, Any]) -> Slots:
        """
        Owner edit of title/times/status.

        Raises:
            ValidationError: status set to SWAP_PENDING
            StateError: slot is locked by a negotiation
            plus anything SlotStore.update_slot raises
        """
        if fields.get("status") == SlotStatus.SWAP_PENDING:
            raise ValidationError("SWAP_PENDING can only be set by a swap request")

        with atomic(self.db, "update_slot"):
            slot = self.slots.require(slot_id, fresh=True)
            self._ensure_unlocked(slot, actor_id)
            slot = self.slots.update_slot(slot_id, actor_id, fields)

        if "status" in fields:
            self._notify(
                SLOT_UPDATED,
                {"slot_id": slot.id, "status": slot.status.value, "owner_id": slot.owner_id},
            )
        return slot

    def delete_slot(self, actor_id: int, slot_id: int) -> None:
        with atomic(self.db, "delete_slot"):
            slot = self.slots.require(slot_id, fresh=True)
            self._ensure_unlocked(slot, actor_id)
            self.slots.delete_slot(slot_id, actor_id)

    def _ensure_unlocked(self, slot: Slots, actor_id: int) -> None:
        # Ownership first, so non-owners learn nothing about the lock
        if slot.owner_id != actor_id:
            raise AuthorizationError("You do not own this slot")
        if slot.status == SlotStatus.SWAP_PENDING:
            raise StateError("Slot is part of a pending swap and cannot be changed")

    # ──────────────────────────────────────────────────────────────────────

    def _notify(self, event_type: str, payload: dict) -> None:
        self.sink.publish(event_type, payload)

