# backend/slotswap/services/swaps/ledger.py
"""
Swap request ledger.

Owns swap_requests rows and their lifecycle PENDING -> ACCEPTED | REJECTED.
Resolved requests are kept with their terminal status and resolved_at;
they are never deleted, so outgoing/incoming history stays queryable.

Like the slot store, the ledger flushes and leaves commit to the caller.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session, joinedload

from ...models import Slots, SwapRequests, SwapStatus
from ..errors import NotFoundError, StateError, ValidationError

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (SwapStatus.ACCEPTED, SwapStatus.REJECTED)


class SwapLedger:
    """Repository for swap request rows bound to one session."""

    def __init__(self, db: Session):
        self.db = db

    def _populated(self) -> Query:
        return self.db.query(SwapRequests).options(
            joinedload(SwapRequests.my_slot).joinedload(Slots.owner),
            joinedload(SwapRequests.their_slot).joinedload(Slots.owner),
            joinedload(SwapRequests.requester),
            joinedload(SwapRequests.responder),
        )

    # ── Read ─────────────────────────────────────────────────────────────

    def find_by_id(self, request_id: int) -> Optional[SwapRequests]:
        return (
            self._populated()
            .filter(SwapRequests.id == request_id)
            .populate_existing()
            .first()
        )

    def require(self, request_id: int) -> SwapRequests:
        swap = self.find_by_id(request_id)
        if not swap:
            raise NotFoundError(f"Swap request {request_id} not found")
        return swap

    def list_incoming(self, user_id: int) -> list[SwapRequests]:
        """PENDING requests waiting on user's answer, newest first."""
        return (
            self._populated()
            .filter(SwapRequests.responder_id == user_id)
            .filter(SwapRequests.status == SwapStatus.PENDING)
            .order_by(SwapRequests.created_at.desc(), SwapRequests.id.desc())
            .all()
        )

    def list_outgoing(self, user_id: int) -> list[SwapRequests]:
        """PENDING requests user has sent, newest first."""
        return (
            self._populated()
            .filter(SwapRequests.requester_id == user_id)
            .filter(SwapRequests.status == SwapStatus.PENDING)
            .order_by(SwapRequests.created_at.desc(), SwapRequests.id.desc())
            .all()
        )

    def list_history(self, user_id: int, limit: int = 50, offset: int = 0) -> list[SwapRequests]:
        """Every request user took part in, any status, newest first."""
        return (
            self._populated()
            .filter(
                or_(
                    SwapRequests.requester_id == user_id,
                    SwapRequests.responder_id == user_id,
                )
            )
            .order_by(SwapRequests.created_at.desc(), SwapRequests.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def find_conflicting_pending(
        self,
        slot_id: int,
        exclude_id: Optional[int] = None,
    ) -> list[SwapRequests]:
        """PENDING requests referencing slot_id on either side."""
        query = (
            self.db.query(SwapRequests)
            .filter(SwapRequests.status == SwapStatus.PENDING)
            .filter(
                or_(
                    SwapRequests.my_slot_id == slot_id,
                    SwapRequests.their_slot_id == slot_id,
                )
            )
        )
        if exclude_id is not None:
            query = query.filter(SwapRequests.id != exclude_id)
        return query.order_by(SwapRequests.id.asc()).all()

    # ── Write ────────────────────────────────────────────────────────────

    def create_pending(
        self,
        my_slot: Slots,
        their_slot: Slots,
        requester_id: int,
        responder_id: int,
    ) -> SwapRequests:
        """Persist one PENDING request and return it with slots/users loaded."""
        if my_slot.id == their_slot.id:
            raise ValidationError("A slot cannot be swapped with itself")

        swap = SwapRequests(
            my_slot_id=my_slot.id,
            their_slot_id=their_slot.id,
            requester_id=requester_id,
            responder_id=responder_id,
            status=SwapStatus.PENDING,
        )
        self.db.add(swap)
        self.db.flush()

        logger.info(
            f"Swap request {swap.id} recorded: slot {my_slot.id} (user {requester_id}) "
            f"for slot {their_slot.id} (user {responder_id})"
        )
        return self.require(swap.id)

    def resolve(self, swap: SwapRequests, outcome: SwapStatus) -> SwapRequests:
        """Move a PENDING request to its terminal status."""
        if outcome not in TERMINAL_STATUSES:
            raise ValidationError(f"Unsupported swap outcome: {outcome}")
        if swap.status != SwapStatus.PENDING:
            raise StateError(f"Swap request {swap.id} is already {swap.status.value}")

        swap.status = outcome
        swap.resolved_at = datetime.utcnow()
        self.db.flush()

        logger.info(f"Swap request {swap.id} resolved as {outcome.value}")
        return swap
