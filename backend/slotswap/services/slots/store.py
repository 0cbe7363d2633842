# backend/slotswap/services/slots/store.py
"""
Slot storage.

Owns slot rows: create/read/update/delete plus the global time-range
conflict check. Methods flush but never commit; the caller (the swap
coordinator) owns the transaction boundary.

The store does not decide which status values a caller may write and does
not look at SWAP_PENDING on its own. That policy belongs to the coordinator.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session, joinedload

from ...models import SlotStatus, Slots
from ..errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .conflicts import describe_conflict, find_overlapping

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = ("title", "start_time", "end_time", "status")


def _check_range(start: datetime, end: datetime) -> None:
    if start is None or end is None:
        raise ValidationError("start_time and end_time are required")
    if start >= end:
        raise ValidationError("start_time must be before end_time")


class SlotStore:
    """Repository for slot rows bound to one session."""

    def __init__(self, db: Session):
        self.db = db

    # ── Read ─────────────────────────────────────────────────────────────

    def get(self, slot_id: int) -> Optional[Slots]:
        return self.db.get(Slots, slot_id)

    def load_fresh(self, slot_id: int) -> Optional[Slots]:
        """
        Re-read a slot from storage, overwriting any cached state.

        Takes a row lock on backends that support SELECT ... FOR UPDATE.
        """
        return self.db.get(
            Slots,
            slot_id,
            populate_existing=True,
            with_for_update=True,
        )

    def require(self, slot_id: int, fresh: bool = False) -> Slots:
        slot = self.load_fresh(slot_id) if fresh else self.get(slot_id)
        if not slot:
            raise NotFoundError(f"Slot {slot_id} not found")
        return slot

    def list_owned_by(self, user_id: int) -> list[Slots]:
        return (
            self.db.query(Slots)
            .options(joinedload(Slots.owner))
            .filter(Slots.owner_id == user_id)
            .order_by(Slots.start_time.asc(), Slots.id.asc())
            .all()
        )

    def list_not_owned_by(self, user_id: int) -> list[Slots]:
        return (
            self.db.query(Slots)
            .options(joinedload(Slots.owner))
            .filter(Slots.owner_id != user_id)
            .order_by(Slots.start_time.asc(), Slots.id.asc())
            .all()
        )

    def list_swappable(self, viewer_id: int) -> list[Slots]:
        """SWAPPABLE slots of everyone but the viewer, earliest first."""
        return (
            self.db.query(Slots)
            .options(joinedload(Slots.owner))
            .filter(Slots.owner_id != viewer_id)
            .filter(Slots.status == SlotStatus.SWAPPABLE)
            .order_by(Slots.start_time.asc(), Slots.id.asc())
            .all()
        )

    # ── Write ────────────────────────────────────────────────────────────

    def create_slot(
        self,
        owner_id: int,
        title: str,
        start: datetime,
        end: datetime,
    ) -> Slots:
        """
        Create a BUSY slot for owner.

        Raises:
            ValidationError: blank title or start >= end
            ConflictError: any existing slot overlaps [start, end)
        """
        if not title or not title.strip():
            raise ValidationError("Title is required")
        _check_range(start, end)

        conflict = find_overlapping(self.db, start, end)
        if conflict:
            message, detail = describe_conflict(conflict)
            logger.warning(
                f"Slot create by user {owner_id} rejected: overlaps slot {conflict.id}"
            )
            raise ConflictError(message, detail)

        slot = Slots(
            owner_id=owner_id,
            title=title.strip(),
            start_time=start,
            end_time=end,
            status=SlotStatus.BUSY,
        )
        self.db.add(slot)
        self.db.flush()

        logger.info(f"Slot {slot.id} created by user {owner_id}")
        return slot

    def update_slot(self, slot_id: int, actor_id: int, fields: dict[str, Any]) -> Slots:
        """
        Apply a partial update on behalf of the owner.

        Raises:
            NotFoundError, AuthorizationError,
            ValidationError: unknown field, blank title, start >= end
            ConflictError: new range overlaps another slot
        """
        slot = self.require(slot_id)
        if slot.owner_id != actor_id:
            raise AuthorizationError("You do not own this slot")

        fields = dict(fields)
        unknown = set(fields) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields not updatable: {', '.join(sorted(unknown))}")

        nulled = [name for name in ("start_time", "end_time", "status")
                  if name in fields and fields[name] is None]
        if nulled:
            raise ValidationError(f"Fields cannot be null: {', '.join(nulled)}")

        if "title" in fields:
            title = fields["title"]
            if not title or not str(title).strip():
                raise ValidationError("Title is required")
            fields["title"] = str(title).strip()

        start = fields.get("start_time", slot.start_time)
        end = fields.get("end_time", slot.end_time)
        if "start_time" in fields or "end_time" in fields:
            _check_range(start, end)
            conflict = find_overlapping(self.db, start, end, exclude_id=slot.id)
            if conflict:
                message, detail = describe_conflict(conflict)
                raise ConflictError(message, detail)

        for field, value in fields.items():
            setattr(slot, field, value)

        self.db.flush()
        logger.info(f"Slot {slot.id} updated by user {actor_id}: {sorted(fields)}")
        return slot

    def delete_slot(self, slot_id: int, actor_id: int) -> None:
        slot = self.require(slot_id)
        if slot.owner_id != actor_id:
            raise AuthorizationError("You do not own this slot")

        self.db.delete(slot)
        self.db.flush()
        logger.info(f"Slot {slot_id} deleted by user {actor_id}")

    def exchange_owners(self, first: Slots, second: Slots) -> None:
        """Swap owners between two slots; both become BUSY."""
        first.owner, second.owner = second.owner, first.owner
        first.status = SlotStatus.BUSY
        second.status = SlotStatus.BUSY
