# backend/slotswap/services/slots/conflicts.py
"""
Time-range conflict detection.

Two ranges overlap when ``existing.start < end AND existing.end > start``.
Touching ranges (one ends exactly when the other starts) do not overlap.
The check is global: a slot conflicts with every other slot regardless of
owner.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Slots


def find_overlapping(
    db: Session,
    start: datetime,
    end: datetime,
    exclude_id: Optional[int] = None,
) -> Optional[Slots]:
    """Earliest slot overlapping [start, end), or None."""
    query = (
        db.query(Slots)
        .options(joinedload(Slots.owner))
        .filter(Slots.start_time < end)
        .filter(Slots.end_time > start)
    )
    if exclude_id is not None:
        query = query.filter(Slots.id != exclude_id)
    return query.order_by(Slots.start_time.asc()).first()


def describe_conflict(conflict: Slots) -> tuple[str, dict]:
    """
    Build the user-facing message and structured detail for a conflict.

    ``next_available`` is the end of the conflicting slot, the earliest
    instant a new slot could start without overlapping it.
    """
    owner_name = conflict.owner.name if conflict.owner else "another user"
    start_str = conflict.start_time.strftime("%H:%M")
    end_str = conflict.end_time.strftime("%H:%M")

    message = (
        f'This slot is already booked by {owner_name} for "{conflict.title}" '
        f"from {start_str} to {end_str}. "
        f"Next available slot starts after {end_str}."
    )
    detail = {
        "slot_id": conflict.id,
        "title": conflict.title,
        "start_time": conflict.start_time.isoformat(),
        "end_time": conflict.end_time.isoformat(),
        "owner_id": conflict.owner_id,
        "next_available": conflict.end_time.isoformat(),
    }
    return message, detail
