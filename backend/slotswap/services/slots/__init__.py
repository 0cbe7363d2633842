# backend/slotswap/services/slots/__init__.py
"""
Slot storage module.

SlotStore owns slot rows; conflicts holds the time-range overlap rule.
"""

from .store import SlotStore, MUTABLE_FIELDS
from .conflicts import find_overlapping, describe_conflict

__all__ = [
    "SlotStore",
    "MUTABLE_FIELDS",
    "find_overlapping",
    "describe_conflict",
]
