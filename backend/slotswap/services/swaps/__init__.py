# backend/slotswap/services/swaps/__init__.py
"""
Swap negotiation module.

SwapLedger owns swap request rows; SwapCoordinator runs the protocol over
SwapLedger and SlotStore inside one transaction per operation.
"""

from .ledger import SwapLedger
from .coordinator import SwapCoordinator, SwapOutcome

__all__ = [
    "SwapLedger",
    "SwapCoordinator",
    "SwapOutcome",
]
