from .tables import Base, metadata, SlotStatus, SwapStatus, Users, Slots, SwapRequests

__all__ = [
    "Base",
    "metadata",
    "SlotStatus",
    "SwapStatus",
    "Users",
    "Slots",
    "SwapRequests",
]
