"""Signal/slot connections with explicit lifetime handling.

Either end of a connection may go away first. A signal clears its connections
when it is destroyed, and a slot that is garbage collected drops out of its
signal's registry.

Example:
    # Caller-owned slot
    progress = Signal[int]()
    slot = Slot[int](lambda value: print(f"{value}%"))
    key = progress.connect(slot)
    progress.emit(50)

    # Signal-owned callback, no storage needed on the caller side
    progress.connect(lambda value: print("tick"))

    # One signal per instance
    class Download:
        finished = InstanceSignal[str]()
"""

from __future__ import annotations

from .connection import NO_KEY, SlotKey
from .core import Signal, Slot, SlotCallback
from .descriptor import InstanceSignal

__all__ = [
    "NO_KEY",
    "InstanceSignal",
    "Signal",
    "Slot",
    "SlotCallback",
    "SlotKey",
]
