"""Slotwire: signals and slots with safe connection lifetimes."""

__version__ = "0.1.0"

from slotwire.config import SignalConfig
from slotwire.signals import NO_KEY, InstanceSignal, Signal, Slot, SlotCallback, SlotKey

__all__ = [
    # Configuration
    "SignalConfig",
    # Signals
    "NO_KEY",
    "InstanceSignal",
    "Signal",
    "Slot",
    "SlotCallback",
    "SlotKey",
]
