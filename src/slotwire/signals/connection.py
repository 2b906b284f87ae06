"""Connection records binding a signal registry to a slot.

Connections are package-internal. A `Signal` creates them, stores them in its
registry and is the only thing allowed to destroy them. A `Slot` merely keeps a
back-reference to its current connection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final
import weakref


if TYPE_CHECKING:
    from .core import Signal, Slot


type SlotKey = int

NO_KEY: Final[SlotKey] = 0
"""Key returned when nothing was connected. Never issued by a real connect."""


@dataclass(slots=True)
class Owned:
    """The registry holds the slot and releases it with the connection."""

    slot: Slot

    def resolve(self) -> Slot | None:
        return self.slot


@dataclass(slots=True)
class Borrowed:
    """The caller holds the slot; the registry only keeps a weak handle."""

    ref: weakref.ref[Slot]

    def resolve(self) -> Slot | None:
        return self.ref()


type Ownership = Owned | Borrowed


class Connection:
    """Edge between one signal and one slot, stored under `key`."""

    __slots__ = ("_registry", "key", "ownership")

    def __init__(self, registry: Signal, slot: Slot, key: SlotKey, *, owned: bool) -> None:
        self._registry = weakref.ref(registry)
        self.key = key
        self.ownership: Ownership | None = Owned(slot) if owned else self._borrow(slot)
        slot._connection = self

    def __repr__(self) -> str:
        kind = type(self.ownership).__name__ if self.ownership else "Severed"
        return f"Connection(key={self.key}, {kind})"

    @property
    def registry(self) -> Signal | None:
        return self._registry()

    @property
    def slot(self) -> Slot | None:
        """The bound slot, or None once severed or once a borrowed slot is gone."""
        if self.ownership is None:
            return None
        return self.ownership.resolve()

    @property
    def owns_slot(self) -> bool:
        return isinstance(self.ownership, Owned)

    def sever(self) -> None:
        """Drop the slot's back-reference and release it if the registry owns it."""
        slot = self.slot
        if slot is not None and slot._connection is self:
            slot._connection = None
            if isinstance(self.ownership, Owned):
                slot._callback = None
        self.ownership = None

    def repoint(self, slot: Slot) -> None:
        """Bind this connection to `slot`, which is caller-owned from now on.

        The previous slot loses its back-reference. If it was owned, the
        registry just stops referencing it; nothing is released here.
        """
        previous = self.slot
        if previous is not None and previous is not slot and previous._connection is self:
            previous._connection = None
        self.ownership = self._borrow(slot)
        slot._connection = self

    def take_ownership(self) -> None:
        """Switch a borrowed slot to registry-owned."""
        if (slot := self.slot) is not None:
            self.ownership = Owned(slot)

    def retarget(self, registry: Signal) -> None:
        self._registry = weakref.ref(registry)

    def _borrow(self, slot: Slot) -> Borrowed:
        return Borrowed(weakref.ref(slot, self._on_slot_collected))

    def _on_slot_collected(self, ref: weakref.ref[Slot]) -> None:
        # Stale handles from before a repoint or sever must not touch the registry.
        if not isinstance(self.ownership, Borrowed) or self.ownership.ref is not ref:
            return
        self.ownership = None
        if (registry := self.registry) is not None:
            registry._discard(self.key, self)
