"""Core signal and slot classes.

A `Signal` keeps a registry of connections and fans `emit` out to every
connected `Slot`. A slot can be connected to at most one signal at a time, and
either side may go away first without leaving the other one dangling.

Neither class does any locking. All operations on a signal and its slots must
happen on one thread, or be serialized by the caller.
"""

from __future__ import annotations

from collections.abc import Callable
import functools
import logging
from typing import TYPE_CHECKING, Any, Self, overload

from slotwire.config import SignalConfig
from slotwire.signals.connection import NO_KEY, Connection, SlotKey


if TYPE_CHECKING:
    from collections.abc import Iterator


logger = logging.getLogger(__name__)

type SlotCallback[*Ts] = Callable[[*Ts], Any]


class Slot[*Ts]:
    """Holder of one callback, connectable to at most one signal.

    Example:
        total = 0

        def add(value: int) -> None:
            nonlocal total
            total += value

        slot = Slot[int](add)
        key = signal.connect(slot)

    A slot connected by reference stays owned by the caller. Once it is
    garbage collected, its connection disappears from the signal.
    """

    __slots__ = ("__weakref__", "_callback", "_connection")

    @overload
    def __init__(self, callback: SlotCallback[*Ts] | None = None, /) -> None: ...

    @overload
    def __init__[T](self, target: T, method: Callable[[T, *Ts], Any], /) -> None: ...

    def __init__(self, callback: Any = None, method: Any = None, /) -> None:
        self._callback: SlotCallback[*Ts] | None = None
        self._connection: Connection | None = None
        self.set_callback(callback, method)

    def __repr__(self) -> str:
        name = getattr(self._callback, "__qualname__", None) or repr(self._callback)
        return f"Slot({name}, key={self.key})"

    def __call__(self, *args: *Ts) -> None:
        if self._callback is not None:
            self._callback(*args)

    def __copy__(self) -> Self:
        return type(self)(self._callback)

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return self.__copy__()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect()

    @overload
    def set_callback(self, callback: SlotCallback[*Ts] | None, /) -> None: ...

    @overload
    def set_callback[T](self, target: T, method: Callable[[T, *Ts], Any], /) -> None: ...

    def set_callback(self, callback: Any, method: Any = None, /) -> None:
        """Replace the callback. The connection, if any, is left untouched.

        Args:
            callback: A callable, None to unset, or the target object when
                `method` is given.
            method: Function taking the target as its first argument, e.g.
                `Widget.refresh`. It gets bound to the target.
        """
        if method is not None:
            if not callable(method):
                msg = f"Slot method must be callable, got {type(method).__name__}"
                raise TypeError(msg)
            self._callback = functools.partial(method, callback)
            return
        if callback is not None and not callable(callback):
            msg = f"Slot callback must be callable, got {type(callback).__name__}"
            raise TypeError(msg)
        self._callback = callback

    @property
    def callback(self) -> SlotCallback[*Ts] | None:
        return self._callback

    @callback.setter
    def callback(self, value: SlotCallback[*Ts] | None) -> None:
        self.set_callback(value)

    @property
    def connected(self) -> bool:
        return self._connection is not None

    @property
    def key(self) -> SlotKey:
        """Key of the current connection, or NO_KEY."""
        return NO_KEY if self._connection is None else self._connection.key

    @property
    def signal(self) -> Signal[*Ts] | None:
        """The signal this slot is connected to."""
        return None if self._connection is None else self._connection.registry

    @property
    def owned(self) -> bool:
        """Whether the connected signal is responsible for this slot."""
        return self._connection is not None and self._connection.owns_slot

    def disconnect(self) -> None:
        """Disconnect from the current signal. No-op when not connected."""
        if (connection := self._connection) is None:
            return
        if (registry := connection.registry) is None:
            self._connection = None
            return
        registry.disconnect(self)

    def copy(self) -> Self:
        """Return an unconnected slot sharing this slot's callback."""
        return self.__copy__()

    def move(self) -> Self:
        """Move this slot's callback and connection into a new slot.

        The connection, if any, now refers to the returned slot, which counts
        as caller-owned. This slot is left empty and unconnected.
        """
        destination = type(self)()
        destination._take(self)
        return destination

    def move_from(self, source: Slot[*Ts]) -> Self:
        """Disconnect this slot, then take over `source`'s callback and connection."""
        if source is not self:
            self.disconnect()
            self._take(source)
        return self

    def _take(self, source: Slot[*Ts]) -> None:
        self._callback, source._callback = source._callback, None
        if (connection := source._connection) is not None:
            connection.repoint(self)


class Signal[*Ts]:
    """Registry of slot connections and fan-out dispatch point.

    Connections are stored under keys issued in increasing order and never
    reused. `emit` delivers to slots in key order.

    Example:
        sig = Signal[int](name="progress")
        key = sig.connect(lambda value: print(value))
        sig.emit(5)
        sig.disconnect(key)

    Not thread-safe: connect, disconnect and emit must not run concurrently.
    """

    __slots__ = ("__weakref__", "_config", "_connections", "_sequence")

    def __init__(
        self,
        config: SignalConfig | None = None,
        *,
        name: str | None = None,
        raise_exceptions: bool | None = None,
    ) -> None:
        """Create an empty signal.

        Args:
            config: Signal options. Defaults to `SignalConfig()`.
            name: Shortcut overriding `config.name`.
            raise_exceptions: Shortcut overriding `config.raise_exceptions`.
        """
        base = config or SignalConfig()
        self._config = base.merged(name=name, raise_exceptions=raise_exceptions)
        self._connections: dict[SlotKey, Connection] = {}
        self._sequence: SlotKey = NO_KEY

    def __del__(self) -> None:
        # Partially constructed signals have no registry yet.
        if (connections := getattr(self, "_connections", None)) is not None:
            _release_all(connections)

    def __repr__(self) -> str:
        label = f"{self.name!r}, " if self.name else ""
        return f"Signal({label}connections={len(self._connections)})"

    def __call__(self, *args: *Ts) -> None:
        self.emit(*args)

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Slot):
            connection = item._connection
            return connection is not None and connection.registry is self
        return item in self._connections

    def __copy__(self) -> Self:
        msg = "Signals cannot be copied, use move() to transfer connections"
        raise TypeError(msg)

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return self.__copy__()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.clear()

    @property
    def config(self) -> SignalConfig:
        return self._config

    @property
    def name(self) -> str | None:
        return self._config.name

    @property
    def sequence(self) -> SlotKey:
        """Last key issued by this signal (NO_KEY if none yet)."""
        return self._sequence

    def keys(self) -> list[SlotKey]:
        """Keys of all live connections, in ascending order."""
        return list(self._connections)

    def slots(self) -> Iterator[Slot[*Ts]]:
        """Yield the live connected slots in key order."""
        for connection in list(self._connections.values()):
            if (slot := connection.slot) is not None:
                yield slot

    def connect(self, slot: Slot[*Ts] | SlotCallback[*Ts] | None) -> SlotKey:
        """Connect a slot or a plain callable.

        A `Slot` instance stays owned by the caller and is only weakly
        referenced. Connecting it again returns its existing key. If it is
        connected to another signal, it is disconnected there first. Since only
        a weak reference is kept, pass a temporary Slot to `adopt`, not
        `connect`, or it is dropped again as soon as it is collected.

        A plain callable is wrapped in a slot owned by this signal, released
        again on disconnect, clear or when the signal goes away.

        Returns:
            The connection key, or NO_KEY when `slot` is None.
        """
        match slot:
            case None:
                return NO_KEY
            case Slot():
                return self._connect(slot, owned=False)
            case _ if callable(slot):
                return self._connect(Slot(slot), owned=True)
            case _:
                msg = f"Cannot connect {type(slot).__name__!r}, expected a Slot or callable"
                raise TypeError(msg)

    def adopt(self, slot: Slot[*Ts] | None) -> SlotKey:
        """Connect a slot by value.

        The slot's callback and connection move into a new slot owned by this
        signal; `slot` itself is left empty and unconnected.
        """
        if slot is None:
            return NO_KEY
        if not isinstance(slot, Slot):
            msg = f"Cannot adopt {type(slot).__name__!r}, expected a Slot"
            raise TypeError(msg)
        return self._connect(slot.move(), owned=True)

    def disconnect(self, target: SlotKey | Slot[*Ts] | SlotCallback[*Ts] | None) -> None:
        """Remove a connection by key, by slot or by callback.

        Unknown keys, slots connected elsewhere and None are ignored. Passing
        a callable removes every connection whose slot holds that callable.
        """
        match target:
            case None:
                return
            case Slot():
                connection = target._connection
                if connection is not None and connection.registry is self:
                    self._release(connection.key)
            case int():
                self._release(target)
            case _ if callable(target):
                matching = [
                    key
                    for key, connection in self._connections.items()
                    if (slot := connection.slot) is not None and slot.callback == target
                ]
                for key in matching:
                    self._release(key)
            case _:
                msg = f"Cannot disconnect {type(target).__name__!r}"
                raise TypeError(msg)

    def clear(self) -> None:
        """Disconnect every slot. Keys issued so far are not reused afterwards."""
        count = len(self._connections)
        _release_all(self._connections)
        if count:
            logger.debug("%s: cleared %d connection(s)", self, count)

    def emit(self, *args: *Ts) -> None:
        """Call every connected slot with `args`, in key order.

        Slots connected while emitting are not called by this emit. Slots
        disconnected while emitting are skipped if not yet reached.
        """
        snapshot = list(self._connections.items())
        for key, connection in snapshot:
            if self._connections.get(key) is not connection:
                continue
            slot = connection.slot
            if slot is None or (callback := slot.callback) is None:
                continue
            try:
                callback(*args)
            except Exception:
                if self._config.raise_exceptions:
                    raise
                logger.exception("%s: slot %d raised during emit", self, key)

    def move(self) -> Self:
        """Move all connections into a new signal and reset this one.

        This signal ends up empty and with its key sequence back at zero.
        """
        destination = type(self)(self._config)
        destination._take(self)
        return destination

    def move_from(self, source: Signal[*Ts]) -> Self:
        """Clear this signal, then take over all of `source`'s connections."""
        if source is not self:
            self.clear()
            self._take(source)
        return self

    def _take(self, source: Signal[*Ts]) -> None:
        self._connections.update(source._connections)
        self._sequence = source._sequence
        for connection in self._connections.values():
            connection.retarget(self)
        source._connections.clear()
        source._sequence = NO_KEY
        logger.debug("%s: took %d connection(s) from %s", self, len(self), source)

    def _connect(self, slot: Slot[*Ts], *, owned: bool) -> SlotKey:
        if (current := slot._connection) is not None:
            if current.registry is self:
                if owned and not current.owns_slot:
                    current.take_ownership()
                return current.key
            if current.owns_slot:
                # Hand the slot over instead of releasing it with the old connection.
                current.repoint(slot)
            slot.disconnect()
        self._sequence += 1
        key = self._sequence
        self._connections[key] = Connection(self, slot, key, owned=owned)
        logger.debug("%s: connected key %d (%s)", self, key, "owned" if owned else "borrowed")
        return key

    def _release(self, key: SlotKey) -> None:
        if (connection := self._connections.pop(key, None)) is None:
            return
        connection.sever()
        logger.debug("%s: disconnected key %d", self, key)

    def _discard(self, key: SlotKey, connection: Connection) -> None:
        """Forget a connection whose borrowed slot was garbage collected."""
        if self._connections.get(key) is connection:
            del self._connections[key]
            logger.debug("%s: dropped key %d, slot was collected", self, key)


def _release_all(connections: dict[SlotKey, Connection]) -> None:
    pending = list(connections.values())
    connections.clear()
    for connection in pending:
        connection.sever()
