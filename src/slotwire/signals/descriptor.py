"""Class-level signal declarations."""

from __future__ import annotations

from typing import Self, overload
from weakref import WeakKeyDictionary

from slotwire.config import SignalConfig
from slotwire.signals.core import Signal


class InstanceSignal[*Ts]:
    """Descriptor: define at class level, get a Signal per instance.

    Example:
        class Document:
            saved = InstanceSignal[str]()

        doc = Document()
        doc.saved.connect(lambda path: print(f"saved {path}"))
        doc.saved.emit("/tmp/report.txt")

    Each instance's signal is created on first access and cleared once the
    instance is garbage collected.
    """

    __slots__ = ("_config", "_name", "_signals")

    def __init__(
        self, config: SignalConfig | None = None, *, raise_exceptions: bool | None = None
    ) -> None:
        self._name: str = ""
        self._config = (config or SignalConfig()).merged(raise_exceptions=raise_exceptions)
        self._signals: WeakKeyDictionary[object, Signal[*Ts]] = WeakKeyDictionary()

    def __set_name__(self, owner: type, name: str) -> None:
        self._name = name

    @overload
    def __get__(self, obj: None, owner: type | None = None) -> Self: ...

    @overload
    def __get__(self, obj: object, owner: type | None = None) -> Signal[*Ts]: ...

    def __get__(self, obj: object | None, owner: type | None = None) -> Signal[*Ts] | Self:
        if obj is None:
            return self
        if obj not in self._signals:
            self._signals[obj] = Signal(self._config.merged(name=self._config.name or self._name))
        return self._signals[obj]

    @property
    def name(self) -> str:
        return self._name
