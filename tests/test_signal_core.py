"""Tests for connecting, disconnecting and emitting."""

from __future__ import annotations

import copy
from dataclasses import dataclass
import logging
from typing import Any

import pytest

from slotwire import NO_KEY, Signal, Slot


@dataclass
class Reading:
    """Sensor reading payload."""

    sensor: str
    value: float


@pytest.fixture
def signal() -> Signal[int]:
    """Create a named Signal[int] for testing."""
    return Signal[int](name="test")


def test_emit_reaches_connected_slot_once(signal: Signal[int]):
    """Test a connected slot is called exactly once with the emitted args."""
    calls: list[int] = []
    slot = Slot[int](calls.append)

    signal.connect(slot)
    signal.emit(7)

    assert calls == [7]


def test_disconnect_by_key_stops_delivery(signal: Signal[int]):
    """Test the running-total scenario: disconnecting by key stops delivery."""
    total = 0

    def add(value: int) -> None:
        nonlocal total
        total += value

    s1 = Slot[int](add)
    key = signal.connect(s1)
    signal.emit(5)
    assert total == 5  # noqa: PLR2004

    signal.disconnect(key)
    signal.emit(5)

    assert total == 5  # noqa: PLR2004
    assert not s1.connected
    assert len(signal) == 0


def test_multiple_arguments_and_no_arguments():
    """Test signals with several arguments and with none."""
    pairs: list[tuple[str, int]] = []
    pings: list[str] = []
    pair_signal = Signal[str, int]()
    empty_signal = Signal[()]()

    pair_signal.connect(lambda name, value: pairs.append((name, value)))
    empty_signal.connect(lambda: pings.append("ping"))
    pair_signal.emit("count", 100)
    empty_signal()

    assert pairs == [("count", 100)]
    assert pings == ["ping"]


def test_every_recipient_gets_same_arguments():
    """Test all recipients receive the same argument objects."""
    received: list[Reading] = []
    signal = Signal[Reading]()
    reading = Reading("temp", 21.5)
    signal.connect(received.append)
    signal.connect(received.append)

    signal.emit(reading)

    assert received == [reading, reading]
    assert all(r is reading for r in received)


def test_emit_order_follows_connection_order(signal: Signal[int]):
    """Test slots are called in ascending key order."""
    order: list[str] = []
    slots = [Slot[int](lambda _v, name=name: order.append(name)) for name in "abcd"]
    for slot in slots:
        signal.connect(slot)

    signal.disconnect(slots[1])
    signal.connect(slots[1])
    signal.emit(0)

    assert order == ["a", "c", "d", "b"]


def test_keys_increase_and_are_never_reused(signal: Signal[int]):
    """Test keys are strictly increasing and survive disconnect and clear."""
    first = signal.connect(lambda v: None)
    second = signal.connect(lambda v: None)
    signal.disconnect(second)
    third = signal.connect(lambda v: None)
    signal.clear()
    fourth = signal.connect(lambda v: None)

    assert [first, second, third, fourth] == [1, 2, 3, 4]
    assert signal.sequence == 4  # noqa: PLR2004
    assert signal.keys() == [4]


def test_connect_same_slot_twice_is_idempotent(signal: Signal[int]):
    """Test reconnecting a slot returns its key and does not duplicate delivery."""
    calls: list[int] = []
    slot = Slot[int](calls.append)

    first = signal.connect(slot)
    second = signal.connect(slot)
    signal.emit(1)

    assert first == second
    assert len(signal) == 1
    assert calls == [1]


def test_connect_none_returns_sentinel(signal: Signal[int]):
    """Test connecting None creates nothing."""
    assert signal.connect(None) == NO_KEY
    assert signal.adopt(None) == NO_KEY
    assert len(signal) == 0
    assert signal.sequence == NO_KEY


def test_disconnect_unknown_targets_is_noop(signal: Signal[int]):
    """Test disconnecting unknown keys, None or foreign slots does nothing."""
    other = Signal[int]()
    foreign = Slot[int](lambda v: None)
    other.connect(foreign)
    signal.connect(lambda v: None)

    signal.disconnect(42)
    signal.disconnect(None)
    signal.disconnect(foreign)
    signal.disconnect(Slot[int]())

    assert len(signal) == 1
    assert foreign.signal is other


def test_disconnect_by_callable(signal: Signal[int]):
    """Test disconnecting a plain callable removes every slot holding it."""
    calls: list[int] = []
    kept: list[int] = []
    kept_slot = Slot[int](kept.append)
    signal.connect(calls.append)
    signal.connect(kept_slot)
    signal.connect(calls.append)

    signal.disconnect(calls.append)
    signal.emit(3)

    assert calls == []
    assert kept == [3]
    assert len(signal) == 1


def test_emit_skips_unset_callbacks(signal: Signal[int]):
    """Test slots without callback are connected but silently skipped."""
    calls: list[int] = []
    empty = Slot[int]()
    signal.connect(empty)
    signal.connect(calls.append)

    signal.emit(9)
    empty.set_callback(calls.append)
    signal.emit(10)

    assert calls == [9, 10, 10]


def test_emit_without_connections_is_noop(signal: Signal[int]):
    """Test emitting on an empty signal does nothing."""
    signal.emit(1)
    signal(2)
    assert len(signal) == 0


def test_clear_disconnects_everything(signal: Signal[int]):
    """Test clear severs every back-reference."""
    slots = [Slot[int](lambda v: None) for _ in range(3)]
    for slot in slots:
        signal.connect(slot)

    signal.clear()

    assert len(signal) == 0
    assert all(not slot.connected for slot in slots)
    assert all(slot.key == NO_KEY for slot in slots)


def test_contains_key_and_slot(signal: Signal[int]):
    """Test membership checks by key and by slot."""
    slot = Slot[int](lambda v: None)
    key = signal.connect(slot)

    assert key in signal
    assert slot in signal
    assert Slot[int]() not in signal
    assert key + 1 not in signal


def test_invalid_targets_raise_type_error(signal: Signal[Any]):
    """Test objects that are neither slots nor callables are rejected."""
    with pytest.raises(TypeError, match="expected a Slot or callable"):
        signal.connect(42)  # type: ignore[arg-type]
    with pytest.raises(TypeError, match="expected a Slot"):
        signal.adopt(print)  # type: ignore[arg-type]
    with pytest.raises(TypeError, match="Cannot disconnect"):
        signal.disconnect("nope")  # type: ignore[arg-type]


def test_signal_cannot_be_copied(signal: Signal[int]):
    """Test copying a signal is refused."""
    with pytest.raises(TypeError, match="cannot be copied"):
        copy.copy(signal)
    with pytest.raises(TypeError, match="cannot be copied"):
        copy.deepcopy(signal)


def test_callback_exception_propagates_by_default(signal: Signal[int]):
    """Test a failing callback aborts dispatch and reaches the emitter."""
    calls: list[int] = []

    def fail(value: int) -> None:
        msg = f"bad value {value}"
        raise ValueError(msg)

    signal.connect(fail)
    signal.connect(calls.append)

    with pytest.raises(ValueError, match="bad value 1"):
        signal.emit(1)
    assert calls == []


def test_callback_exception_logged_when_not_raising(caplog: pytest.LogCaptureFixture):
    """Test raise_exceptions=False logs the error and keeps dispatching."""
    calls: list[int] = []
    signal = Signal[int](name="tolerant", raise_exceptions=False)

    def fail(value: int) -> None:
        msg = "boom"
        raise RuntimeError(msg)

    signal.connect(fail)
    signal.connect(calls.append)

    with caplog.at_level(logging.ERROR, logger="slotwire.signals.core"):
        signal.emit(4)

    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert calls == [4]
    assert len(errors) == 1
    assert "raised during emit" in errors[0].getMessage()
    assert "'tolerant'" in errors[0].getMessage()
    assert errors[0].exc_info is not None


def test_operations_are_logged(caplog: pytest.LogCaptureFixture, signal: Signal[int]):
    """Test connect, disconnect and clear leave debug records."""
    with caplog.at_level(logging.DEBUG, logger="slotwire.signals.core"):
        key = signal.connect(lambda v: None)
        signal.disconnect(key)
        signal.connect(lambda v: None)
        signal.clear()

    messages = [record.getMessage() for record in caplog.records]
    assert any("connected key 1 (owned)" in m for m in messages)
    assert any("disconnected key 1" in m for m in messages)
    assert any("cleared 1 connection(s)" in m for m in messages)
