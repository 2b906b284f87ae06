"""Example usage of the signals package.

This module demonstrates caller-owned slots, signal-owned callbacks, per-instance
signals and what happens when either end of a connection goes away.
"""

from __future__ import annotations

from dataclasses import dataclass
import gc

from . import InstanceSignal, Signal, Slot


# Example 1: Basic signals
class Counter:
    """Simple counter with signals for state changes."""

    incremented = InstanceSignal[int]()
    reset = InstanceSignal[()]()
    pair_updated = InstanceSignal[str, int]()

    def __init__(self, initial: int = 0) -> None:
        self._value = initial

    def increment(self) -> None:
        """Increment the counter and emit the incremented signal."""
        self._value += 1
        self.incremented.emit(self._value)

    def reset_counter(self) -> None:
        """Reset the counter to zero."""
        self._value = 0
        self.reset.emit()

    @property
    def value(self) -> int:
        """Return the current value of the counter."""
        return self._value


# Example 2: Services and listeners holding their own slots


@dataclass
class User:
    """User domain object."""

    id: int
    name: str
    email: str


class UserService:
    """Service handling user operations."""

    user_created = InstanceSignal[User]()
    user_deleted = InstanceSignal[User]()

    def create_user(self, name: str, email: str) -> User:
        """Create a new user and emit creation event."""
        user = User(id=123, name=name, email=email)
        self.user_created.emit(user)
        return user

    def delete_user(self, user: User) -> None:
        """Delete user and emit deletion event."""
        self.user_deleted.emit(user)


class AuditLogger:
    """Audit logger listening to user events for as long as it lives.

    The slots are attributes of the logger, so dropping the logger drops
    its connections as well.
    """

    def __init__(self, user_service: UserService) -> None:
        self.created_slot = Slot[User](self.on_user_created)
        self.deleted_slot = Slot[User](self, AuditLogger.on_user_deleted)
        user_service.user_created.connect(self.created_slot)
        user_service.user_deleted.connect(self.deleted_slot)

    def on_user_created(self, user: User) -> None:
        """Handle user creation events."""
        print(f"AUDIT: User created - ID: {user.id}, Name: {user.name}")

    def on_user_deleted(self, user: User) -> None:
        """Handle user deletion events."""
        print(f"AUDIT: User deleted - ID: {user.id}, Name: {user.name}")


class MetricsCollector:
    """Counts user events."""

    def __init__(self, user_service: UserService) -> None:
        self.users_created = 0
        self.users_deleted = 0
        # Signal-owned callbacks, released together with the service.
        user_service.user_created.connect(self.on_user_created)
        user_service.user_deleted.connect(self.on_user_deleted)

    def on_user_created(self, user: User) -> None:
        """Handle user creation events."""
        self.users_created += 1
        print(f"METRICS: user_created_total={self.users_created}")

    def on_user_deleted(self, user: User) -> None:
        """Handle user deletion events."""
        self.users_deleted += 1
        print(f"METRICS: user_deleted_total={self.users_deleted}")


def demonstrate_basic_signals() -> None:
    """Demonstrate basic signal usage."""
    print("=== Basic Signals Demo ===")

    counter = Counter()

    def on_increment(value: int) -> None:
        print(f"Counter incremented to: {value}")

    def on_reset() -> None:
        print("Counter was reset")

    def on_pair_update(name: str, value: int) -> None:
        print(f"Pair updated: {name} = {value}")

    counter.incremented.connect(on_increment)
    counter.reset.connect(on_reset)
    counter.pair_updated.connect(on_pair_update)

    counter.increment()
    counter.increment()
    counter.pair_updated.emit("test", 42)
    counter.reset_counter()

    counter.incremented.disconnect(on_increment)
    counter.increment()  # Should print nothing


def demonstrate_listener_lifetimes() -> None:
    """Demonstrate listeners and services going away independently."""
    print("\n=== Listener Lifetimes Demo ===")

    user_service = UserService()

    audit = AuditLogger(user_service)
    MetricsCollector(user_service)

    print("\n--- Creating user ---")
    user = user_service.create_user("Alice", "alice@example.com")

    print("\n--- Dropping audit logger ---")
    del audit
    gc.collect()
    user_service.delete_user(user)  # Only metrics reacts

    print(f"user_created listeners left: {len(user_service.user_created)}")


def demonstrate_moves() -> None:
    """Demonstrate moving slots and signals."""
    print("\n=== Moves Demo ===")

    first = Signal[str](name="first")
    slot = Slot[str](lambda text: print(f"received {text!r}"))
    first.connect(slot)

    replacement = slot.move()
    first.emit("after slot move")
    print(f"old slot connected: {slot.connected}, new slot key: {replacement.key}")

    second = first.move()
    second.emit("after signal move")
    print(f"first: {len(first)} connection(s), second: {len(second)} connection(s)")


def main() -> None:
    """Run all demonstrations."""
    demonstrate_basic_signals()
    demonstrate_listener_lifetimes()
    demonstrate_moves()


if __name__ == "__main__":
    main()
