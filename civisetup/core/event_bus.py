"""
Event Bus - Priority-ordered phase dispatch.

This module implements the dispatcher that every plugin registers against:
- Listeners are registered per phase name with an integer priority
- Higher priority executes first, ties run in registration order
- The same event object is handed to each listener and returned

Five conventional priority bands let unrelated plugins interleave without
knowing about each other.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

PRIORITY_START = 2000
PRIORITY_PREPARE = 1000
PRIORITY_MAIN = 0
PRIORITY_LATE = -1000
PRIORITY_END = -2000


class EventBusError(Exception):
    """Base exception for event bus errors."""

    pass


class RegistrationError(EventBusError):
    """Raised when listener registration fails."""

    pass


@dataclass
class Listener:
    """
    Represents a registered phase listener.

    Attributes:
        callback: The listener function, called with the event
        priority: Higher priority executes first
        registration_order: Tie-breaker for same priority (lower = earlier)
    """

    callback: Callable[[Any], Any]
    priority: int
    registration_order: int

    def __call__(self, event: Any) -> None:
        """Execute the listener."""
        self.callback(event)


class EventBus:
    """
    Synchronous phase dispatcher.

    Listener exceptions are not caught: the first failure aborts the
    dispatch and reaches the caller unchanged.
    """

    def __init__(self):
        # phase name -> listeners in registration order
        self._routes: dict[str, list[Listener]] = {}

        # Registration order counter for tie-breaking
        self._registration_counter = 0

    def _next_registration_order(self) -> int:
        """Get next registration order number."""
        order = self._registration_counter
        self._registration_counter += 1
        return order

    def _sort_listeners(self, listeners: list[Listener]) -> list[Listener]:
        """
        Sort listeners by priority (descending) and registration order (ascending).
        """
        return sorted(listeners, key=lambda e: (-e.priority, e.registration_order))

    def on(
        self, phase_name: str, priority: int, listener: Callable[[Any], Any]
    ) -> None:
        """
        Register a listener for a phase.

        Args:
            phase_name: Fully qualified phase name, e.g. 'civi.setup.init'
            priority: Execution priority (higher = earlier)
            listener: Callable taking the phase event

        Raises:
            RegistrationError: If listener is not callable
        """
        if not callable(listener):
            raise RegistrationError(
                f"Listener for '{phase_name}' must be callable. Got: {listener!r}"
            )

        entry = Listener(
            callback=listener,
            priority=int(priority),
            registration_order=self._next_registration_order(),
        )
        self._routes.setdefault(phase_name, []).append(entry)

    def listener(self, phase_name: str, priority: int = PRIORITY_MAIN):
        """
        Decorator form of on().

        Example:
            @bus.listener('civi.setup.checkRequirements', PRIORITY_LATE)
            def check_python(event):
                event.add_info('system', 'python', 'Python is available')
        """

        def decorator(func: Callable) -> Callable:
            self.on(phase_name, priority, func)
            return func

        return decorator

    def off(self, phase_name: str, listener: Callable[[Any], Any]) -> None:
        """
        Remove every registration of listener from a phase.

        Removing a listener that was never registered is a no-op.
        """
        entries = self._routes.get(phase_name)
        if not entries:
            return

        # Equality, not identity: each attribute access builds a new bound method
        remaining = [e for e in entries if e.callback != listener]
        if remaining:
            self._routes[phase_name] = remaining
        else:
            del self._routes[phase_name]

    def get_listeners(self, phase_name: str | None = None):
        """
        Get listener callables in dispatch order.

        Args:
            phase_name: Phase to inspect, or None for every phase

        Returns:
            A list of callables for one phase, or a dict of
            phase name -> list of callables when phase_name is None
        """
        if phase_name is None:
            return {
                name: [e.callback for e in self._sort_listeners(entries)]
                for name, entries in sorted(self._routes.items())
            }

        return [e.callback for e in self._sort_listeners(self._routes.get(phase_name, []))]

    def has_listeners(self, phase_name: str | None = None) -> bool:
        """Check whether a phase (or any phase) has listeners."""
        if phase_name is None:
            return bool(self._routes)
        return bool(self._routes.get(phase_name))

    def dispatch(self, phase_name: str, event: Any) -> Any:
        """
        Dispatch an event to every listener of a phase.

        Listeners run in priority order and may mutate the event. If the
        event supports is_propagation_stopped() and a listener stops it,
        lower-priority listeners are skipped.

        Args:
            phase_name: The phase identifier
            event: The event object passed to each listener

        Returns:
            The same event instance
        """
        listeners = self._sort_listeners(self._routes.get(phase_name, []))

        is_stopped = getattr(event, "is_propagation_stopped", None)
        for entry in listeners:
            entry(event)
            if is_stopped is not None and is_stopped():
                break

        return event
