"""AggregateRoot — owns domain events until the unit of work collects them."""

from __future__ import annotations

from mp_mediator.kernel.ddd.domain_event import DomainEvent


class AggregateRoot:
    """Aggregate root: records domain events raised by state changes."""

    _version: int
    _events: list[DomainEvent]

    def __init__(self, id: str) -> None:  # noqa: A002
        self.id = id
        self._version = 0
        self._events = []

    def _raise_event(self, event: DomainEvent) -> None:
        """Record a domain event and bump the version."""
        self._events.append(event)
        self._version += 1

    def pull_events(self) -> list[DomainEvent]:
        """Return and clear pending domain events."""
        events = list(self._events)
        self._events.clear()
        return events

    @property
    def version(self) -> int:
        return self._version


__all__ = ["AggregateRoot"]
