"""Domain events raised by aggregates and published after commit."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime
from uuid import uuid4


@dataclasses.dataclass(frozen=True)
class DomainEvent:
    """Base class for domain events.

    Subclasses should extend this and add their own payload fields.

    Example::

        @dataclasses.dataclass(frozen=True)
        class FundsWithdrawn(DomainEvent):
            account_id: str = ""
            amount: int = 0
    """

    event_id: str = dataclasses.field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = dataclasses.field(
        default_factory=lambda: datetime.now(UTC)
    )

    @property
    def event_type(self) -> str:
        return type(self).__name__


__all__ = ["DomainEvent"]
