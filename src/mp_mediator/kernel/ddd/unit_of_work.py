"""Unit of Work port — transactional boundary with an explicit lifecycle.

A unit of work moves ``OPEN`` → (``COMMITTED`` | ``ROLLED_BACK``) →
``RELEASED``. Subclasses implement the storage-specific ``_commit``,
``_rollback`` and ``_release`` hooks; the public methods own the state
transitions.

``async with uow`` is scoped acquisition only: leaving the block releases
the unit of work but never commits or rolls it back. When the block
exits with an error, a release failure is logged and the block error
propagates.
"""

from __future__ import annotations

import abc
import enum
from typing import Any, Protocol
from uuid import uuid4

from mp_mediator.kernel.ddd.domain_event import DomainEvent
from mp_mediator.kernel.errors import TransactionStateError
from mp_mediator.observability.logging import get_logger

_log = get_logger(__name__)


class UnitOfWorkState(str, enum.Enum):
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    RELEASED = "released"


class EventSource(Protocol):
    """Anything that hands out pending domain events (e.g. an aggregate)."""

    def pull_events(self) -> list[DomainEvent]: ...


class UnitOfWork(abc.ABC):
    """Port: transactional unit of work."""

    def __init__(self, id: str | None = None) -> None:  # noqa: A002
        self._id = id or uuid4().hex
        self._state = UnitOfWorkState.OPEN
        self._events: list[DomainEvent] = []
        self._sources: list[EventSource] = []

    @property
    def id(self) -> str:
        return self._id

    @property
    def state(self) -> UnitOfWorkState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is UnitOfWorkState.OPEN

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def commit(self) -> None:
        """Persist all changes. On failure the unit of work stays open."""
        self._require_open("commit")
        await self._commit()
        self._state = UnitOfWorkState.COMMITTED

    async def rollback(self) -> None:
        """Discard all changes."""
        self._require_open("rollback")
        await self._rollback()
        self._state = UnitOfWorkState.ROLLED_BACK

    async def release(self) -> None:
        """Free the underlying resources. Safe to call more than once."""
        if self._state is UnitOfWorkState.RELEASED:
            return
        self._state = UnitOfWorkState.RELEASED
        await self._release()

    @abc.abstractmethod
    async def _commit(self) -> None: ...

    @abc.abstractmethod
    async def _rollback(self) -> None: ...

    async def _release(self) -> None:
        """Override to close sessions / connections."""

    def _require_open(self, operation: str) -> None:
        if self._state is not UnitOfWorkState.OPEN:
            raise TransactionStateError(self._id, operation, self._state.value)

    # ------------------------------------------------------------------
    # Domain events
    # ------------------------------------------------------------------

    def add_event(self, event: DomainEvent) -> None:
        self._events.append(event)

    def track(self, source: EventSource) -> None:
        """Collect events from *source* when the transaction commits."""
        if source not in self._sources:
            self._sources.append(source)

    def collect_events(self) -> list[DomainEvent]:
        """Return and clear every pending event, explicit events first."""
        events = list(self._events)
        self._events.clear()
        for source in self._sources:
            events.extend(source.pull_events())
        return events

    # ------------------------------------------------------------------
    # Scoped acquisition
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if exc_val is None:
            await self.release()
            return
        # keep the error that ended the block; a release failure is secondary
        try:
            await self.release()
        except Exception:
            _log.error("unit_of_work.release_failed", transaction_id=self._id, exc_info=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, state={self._state.value!r})"


__all__ = ["EventSource", "UnitOfWork", "UnitOfWorkState"]
