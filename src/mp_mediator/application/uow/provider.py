"""Application UoW – ambient unit-of-work provider.

The ambient unit of work lives in a :class:`~contextvars.ContextVar`, so it
is scoped to the current logical call chain: the running task and any child
task it spawns see it, concurrent requests on other tasks never do.
"""
from __future__ import annotations

import abc
import contextlib
from contextvars import ContextVar
from typing import Callable, Iterator

from mp_mediator.kernel.ddd import UnitOfWork
from mp_mediator.kernel.errors import TransactionStateError

UnitOfWorkFactory = Callable[[], UnitOfWork]


class UnitOfWorkProvider(abc.ABC):
    """Port: supply the ambient unit of work or create a new one."""

    @abc.abstractmethod
    def get_current(self) -> UnitOfWork | None:
        """Return the open unit of work active for this call chain, if any."""

    @abc.abstractmethod
    def create(self) -> UnitOfWork:
        """Return a fresh, open unit of work."""

    @abc.abstractmethod
    def activate(self, uow: UnitOfWork) -> contextlib.AbstractContextManager[UnitOfWork]:
        """Make *uow* ambient until the returned context manager exits."""


class ContextUnitOfWorkProvider(UnitOfWorkProvider):
    """ContextVar-backed provider.

    Each provider instance owns its own ``ContextVar``, so two providers
    (e.g. two databases) track their ambient units of work independently.
    """

    def __init__(self, factory: UnitOfWorkFactory, *, name: str = "mp_mediator_uow") -> None:
        self._factory = factory
        self._current: ContextVar[UnitOfWork | None] = ContextVar(name, default=None)

    def get_current(self) -> UnitOfWork | None:
        return self._open()

    def _open(self) -> UnitOfWork | None:
        uow = self._current.get()
        # a child task can outlive the scope it copied the context from
        if uow is None or not uow.is_open:
            return None
        return uow

    def create(self) -> UnitOfWork:
        return self._factory()

    @contextlib.contextmanager
    def activate(self, uow: UnitOfWork) -> Iterator[UnitOfWork]:
        current = self._open()
        if current is not None:
            raise TransactionStateError(uow.id, "activate", f"ambient:{current.id}")
        token = self._current.set(uow)
        try:
            yield uow
        finally:
            self._current.reset(token)


__all__ = ["ContextUnitOfWorkProvider", "UnitOfWorkFactory", "UnitOfWorkProvider"]
