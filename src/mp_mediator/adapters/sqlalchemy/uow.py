"""SQLAlchemy adapter – SqlAlchemyUnitOfWork and its ambient provider."""
from __future__ import annotations

from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from mp_mediator.application.uow.provider import ContextUnitOfWorkProvider
from mp_mediator.kernel.ddd import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy async unit of work.

    The session is opened when the unit of work is created and closed on
    release. Repositories should use :attr:`session`.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession], id: str | None = None) -> None:  # noqa: A002
        super().__init__(id)
        self.session: Any = session_factory()

    async def _commit(self) -> None:
        await self.session.commit()

    async def _rollback(self) -> None:
        await self.session.rollback()

    async def _release(self) -> None:
        await self.session.close()


class SqlAlchemyUnitOfWorkProvider(ContextUnitOfWorkProvider):
    """Ambient provider handing out :class:`SqlAlchemyUnitOfWork` instances."""

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        super().__init__(lambda: SqlAlchemyUnitOfWork(session_factory), name="mp_mediator_sqla_uow")

    def session(self) -> AsyncSession:
        """Session of the ambient unit of work; raises outside a transaction."""
        uow = self.get_current()
        if not isinstance(uow, SqlAlchemyUnitOfWork):
            raise RuntimeError("No active SqlAlchemyUnitOfWork in current context")
        return uow.session


__all__ = ["SqlAlchemyUnitOfWork", "SqlAlchemyUnitOfWorkProvider"]
