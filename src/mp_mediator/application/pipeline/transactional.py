"""Application pipeline – TransactionalMiddleware.

Wraps the rest of the chain in a unit of work: all persistence side effects
of one logical request commit together or roll back together.

Only the outermost invocation of a request chain owns the unit of work.
Nested dispatches through the same pipeline find it ambient and run inside
it without committing, rolling back or releasing anything themselves.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

import structlog

from mp_mediator.application.pipeline.middleware import Middleware, Next
from mp_mediator.application.uow.hooks import PostCommitHook, noop_post_commit
from mp_mediator.application.uow.provider import UnitOfWorkFactory, UnitOfWorkProvider
from mp_mediator.config.settings.transaction import TransactionSettings
from mp_mediator.kernel.ddd import UnitOfWork
from mp_mediator.kernel.errors import PostCommitError, RollbackError
from mp_mediator.observability.logging import (
    DEFAULT_SENSITIVE_FIELDS,
    SensitiveFieldsFilter,
    get_logger,
    request_payload,
)

T = TypeVar("T")

_log = get_logger(__name__)


class TransactionalMiddleware(Middleware):
    """Open/commit (or rollback) a unit of work around the handler.

    Parameters
    ----------
    provider:
        Supplies the ambient unit of work and creates new ones.
    settings:
        Diagnostics options; defaults to :class:`TransactionSettings`.
    unit_of_work_factory:
        Override for creating the unit of work. Defaults to
        ``provider.create``.
    post_commit:
        Awaited with ``(transaction_id, unit_of_work)`` after a successful
        commit. Failures surface as :class:`PostCommitError`; the commit
        stands.
    logger:
        structlog logger to emit diagnostics on.

    Usage::

        pipeline = Pipeline().add(
            TransactionalMiddleware(
                provider,
                post_commit=DomainEventPublisher(event_bus),
            )
        )
    """

    def __init__(
        self,
        provider: UnitOfWorkProvider,
        *,
        settings: TransactionSettings | None = None,
        unit_of_work_factory: UnitOfWorkFactory | None = None,
        post_commit: PostCommitHook | None = None,
        logger: Any = None,
    ) -> None:
        self._provider = provider
        self._settings = settings or TransactionSettings()
        self._factory = unit_of_work_factory or provider.create
        self._post_commit = post_commit or noop_post_commit
        self._log = logger or _log
        self._level = self._settings.log_level_no
        self._redactor = SensitiveFieldsFilter(
            DEFAULT_SENSITIVE_FIELDS | frozenset(f.lower() for f in self._settings.sensitive_fields)
        )

    async def __call__(self, request: Any, next_: Next) -> Any:
        return await self.execute(type(request).__name__, lambda: next_(request), request=request)

    async def execute(
        self,
        request_name: str,
        call: Callable[[], Awaitable[T]],
        *,
        request: Any = None,
    ) -> T:
        """Run *call* inside the ambient unit of work or a new one."""
        ambient = self._provider.get_current()
        if ambient is not None:
            return await self._join(ambient, request_name, call, request)

        uow = self._factory()
        log = self._log.bind(transaction_id=uow.id, request=request_name)
        try:
            async with uow:
                with self._provider.activate(uow), structlog.contextvars.bound_contextvars(
                    transaction_context=uow.id
                ):
                    log.log(self._level, "transaction.begin", **self._payload(request))
                    response = await self._run(uow, call, log)
                await self._after_commit(uow)
        except Exception:
            log.error("transaction.failed", exc_info=True, **self._payload(request))
            raise
        return response

    async def _join(
        self,
        ambient: UnitOfWork,
        request_name: str,
        call: Callable[[], Awaitable[T]],
        request: Any = None,
    ) -> T:
        self._log.debug("transaction.joined", transaction_id=ambient.id, request=request_name)
        try:
            return await call()
        except Exception:
            self._log.error(
                "transaction.failed",
                transaction_id=ambient.id,
                request=request_name,
                exc_info=True,
                **self._payload(request),
            )
            raise

    async def _run(self, uow: UnitOfWork, call: Callable[[], Awaitable[T]], log: Any) -> T:
        try:
            response = await call()
            log.log(self._level, "transaction.commit")
            await uow.commit()
        except BaseException as exc:
            await self._rollback(uow, exc, log)
            raise
        log.log(self._level, "transaction.committed")
        return response

    async def _rollback(self, uow: UnitOfWork, exc: BaseException, log: Any) -> None:
        try:
            await uow.rollback()
        except Exception as rollback_exc:
            raise RollbackError(uow.id, original_error=exc, cause=rollback_exc) from rollback_exc
        log.warning("transaction.rolled_back", error=type(exc).__name__)

    async def _after_commit(self, uow: UnitOfWork) -> None:
        try:
            await self._post_commit(uow.id, uow)
        except Exception as exc:
            raise PostCommitError(uow.id, cause=exc) from exc

    def _payload(self, request: Any) -> dict[str, Any]:
        if request is None or not self._settings.log_request_payload:
            return {}
        return {"payload": request_payload(request, self._redactor)}


__all__ = ["TransactionalMiddleware"]
