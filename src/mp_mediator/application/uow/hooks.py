"""Application UoW – post-commit hooks.

A hook runs once a unit of work has committed, outside the transactional
boundary: its failures never roll the committed state back.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable

from mp_mediator.kernel.ddd import UnitOfWork
from mp_mediator.observability.logging import get_logger

if TYPE_CHECKING:
    from mp_mediator.application.cqrs.events import EventBus

PostCommitHook = Callable[[str, UnitOfWork], Awaitable[None]]

_log = get_logger(__name__)


async def noop_post_commit(transaction_id: str, uow: UnitOfWork) -> None:  # noqa: ARG001
    return None


class DomainEventPublisher:
    """Publish the events collected by a committed unit of work.

    Usage::

        middleware = TransactionalMiddleware(
            provider,
            post_commit=DomainEventPublisher(event_bus),
        )
    """

    def __init__(self, event_bus: EventBus) -> None:
        self._bus = event_bus

    async def __call__(self, transaction_id: str, uow: UnitOfWork) -> None:
        events = uow.collect_events()
        for event in events:
            await self._bus.publish(event)
        if events:
            _log.info(
                "transaction.events_published",
                transaction_id=transaction_id,
                count=len(events),
            )


def chain_post_commit(*hooks: PostCommitHook) -> PostCommitHook:
    """Combine *hooks* into one that awaits each in order."""

    async def _chained(transaction_id: str, uow: UnitOfWork) -> None:
        for hook in hooks:
            await hook(transaction_id, uow)

    return _chained


__all__ = ["DomainEventPublisher", "PostCommitHook", "chain_post_commit", "noop_post_commit"]
