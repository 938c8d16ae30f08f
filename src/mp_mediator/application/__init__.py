"""Application – use-case building blocks (framework-agnostic)."""

from mp_mediator.application.uow import (
    ContextUnitOfWorkProvider,
    DomainEventPublisher,
    UnitOfWork,
    UnitOfWorkProvider,
    transactional,
)
from mp_mediator.application.pipeline import (
    LoggingMiddleware,
    Middleware,
    Pipeline,
    TransactionalMiddleware,
)
from mp_mediator.application.cqrs import (
    Command,
    CommandBus,
    CommandHandler,
    EventBus,
    EventHandler,
    InProcessEventBus,
    MiddlewareAwareCommandBus,
)

__all__ = [
    "Command",
    "CommandBus",
    "CommandHandler",
    "ContextUnitOfWorkProvider",
    "DomainEventPublisher",
    "EventBus",
    "EventHandler",
    "InProcessEventBus",
    "LoggingMiddleware",
    "Middleware",
    "MiddlewareAwareCommandBus",
    "Pipeline",
    "TransactionalMiddleware",
    "UnitOfWork",
    "UnitOfWorkProvider",
    "transactional",
]
