"""Application UnitOfWork – ambient provider, post-commit hooks, decorator."""
from mp_mediator.kernel.ddd import UnitOfWork
from mp_mediator.application.uow.provider import (
    ContextUnitOfWorkProvider,
    UnitOfWorkFactory,
    UnitOfWorkProvider,
)
from mp_mediator.application.uow.hooks import (
    DomainEventPublisher,
    PostCommitHook,
    chain_post_commit,
    noop_post_commit,
)
from mp_mediator.application.uow.decorators import transactional

__all__ = [
    "ContextUnitOfWorkProvider",
    "DomainEventPublisher",
    "PostCommitHook",
    "UnitOfWork",
    "UnitOfWorkFactory",
    "UnitOfWorkProvider",
    "chain_post_commit",
    "noop_post_commit",
    "transactional",
]
