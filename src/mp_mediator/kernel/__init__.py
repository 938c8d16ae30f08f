"""Kernel – framework-agnostic building blocks."""

from mp_mediator.kernel.errors import (
    ApplicationError,
    BaseError,
    DomainError,
    InfrastructureError,
    PostCommitError,
    RollbackError,
    TransactionError,
    TransactionStateError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "DomainError",
    "InfrastructureError",
    "PostCommitError",
    "RollbackError",
    "TransactionError",
    "TransactionStateError",
]
