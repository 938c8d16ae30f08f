"""Kernel error hierarchy — public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError              (domain.py)
    │   └── ConflictError
    ├── ApplicationError         (application.py)
    │   └── PostCommitError
    └── InfrastructureError      (infrastructure.py)
        └── TransactionError
            ├── TransactionStateError
            └── RollbackError
"""

from mp_mediator.kernel.errors.application import ApplicationError, PostCommitError
from mp_mediator.kernel.errors.base import BaseError
from mp_mediator.kernel.errors.domain import ConflictError, DomainError
from mp_mediator.kernel.errors.infrastructure import (
    InfrastructureError,
    RollbackError,
    TransactionError,
    TransactionStateError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "PostCommitError",
    "RollbackError",
    "TransactionError",
    "TransactionStateError",
]
