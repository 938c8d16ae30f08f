"""Infrastructure errors — transaction lifecycle and persistence failures."""

from __future__ import annotations

from typing import Any

from mp_mediator.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class TransactionError(InfrastructureError):
    """Base class for unit-of-work failures."""

    default_code = "transaction_error"


class TransactionStateError(TransactionError):
    """A unit of work was driven through an illegal lifecycle transition."""

    default_code = "transaction_state_error"

    def __init__(
        self,
        transaction_id: str,
        operation: str,
        state: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Cannot {operation} transaction '{transaction_id}' in state {state}",
            **kwargs,
        )
        self.transaction_id = transaction_id
        self.operation = operation
        self.state = state


class RollbackError(TransactionError):
    """Rolling back failed while handling an earlier failure.

    ``cause`` is the rollback failure; ``original_error`` is the error that
    triggered the rollback. Both are kept.
    """

    default_code = "rollback_failed"

    def __init__(
        self,
        transaction_id: str,
        *,
        original_error: BaseException,
        cause: BaseException,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Rollback of transaction '{transaction_id}' failed",
            cause=cause,
            detail={
                "transaction_id": transaction_id,
                "original_error": repr(original_error),
            },
            **kwargs,
        )
        self.transaction_id = transaction_id
        self.original_error = original_error


__all__ = [
    "InfrastructureError",
    "RollbackError",
    "TransactionError",
    "TransactionStateError",
]
