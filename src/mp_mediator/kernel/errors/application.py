"""Application-layer errors — failures at the use-case boundary."""

from __future__ import annotations

from typing import Any

from mp_mediator.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class PostCommitError(ApplicationError):
    """A post-commit side effect failed after the transaction was committed.

    The persisted state is valid; only the follow-up step (e.g. publishing
    domain events) did not complete.
    """

    default_code = "post_commit_failed"

    def __init__(
        self,
        transaction_id: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message or f"Post-commit hook failed for transaction '{transaction_id}'",
            **kwargs,
        )
        self.transaction_id = transaction_id
        self.detail.setdefault("transaction_id", transaction_id)


__all__ = ["ApplicationError", "PostCommitError"]
