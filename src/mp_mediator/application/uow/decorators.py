"""Application UoW – transactional decorator."""
from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from mp_mediator.application.uow.provider import UnitOfWorkProvider

F = TypeVar("F", bound=Callable[..., Any])


def transactional(provider: UnitOfWorkProvider, **middleware_kwargs: Any) -> Callable[[F], F]:
    """Decorator: run an async callable inside a unit of work.

    Each call goes through :meth:`TransactionalMiddleware.execute` with the
    function's qualified name as the request name, so nested decorated calls
    join the ambient unit of work.

    Usage::

        @transactional(provider, post_commit=DomainEventPublisher(bus))
        async def open_account(owner: str) -> str:
            ...
    """
    from mp_mediator.application.pipeline.transactional import TransactionalMiddleware

    middleware = TransactionalMiddleware(provider, **middleware_kwargs)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            return await middleware.execute(func.__qualname__, lambda: func(*args, **kwargs))

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["transactional"]
