"""Application pipeline – use-case middleware chain."""
from mp_mediator.application.pipeline.middleware import Handler, Middleware, Next
from mp_mediator.application.pipeline.pipeline import Pipeline
from mp_mediator.application.pipeline.middlewares import LoggingMiddleware
from mp_mediator.application.pipeline.transactional import TransactionalMiddleware

__all__ = [
    "Handler",
    "LoggingMiddleware",
    "Middleware",
    "Next",
    "Pipeline",
    "TransactionalMiddleware",
]
