"""
mp_mediator – transactional unit-of-work stage for the request pipeline.

Import path convention::

    from mp_mediator.application.pipeline import Pipeline, TransactionalMiddleware
    from mp_mediator.application.uow import ContextUnitOfWorkProvider, transactional
    from mp_mediator.kernel.ddd import UnitOfWork
    from mp_mediator.adapters.sqlalchemy import SqlAlchemyUnitOfWorkProvider
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
