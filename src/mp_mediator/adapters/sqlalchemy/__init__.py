"""SQLAlchemy adapter – async unit of work, provider and session factory."""
from mp_mediator.adapters.sqlalchemy.session import SqlAlchemySessionFactory
from mp_mediator.adapters.sqlalchemy.uow import SqlAlchemyUnitOfWork, SqlAlchemyUnitOfWorkProvider

__all__ = ["SqlAlchemySessionFactory", "SqlAlchemyUnitOfWork", "SqlAlchemyUnitOfWorkProvider"]
