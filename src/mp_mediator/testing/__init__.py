"""Testing helpers for code built on mp_mediator."""
from mp_mediator.testing.fakes import InMemoryUnitOfWork, InMemoryUnitOfWorkProvider

__all__ = ["InMemoryUnitOfWork", "InMemoryUnitOfWorkProvider"]
