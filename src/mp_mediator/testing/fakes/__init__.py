"""Testing fakes – in-memory doubles for the unit-of-work ports."""
from mp_mediator.testing.fakes.unit_of_work import InMemoryUnitOfWork, InMemoryUnitOfWorkProvider

__all__ = ["InMemoryUnitOfWork", "InMemoryUnitOfWorkProvider"]
