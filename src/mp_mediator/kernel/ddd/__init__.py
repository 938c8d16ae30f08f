"""DDD building blocks — public re-export surface."""

from mp_mediator.kernel.ddd.aggregate import AggregateRoot
from mp_mediator.kernel.ddd.domain_event import DomainEvent
from mp_mediator.kernel.ddd.unit_of_work import EventSource, UnitOfWork, UnitOfWorkState

__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "EventSource",
    "UnitOfWork",
    "UnitOfWorkState",
]
