"""Application CQRS – Commands, Events, pipeline-aware bus."""
from mp_mediator.application.cqrs.commands import Command, CommandBus, CommandHandler
from mp_mediator.application.cqrs.events import EventBus, EventHandler, InProcessEventBus
from mp_mediator.application.cqrs.pipeline_bus import MiddlewareAwareCommandBus

__all__ = [
    "Command", "CommandBus", "CommandHandler",
    "EventBus", "EventHandler", "InProcessEventBus",
    "MiddlewareAwareCommandBus",
]
