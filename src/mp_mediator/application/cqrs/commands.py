"""Application CQRS – Command, CommandHandler, CommandBus."""
from __future__ import annotations

import abc
from typing import Any, Generic, TypeVar

C = TypeVar("C", bound="Command")


class Command:
    """Marker base for commands (intent to change state)."""


class CommandHandler(abc.ABC, Generic[C]):
    """Handle a single command type."""

    @abc.abstractmethod
    async def handle(self, command: C) -> Any: ...


class CommandBus(abc.ABC):
    """Dispatches commands to their registered handlers."""

    @abc.abstractmethod
    def register(self, command_type: type[Command], handler: CommandHandler[Any]) -> None: ...

    @abc.abstractmethod
    async def dispatch(self, command: Command) -> Any: ...


__all__ = ["Command", "CommandBus", "CommandHandler"]
