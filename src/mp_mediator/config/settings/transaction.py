"""Config settings – TransactionSettings for the transactional pipeline stage."""
from __future__ import annotations

import dataclasses
import logging

from mp_mediator.config.settings.base import Settings
from mp_mediator.config.validation import InvalidSettingValueError

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
}


@dataclasses.dataclass
class TransactionSettings(Settings):
    """Diagnostics knobs for :class:`TransactionalMiddleware`.

    Loaded from ``MP_TX_*`` environment variables::

        settings = EnvSettingsLoader().load(TransactionSettings)
    """

    _prefix = "MP_TX"

    log_request_payload: bool = False
    sensitive_fields: list[str] = dataclasses.field(default_factory=list)
    log_level: str = "info"

    def _validate(self) -> None:
        self.log_level = self.log_level.lower()
        if self.log_level not in _LOG_LEVELS:
            raise InvalidSettingValueError(
                "log_level", self.log_level, f"expected one of {sorted(_LOG_LEVELS)}"
            )

    @property
    def log_level_no(self) -> int:
        return _LOG_LEVELS[self.log_level]


__all__ = ["TransactionSettings"]
