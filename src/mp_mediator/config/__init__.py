"""Config – 12-factor settings and loaders."""

from mp_mediator.config.settings import EnvSettingsLoader, Settings, SettingsLoader, TransactionSettings
from mp_mediator.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
    "TransactionSettings",
]
