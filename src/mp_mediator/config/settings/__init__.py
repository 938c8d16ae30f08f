"""Config settings – 12-factor env-based configuration."""
from mp_mediator.config.settings.base import Settings
from mp_mediator.config.settings.loaders import EnvSettingsLoader, SettingsLoader
from mp_mediator.config.settings.transaction import TransactionSettings

__all__ = ["EnvSettingsLoader", "Settings", "SettingsLoader", "TransactionSettings"]
