"""Service layer helpers (settings, telemetry)."""

from .settings import SecretVault, Settings, SettingsStore

__all__ = ["SecretVault", "Settings", "SettingsStore"]
