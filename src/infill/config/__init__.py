"""Configuration APIs."""

from infill.config.settings import (
    AutocompleteSettings,
    ProviderSettings,
    RuntimeSettings,
    SettingsError,
    TimeoutSettings,
    load_settings,
    resolve_env_secret,
    settings_summary,
)

__all__ = [
    "AutocompleteSettings",
    "ProviderSettings",
    "RuntimeSettings",
    "SettingsError",
    "TimeoutSettings",
    "load_settings",
    "resolve_env_secret",
    "settings_summary",
]
