"""Configuration package."""

from fincalc.config.settings import (
    CacheSettings,
    ComputationSettings,
    SecuritySettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "CacheSettings",
    "ComputationSettings",
    "SecuritySettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
