"""Configuration package for runtime settings and startup validation."""

from .settings import BridgeSettings, SettingsLoadError, config_load_settings

__all__ = ["BridgeSettings", "SettingsLoadError", "config_load_settings"]
