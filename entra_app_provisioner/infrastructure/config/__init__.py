"""Configuration loaded from the environment."""

from .settings import DEFAULT_PERMISSIONS, Settings, load_settings

__all__ = ["DEFAULT_PERMISSIONS", "Settings", "load_settings"]
