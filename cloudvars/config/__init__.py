"""Configuration primitives for the cloud variable client."""

from .settings import CloudSettings, get_settings, load_settings

__all__ = ["CloudSettings", "get_settings", "load_settings"]
