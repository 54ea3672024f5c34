"""Configuration management for subsweep."""
from .settings import Settings, Credential, Defaults, get_settings, load_config_file

__all__ = ["Settings", "Credential", "Defaults", "get_settings", "load_config_file"]
