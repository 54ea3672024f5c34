"""subsweep Plugin System."""
from .discovery import DataSource, PluginRegistry, discover_plugins

__all__ = ["DataSource", "PluginRegistry", "discover_plugins"]
