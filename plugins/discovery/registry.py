"""Data source registry and discovery system.

This module provides the PluginRegistry class for managing data sources,
and the discover_plugins function for auto-discovering sources from the
plugins/discovery directory.
"""
import importlib
import logging
from pathlib import Path
from typing import Dict, List, Optional, Type, TYPE_CHECKING

from config import Settings
from core.http import HttpClient

if TYPE_CHECKING:
    from .base import DataSource

logger = logging.getLogger("subsweep.registry")


class PluginRegistry:
    """Registry for data source classes.
    
    Sources are registered by class under their lower-cased display name.
    Instances are created by the host through ``create``.
    
    Example:
        # Register a source
        PluginRegistry.register(ShodanPlugin)
        
        # Create an instance
        shodan = PluginRegistry.create("shodan", settings)
        
        # List all sources
        for plugin in PluginRegistry.all():
            print(plugin.name)
    """
    
    _plugins: Dict[str, Type["DataSource"]] = {}
    
    @classmethod
    def register(cls, plugin_class: Type["DataSource"]) -> None:
        """Register a data source class.
        
        Args:
            plugin_class: The class to register
            
        Raises:
            ValueError: If a different class is already registered under the same name
        """
        key = plugin_class.name.lower()
        if key in cls._plugins and cls._plugins[key] is not plugin_class:
            raise ValueError(f"Plugin '{plugin_class.name}' already registered")
        cls._plugins[key] = plugin_class
    
    @classmethod
    def unregister(cls, name: str) -> None:
        cls._plugins.pop(name.lower(), None)
    
    @classmethod
    def get_class(cls, name: str) -> Optional[Type["DataSource"]]:
        """Get a data source class by name (case-insensitive)."""
        return cls._plugins.get(name.lower())
    
    @classmethod
    def create(
        cls,
        name: str,
        config: Settings,
        http_client: Optional[HttpClient] = None,
        **kwargs,
    ) -> Optional["DataSource"]:
        """Create a new, not yet started, data source instance.
        
        Args:
            name: The source name
            config: Configuration collaborator
            http_client: Shared fetch client
            **kwargs: Extra constructor arguments
            
        Returns:
            Source instance or None if no such source is registered
        """
        plugin_class = cls.get_class(name)
        if plugin_class is None:
            logger.warning(f"Unknown data source: {name}")
            return None
        return plugin_class(config, http_client, **kwargs)
    
    @classmethod
    def all(cls) -> List[Type["DataSource"]]:
        return list(cls._plugins.values())
    
    @classmethod
    def names(cls) -> List[str]:
        return list(cls._plugins.keys())
    
    @classmethod
    def clear(cls) -> None:
        """Clear all registered sources."""
        cls._plugins.clear()
    
    @classmethod
    def info(cls) -> Dict[str, Dict]:
        """Get information about all registered sources.
        
        Returns:
            Dict mapping source name to info dict
        """
        return {
            name: {
                "name": plugin.name,
                "description": plugin.description,
                "source_kind": plugin.source_kind.value,
                "requires_auth": plugin.requires_auth,
                "rate_interval": plugin.rate_interval,
            }
            for name, plugin in cls._plugins.items()
        }


def discover_plugins(plugins_dir: Optional[Path] = None) -> int:
    """Import every *_plugin.py module so its source registers itself.
    
    Args:
        plugins_dir: Optional path to plugins directory.
                    Defaults to plugins/discovery relative to this file.
    
    Returns:
        Number of source modules imported
    """
    if plugins_dir is None:
        plugins_dir = Path(__file__).parent
    
    discovered = 0
    for filepath in sorted(plugins_dir.glob("*_plugin.py")):
        module_name = f"{__package__}.{filepath.stem}"
        try:
            importlib.import_module(module_name)
            discovered += 1
        except Exception as e:
            logger.error(f"Error loading {filepath.name}: {e}")
    
    return discovered
