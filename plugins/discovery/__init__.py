"""Data Source Plugin System.

This module provides a plugin architecture for subdomain data sources.
All sources must inherit from DataSource and implement the ``_run``
work loop.

Example usage:
    from plugins.discovery import DataSource, PluginRegistry, SourceKind
    
    class MyCustomSource(DataSource):
        name = "MyCustom"
        source_kind = SourceKind.SCRAPE
        
        def _run(self, ctx, request, pattern):
            # Your implementation here
            pass
    
    # Register the source
    PluginRegistry.register(MyCustomSource)
"""
from .base import (
    DataSource,
    DataSourceError,
    DiscoveryRequest,
    RequestContext,
    SourceKind,
)
from .registry import PluginRegistry, discover_plugins

__all__ = [
    "DataSource",
    "DataSourceError",
    "DiscoveryRequest",
    "RequestContext",
    "SourceKind",
    "PluginRegistry",
    "discover_plugins",
]
