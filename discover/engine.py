"""Discovery host: runs every data source against a domain in parallel."""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional

from config import Settings
from config.settings import normalize_domain
from core.eventbus import LOG_TOPIC, NEW_NAME_TOPIC, EventBus
from core.http import HttpClient
from plugins.discovery import (
    DataSource,
    DataSourceError,
    DiscoveryRequest,
    PluginRegistry,
    RequestContext,
    discover_plugins,
)

logger = logging.getLogger("subsweep.engine")
bus_logger = logging.getLogger("subsweep.bus")


class SubdomainDiscovery:
    """Owns one started instance per enabled data source.
    
    Each call to ``discover`` sends the same request to every source at
    once; a source that is slow, failing or unconfigured does not hold up
    or break the others. Names are returned as published, without
    deduplication.
    
    Example:
        discovery = SubdomainDiscovery(get_settings())
        for found in discovery.discover("example.com"):
            print(found.name, found.source)
    """
    
    def __init__(
        self,
        settings: Settings,
        bus: Optional[EventBus] = None,
        http_client: Optional[HttpClient] = None,
        plugin_names: Optional[List[str]] = None,
    ):
        """Initialize discovery host and start its data sources.
        
        Args:
            settings: Configuration collaborator
            bus: Event bus (a private one is created if omitted)
            http_client: Shared fetch client
            plugin_names: Sources to use (None = settings.discovery.enabled_plugins)
        """
        self.settings = settings
        self.bus = bus or EventBus()
        self.http = http_client or HttpClient(
            timeout=settings.http.timeout,
            user_agent=settings.http.user_agent,
        )
        
        discover_plugins()
        
        self.plugins: List[DataSource] = []
        for name in plugin_names or settings.discovery.enabled_plugins:
            plugin = PluginRegistry.create(name, settings, self.http)
            if plugin is None:
                continue
            try:
                plugin.start()
            except DataSourceError as e:
                logger.error(f"Failed to start {name}: {e}")
                continue
            self.plugins.append(plugin)
        
        logger.debug(f"Data sources: {', '.join(p.name for p in self.plugins) or 'none'}")
        
        # One pool for the lifetime of the host, so each worker thread keeps
        # its pooled HTTP session across requests
        workers = max(1, min(settings.discovery.max_workers, len(self.plugins)))
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="subsweep")
        self.bus.subscribe(LOG_TOPIC, self._on_log)
    
    def discover(self, domain: str, timeout: Optional[float] = None) -> List[DiscoveryRequest]:
        """Query every data source for names under ``domain``.
        
        The domain is added to the settings scope if needed. Sources still
        running when the timeout expires are cancelled; they finish their
        in-flight fetch and stop before the next one.
        
        Args:
            domain: Apex domain to investigate
            timeout: Seconds before cancellation (default: settings.discovery.request_timeout)
        
        Returns:
            Names published during this call, in arrival order
        """
        self.settings.add_domain(domain)
        domain = normalize_domain(domain)
        if timeout is None:
            timeout = self.settings.discovery.request_timeout
        
        found: List[DiscoveryRequest] = []
        found_lock = threading.Lock()
        
        def collect(req: DiscoveryRequest) -> None:
            if req.domain == domain:
                with found_lock:
                    found.append(req)
        
        cancel = threading.Event()
        ctx = RequestContext(config=self.settings, bus=self.bus, cancel=cancel)
        request = DiscoveryRequest(name=domain, domain=domain)
        
        self.bus.subscribe(NEW_NAME_TOPIC, collect)
        try:
            futures = [
                self._executor.submit(plugin.handle_discovery_request, ctx, request)
                for plugin in self.plugins
            ]
            _, not_done = wait(futures, timeout=timeout)
            if not_done:
                logger.warning(f"Discovery for {domain} timed out after {timeout}s, cancelling {len(not_done)} source(s)")
                cancel.set()
                wait(not_done)
        finally:
            self.bus.unsubscribe(NEW_NAME_TOPIC, collect)
        
        logger.info(f"Found {len(found)} names for {domain}")
        return found
    
    def stop(self) -> None:
        """Cancel all data sources."""
        for plugin in self.plugins:
            plugin.stop()
    
    def close(self) -> None:
        """Cancel all data sources and release the worker pool."""
        self.stop()
        self._executor.shutdown(wait=True)
        self.bus.unsubscribe(LOG_TOPIC, self._on_log)
    
    def _on_log(self, message: str) -> None:
        bus_logger.info(message)
