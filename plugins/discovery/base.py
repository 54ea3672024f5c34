"""Base class for subdomain data sources.

All data sources must inherit from DataSource and implement the abstract
``_run`` work loop. The base class owns the parts of the contract that are
identical for every source: credential lookup, throttling, cancellation,
the "querying" log line, activity signalling and provenance stamping of
every published name.
"""
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config import Credential, Settings
from core.domains import DomainPattern
from core.eventbus import (
    LOG_TOPIC,
    NEW_NAME_TOPIC,
    SET_ACTIVE_TOPIC,
    EventBus,
    Priority,
)
from core.http import FetchError, HttpClient
from core.ratelimit import RateLimiter


class SourceKind(str, Enum):
    """How a data source obtains names. Provenance only."""
    SCRAPE = "scrape"
    API = "api"


@dataclass(frozen=True)
class DiscoveryRequest:
    """A candidate name, or a request to look for names under ``domain``.
    
    Attributes:
        name: Hostname (may equal the domain for inbound requests)
        domain: Apex domain under investigation
        tag: Mechanism that produced the name
        source: Display name of the data source
    """
    name: str
    domain: str
    tag: Optional[SourceKind] = None
    source: str = ""


@dataclass
class RequestContext:
    """Per-request collaborators supplied by the host.
    
    Attributes:
        config: Configuration collaborator (domain patterns, credentials)
        bus: Event bus that receives logs, activity and names
        cancel: Optional per-request cancellation signal
    """
    config: Settings
    bus: EventBus
    cancel: Optional[threading.Event] = None


class DataSourceError(Exception):
    """Raised when a data source cannot be set up."""


class DataSource(ABC):
    """Abstract base class for data sources.
    
    One instance is created per source and reused for many requests. An
    instance processes one request at a time; different instances run in
    parallel.
    
    Class Attributes:
        name: Display name (e.g., "Dogpile", "Shodan")
        description: Human-readable description
        source_kind: SourceKind stamped on every published name
        requires_auth: Whether an API key must be configured
        rate_interval: Minimum seconds between fetches by one instance
    
    Example:
        class MySource(DataSource):
            name = "MySource"
            source_kind = SourceKind.API
            requires_auth = True
            
            def _run(self, ctx, request, pattern):
                page = self._fetch(ctx, self._url(request.domain))
                ...
    """
    
    name: str = "base"
    description: str = "Base data source"
    source_kind: SourceKind = SourceKind.SCRAPE
    requires_auth: bool = False
    rate_interval: float = 1.0
    
    def __init__(self, config: Settings, http_client: Optional[HttpClient] = None):
        """Initialize data source (not started).
        
        Args:
            config: Configuration collaborator used for credential lookup
            http_client: Fetch client (a default one is created if omitted)
        """
        self.config = config
        self.http = http_client or HttpClient(
            timeout=config.http.timeout,
            user_agent=config.http.user_agent,
        )
        self.credential: Optional[Credential] = None
        self.rate_limiter = RateLimiter()
        self.quit = threading.Event()
        self.logger = logging.getLogger(f"subsweep.{self.name.lower()}")
        self._busy = threading.Lock()
    
    def kind(self) -> SourceKind:
        return self.source_kind
    
    def start(self) -> None:
        """One-time setup: acquire credentials and configure throttling.
        
        A missing API key is reported but is not a failure; the source
        then ignores every request.
        
        Raises:
            DataSourceError: If the source cannot be set up at all
        """
        if self.requires_auth:
            self.credential = self.config.api_key(self.name)
            if not self.credential:
                self.logger.warning(f"{self.name}: API key data was not provided")
        
        try:
            self.rate_limiter.configure(self.rate_interval)
        except ValueError as e:
            raise DataSourceError(f"{self.name}: {e}") from e
        
        self.quit.clear()
    
    def stop(self) -> None:
        """Signal the source to abandon its current and future work loops."""
        self.quit.set()
    
    def is_configured(self) -> bool:
        """Check if the source has everything it needs to query."""
        return not self.requires_auth or bool(self.credential)
    
    def handle_discovery_request(self, ctx: RequestContext, request: DiscoveryRequest) -> None:
        """Look for names under ``request.domain`` and publish them on the bus.
        
        Never raises. Failures are reported once on the log topic.
        """
        pattern = ctx.config.domain_pattern(request.domain)
        if pattern is None or not self.is_configured():
            return
        
        with self._busy:
            self._publish_log(ctx, f"Querying {self.name} for {request.domain} subdomains")
            try:
                self._run(ctx, request, pattern)
            except FetchError as e:
                self._publish_log(ctx, f"{self.name}: {e.url}: {e}")
            except Exception as e:
                self.logger.exception(f"{self.name}: unexpected failure for {request.domain}")
                self._publish_log(ctx, f"{self.name}: {request.domain}: {e}")
    
    @abstractmethod
    def _run(self, ctx: RequestContext, request: DiscoveryRequest, pattern: DomainPattern) -> None:
        """Work loop for one request.
        
        Call ``_next_turn`` before every fetch and stop when it returns
        False. A FetchError ends the loop; the base class reports it.
        """
        pass
    
    # === Helpers for subclasses ===
    
    def is_cancelled(self, ctx: RequestContext) -> bool:
        return self.quit.is_set() or (ctx.cancel is not None and ctx.cancel.is_set())
    
    def _next_turn(self, ctx: RequestContext) -> bool:
        """Gate one iteration of the work loop.
        
        Returns:
            False if the request was cancelled, otherwise True once the
            rate limiter grants a turn and activity has been signalled
        """
        if self.is_cancelled(ctx):
            return False
        self.rate_limiter.wait_turn()
        # Cancellation may arrive while waiting for the turn
        if self.is_cancelled(ctx):
            return False
        ctx.bus.publish(SET_ACTIVE_TOPIC, Priority.CRITICAL, self.name)
        return True
    
    def _publish_name(self, ctx: RequestContext, request: DiscoveryRequest, name: str) -> None:
        ctx.bus.publish(NEW_NAME_TOPIC, Priority.HIGH, DiscoveryRequest(
            name=name,
            domain=request.domain,
            tag=self.source_kind,
            source=self.name,
        ))
    
    def _publish_log(self, ctx: RequestContext, message: str) -> None:
        ctx.bus.publish(LOG_TOPIC, Priority.HIGH, message)
    
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name})>"
