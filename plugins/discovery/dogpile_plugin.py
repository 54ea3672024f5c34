"""Dogpile data source.

Scrapes the Dogpile web search result pages for names under the target
domain. No API key is needed.
"""
from typing import Optional
from urllib.parse import urlencode

from config import Defaults, Settings
from core.domains import DomainPattern, clean_name
from core.http import HttpClient
from .base import DataSource, DiscoveryRequest, RequestContext, SourceKind
from .registry import PluginRegistry


class DogpilePlugin(DataSource):
    """Paginated search-engine scraper.
    
    Walks ``limit // quantity`` result pages, each offset by ``quantity``
    results, and publishes every substring of every page that matches the
    domain pattern. Names seen on several pages are published each time.
    """
    
    BASE_URL = "http://www.dogpile.com/search/web"
    
    name = "Dogpile"
    description = "Dogpile web search scraping"
    source_kind = SourceKind.SCRAPE
    requires_auth = False
    rate_interval = Defaults.RATE_LIMIT_INTERVAL
    
    def __init__(
        self,
        config: Settings,
        http_client: Optional[HttpClient] = None,
        quantity: int = Defaults.DOGPILE_QUANTITY,
        limit: int = Defaults.DOGPILE_LIMIT,
    ):
        """Initialize Dogpile source.
        
        Args:
            config: Configuration collaborator
            http_client: Fetch client
            quantity: Results per page
            limit: Maximum number of results pursued
        """
        super().__init__(config, http_client)
        self.quantity = quantity
        self.limit = limit
        self.page_count = limit // quantity if quantity > 0 else 0
    
    def _run(self, ctx: RequestContext, request: DiscoveryRequest, pattern: DomainPattern) -> None:
        for page_num in range(self.page_count):
            if not self._next_turn(ctx):
                return
            
            page = self.http.request_web_page(self.url_by_page_num(request.domain, page_num))
            
            for match in pattern.find_all(page):
                name = clean_name(match)
                # Cleaning can strip a match down to nothing relevant
                if pattern.matches(name):
                    self._publish_name(ctx, request, name)
    
    def url_by_page_num(self, domain: str, page_num: int) -> str:
        offset = self.quantity * page_num
        return f"{self.BASE_URL}?{urlencode({'q': domain, 'qsi': offset})}"


PluginRegistry.register(DogpilePlugin)
