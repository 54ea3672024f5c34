"""Shodan data source.

Looks up known DNS names for a domain through the Shodan REST API.

Environment Variables:
    SHODAN_API_KEY: Your Shodan API key
"""
import json
from typing import List
from urllib.parse import quote

from config import Defaults
from core.domains import DomainPattern
from .base import DataSource, DiscoveryRequest, RequestContext, SourceKind
from .registry import PluginRegistry


class ShodanPlugin(DataSource):
    """Keyed single-shot API lookup.
    
    The ``/dns/domain`` endpoint answers with bare labels, e.g.
    ``{"subdomains": ["www", "mail"]}``; each label is joined with the
    domain and validated against the domain pattern before publishing.
    """
    
    BASE_URL = "https://api.shodan.io/dns/domain"
    
    name = "Shodan"
    description = "Shodan DNS lookup API"
    source_kind = SourceKind.API
    requires_auth = True
    rate_interval = Defaults.RATE_LIMIT_INTERVAL
    
    def _run(self, ctx: RequestContext, request: DiscoveryRequest, pattern: DomainPattern) -> None:
        if not self._next_turn(ctx):
            return
        
        url = self.rest_url(request.domain)
        headers = {"Content-Type": "application/json"}
        page = self.http.request_web_page(url, headers=headers)
        
        for label in self._extract_labels(page):
            name = f"{label}.{request.domain}"
            if pattern.matches(name):
                self._publish_name(ctx, request, name)
    
    def _extract_labels(self, page: str) -> List[str]:
        """Pull the subdomain labels out of a response body.
        
        Malformed bodies yield no labels.
        """
        try:
            data = json.loads(page)
        except (TypeError, ValueError):
            self.logger.debug("[SHODAN] Undecodable response body")
            return []
        
        if not isinstance(data, dict):
            return []
        labels = data.get("subdomains")
        if not isinstance(labels, list):
            return []
        return [label for label in labels if isinstance(label, str) and label]
    
    def rest_url(self, domain: str) -> str:
        return f"{self.BASE_URL}/{quote(domain)}?key={quote(self.credential.key)}"


PluginRegistry.register(ShodanPlugin)
