"""Blocking HTTP fetch client shared by the data sources."""
import logging
import threading
from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from config import Defaults
from core.debug import debug_print

logger = logging.getLogger("subsweep.http")


class FetchError(Exception):
    """Raised when a page cannot be retrieved (transport error or bad status)."""
    
    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class HttpClient:
    """Thread-safe HTTP client returning response bodies as text.
    
    Each worker thread gets its own pooled session, so one client can be
    shared by every data source running in parallel.
    """
    
    def __init__(
        self,
        timeout: int = Defaults.HTTP_TIMEOUT,
        user_agent: str = Defaults.USER_AGENT,
    ):
        """Initialize HTTP client.
        
        Args:
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._thread_local = threading.local()
    
    def _get_session(self) -> requests.Session:
        """Get or create a thread-local session with connection pooling."""
        if not hasattr(self._thread_local, "session"):
            session = requests.Session()
            session.headers["User-Agent"] = self.user_agent
            
            adapter = HTTPAdapter(pool_connections=20, pool_maxsize=20)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
            
            self._thread_local.session = session
        
        return self._thread_local.session
    
    def request_web_page(
        self,
        url: str,
        body: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        username: str = "",
        password: str = "",
    ) -> str:
        """Fetch ``url`` and return the response body.
        
        Sends a GET, or a POST when ``body`` is given. Basic auth is used
        when ``username`` is set.
        
        Raises:
            FetchError: On any transport failure or non-2xx status
        """
        method = "POST" if body else "GET"
        auth = (username, password) if username else None
        
        logger.debug(f"[HTTP] {method} {url}")
        debug_print(f"        [HTTP DEBUG] {method} {url}")
        
        try:
            response = self._get_session().request(
                method,
                url,
                data=body or None,
                headers=headers,
                auth=auth,
                timeout=self.timeout,
                allow_redirects=True,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e
        
        return response.text
    
    def close(self) -> None:
        """Close the calling thread's session."""
        session = getattr(self._thread_local, "session", None)
        if session is not None:
            session.close()
            del self._thread_local.session
