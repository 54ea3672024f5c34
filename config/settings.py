"""Settings and configuration management for subsweep.

Configuration is loaded from (in order of precedence):
1. Environment variables (<SOURCE>_API_KEY, also read from a .env file)
2. Config file (./subsweep.yaml or ~/.subsweep/config.yaml)
3. Built-in defaults (lowest priority)

IMPORTANT: All default values should be defined HERE only.
Other modules should import from config to avoid duplication.
"""
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
from functools import lru_cache

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from core.domains import DomainPattern


# =============================================================================
# SINGLE SOURCE OF TRUTH: Default Values
# =============================================================================

class Defaults:
    """Central location for all default values."""
    
    # HTTP fetch client
    HTTP_TIMEOUT = 20
    USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
    
    # Discovery
    REQUEST_TIMEOUT = 300  # Seconds before a discovery request is cancelled
    MAX_WORKERS = 10       # Data sources queried in parallel
    ENABLED_PLUGINS = ["dogpile", "shodan"]
    
    # Data sources
    RATE_LIMIT_INTERVAL = 1.0  # Seconds between requests to one source
    DOGPILE_QUANTITY = 15      # Dogpile returns roughly 15 results per page
    DOGPILE_LIMIT = 90


# =============================================================================
# Configuration Models
# =============================================================================

class Credential(BaseModel):
    """API credential for a keyed data source."""
    model_config = ConfigDict(frozen=True)
    
    key: str = ""
    
    def __bool__(self) -> bool:
        return bool(self.key)


class HTTPConfig(BaseModel):
    """Fetch client settings."""
    timeout: int = Field(default=Defaults.HTTP_TIMEOUT, description="Request timeout in seconds")
    user_agent: str = Field(default=Defaults.USER_AGENT, description="User agent for HTTP requests")


class DiscoveryConfig(BaseModel):
    """Data source dispatch settings."""
    enabled_plugins: List[str] = Field(default_factory=lambda: list(Defaults.ENABLED_PLUGINS), description="Enabled data sources")
    request_timeout: float = Field(default=Defaults.REQUEST_TIMEOUT, description="Seconds before a request is cancelled")
    max_workers: int = Field(default=Defaults.MAX_WORKERS, description="Data sources queried in parallel")


class Settings(BaseModel):
    """Main settings container.
    
    Also acts as the configuration collaborator handed to data sources:
    it answers which domains are in scope (domain_pattern) and which
    credentials are available (api_key).
    """
    domains: List[str] = Field(default_factory=list, description="Apex domains in scope")
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    api_keys: Dict[str, Credential] = Field(default_factory=dict)
    
    _patterns: Dict[str, DomainPattern] = PrivateAttr(default_factory=dict)
    _lock: Any = PrivateAttr(default_factory=threading.Lock)
    
    @field_validator("domains")
    @classmethod
    def _normalize_domains(cls, value: List[str]) -> List[str]:
        domains = []
        for domain in value:
            domain = normalize_domain(domain)
            if domain and domain not in domains:
                domains.append(domain)
        return domains
    
    @field_validator("api_keys")
    @classmethod
    def _normalize_key_names(cls, value: Dict[str, Credential]) -> Dict[str, Credential]:
        return {name.lower(): cred for name, cred in value.items()}
    
    def add_domain(self, domain: str) -> None:
        """Add an apex domain to the scope."""
        domain = normalize_domain(domain)
        if domain and domain not in self.domains:
            self.domains.append(domain)
    
    def domain_pattern(self, domain: str) -> Optional[DomainPattern]:
        """Get the compiled pattern for an in-scope domain.
        
        Returns:
            DomainPattern, or None if the domain is not in scope
        """
        domain = normalize_domain(domain)
        if not domain or domain not in self.domains:
            return None
        
        with self._lock:
            pattern = self._patterns.get(domain)
            if pattern is None:
                pattern = DomainPattern(domain)
                self._patterns[domain] = pattern
        return pattern
    
    def api_key(self, source_name: str) -> Optional[Credential]:
        """Get the credential for a data source (case-insensitive).
        
        Falls back to the <SOURCE>_API_KEY environment variable for sources
        without a configured key, whether or not they are enabled.
        """
        cred = self.api_keys.get(source_name.lower())
        if cred is not None and cred.key:
            return cred
        key = os.getenv(f"{source_name.upper()}_API_KEY")
        if key:
            return Credential(key=key)
        return None
    
    def load_api_keys_from_env(self, source_names: Optional[List[str]] = None) -> None:
        """Load API keys from <SOURCE>_API_KEY environment variables.
        
        Args:
            source_names: Sources to look up (default: enabled plugins)
        """
        for name in source_names or self.discovery.enabled_plugins:
            key = os.getenv(f"{name.upper()}_API_KEY")
            if key:
                self.api_keys[name.lower()] = Credential(key=key)


def normalize_domain(domain: str) -> str:
    """Lower-case a domain and strip surrounding whitespace and dots."""
    return (domain or "").strip().lower().strip(".")


# =============================================================================
# Config File Loading
# =============================================================================

def find_config_file() -> Optional[Path]:
    """Find config file in standard locations.
    
    Search order:
    1. ./subsweep.yaml (current directory)
    2. ~/.subsweep/config.yaml (user home)
    3. ~/.config/subsweep/config.yaml (XDG config)
    """
    locations = [
        Path("./subsweep.yaml"),
        Path("./subsweep.yml"),
        Path.home() / ".subsweep" / "config.yaml",
        Path.home() / ".subsweep" / "config.yml",
        Path.home() / ".config" / "subsweep" / "config.yaml",
    ]
    
    for path in locations:
        if path.exists():
            return path
    
    return None


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.
    
    Args:
        path: Optional explicit path, otherwise searches standard locations
        
    Returns:
        Dictionary of config values (empty if no file found)
    """
    if path is None:
        path = find_config_file()
    
    if path is None or not path.exists():
        return {}
    
    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}
        return config
    except Exception as e:
        print(f"[WARNING] Failed to load config file {path}: {e}")
        return {}


@lru_cache()
def get_settings(config_file: Optional[str] = None) -> Settings:
    """Get settings instance (cached).
    
    Loads from config file, .env file and environment variables.
    
    Args:
        config_file: Optional explicit config file path
        
    Returns:
        Settings instance with merged configuration
    """
    load_dotenv()
    
    file_config = load_config_file(Path(config_file) if config_file else None)
    
    if file_config:
        settings = Settings.model_validate(file_config)
    else:
        settings = Settings()
    
    settings.load_api_keys_from_env()
    
    return settings
