"""Domain-anchored name matching.

A DomainPattern is built once per apex domain and used two ways: scanning
free text (scraped pages) for every substring that looks like a name under
the domain, and validating a fully constructed candidate name.
"""
import re
from typing import List

# One DNS label followed by a dot; underscores are accepted because
# service records (_dmarc, _sip) show up in scraped text.
_LABEL = r"(?:[a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9])?\.)"

# URL-escape residue left at the front of a match when the page contained
# sequences like %2F or / right before a hostname.
_ESCAPE_RESIDUE = re.compile(r"^(?:u[0-9a-f]{4}|20|22|25|2b|2f|3d|3a|40)")


class DomainPattern:
    """Compiled matcher for names belonging to one apex domain.
    
    Example:
        pattern = DomainPattern("example.com")
        pattern.find_all("see www.example.com and mail.example.com")
        # ['www.example.com', 'mail.example.com']
        pattern.matches("api.example.com")   # True
        pattern.matches("example.community") # False
    """
    
    def __init__(self, domain: str):
        domain = domain.strip().lower().strip(".")
        if not domain:
            raise ValueError("Domain must not be empty")
        self.domain = domain
        self._regex = re.compile(
            rf"(?<![a-z0-9_-]){_LABEL}*{re.escape(domain)}(?![a-z0-9-])",
            re.IGNORECASE | re.ASCII,
        )
    
    def find_all(self, text: str) -> List[str]:
        """Return every non-overlapping match in ``text``, in order."""
        if not text:
            return []
        return [m.group(0) for m in self._regex.finditer(text)]
    
    def matches(self, name: str) -> bool:
        """Check whether ``name`` is the apex domain or a name beneath it."""
        if not name:
            return False
        return self._regex.fullmatch(name) is not None
    
    def __repr__(self) -> str:
        return f"<DomainPattern({self.domain})>"


def clean_name(name: str) -> str:
    """Normalize a scraped name.
    
    Lower-cases, trims whitespace and quotes, removes URL-escape residue and
    leading wildcard labels, and strips stray dots and hyphens.
    """
    name = name.strip().lower().strip("\"'")
    
    while True:
        previous = name
        name = _ESCAPE_RESIDUE.sub("", name, count=1).strip("-.")
        if name.startswith("*."):
            name = name[2:]
        if name == previous:
            break
    return name
