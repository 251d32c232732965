"""
Data models for the domain mapping library.

This module defines mapping table rows, the per-resolver domain index and
the explicit request/site context values that stand in for the host
platform's ambient request state.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .enums import Scheme
from .url_tools import url_host


@dataclass
class MappedDomain:
    """One row of the mapping table."""

    blog_id: int
    domain: str
    is_primary: bool = False
    scheme: Scheme = Scheme.HTTP


@dataclass
class DomainIndex:
    """
    Mapped and original domains known to one resolver.

    ``mapped`` holds every mapped domain of a blog in table order. After a
    cold-path lookup of a primary row it may hold that domain as a plain
    string instead of a list, so readers must accept both shapes.
    ``original_siteurls`` caches the original site URL of each blog looked up
    so far. All three maps only ever grow.
    """

    mapped: dict[int, Union[list[str], str, None]] = field(default_factory=dict)
    primary: dict[int, Optional[str]] = field(default_factory=dict)
    original_siteurls: dict[int, Optional[str]] = field(default_factory=dict)

    @classmethod
    def from_rows(cls, rows: list[MappedDomain]) -> "DomainIndex":
        index = cls()
        for row in rows:
            index.mapped.setdefault(row.blog_id, []).append(row.domain)
            if row.is_primary:
                index.primary[row.blog_id] = row.domain
        return index

    def mapped_contains(self, blog_id: int, domain: str) -> bool:
        """True if ``domain`` is among (or equals) the mapped domains of a blog."""
        entry = self.mapped.get(blog_id)
        if not entry:
            return False
        if isinstance(entry, list):
            return domain in entry
        return domain == entry

    def last_mapped(self, blog_id: int) -> Optional[str]:
        entry = self.mapped.get(blog_id)
        if isinstance(entry, list):
            return entry[-1] if entry else None
        return entry


@dataclass
class RequestContext:
    """The inbound request being served."""

    host: str
    is_secure: bool = False
    request_uri: str = "/"
    pagenow: Optional[str] = None  # script name of the current page, if known
    is_admin: bool = False
    current_filter: Optional[str] = None  # URL filter currently being applied
    active_mapping: Optional[MappedDomain] = None  # mapping already matched for this request

    @property
    def scheme(self) -> str:
        return "https" if self.is_secure else "http"

    @property
    def host_info(self) -> str:
        return f"{self.scheme}://{self.host}"

    @property
    def hostname(self) -> str:
        """The request host without a port."""
        return url_host(self.host_info) or self.host


@dataclass
class SiteContext:
    """The current blog and the network it belongs to."""

    blog_id: int
    blog_domain: str
    network_home_url: str
    network_path: str = "/"
    home_url: Optional[str] = None
