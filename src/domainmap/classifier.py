"""
Domain classification: original network domain, mapped domain or subdomain.
"""

import re
from typing import Optional

import idna

from .config import MappingConfig
from .enums import Hook
from .hooks import HookRegistry
from .models import DomainIndex, RequestContext, SiteContext
from .url_tools import parse_mb_url, strip_http_prefix, strip_www, url_host


LABEL_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")
MAX_HOST_LENGTH = 253


def _matches_domain(domain: str, original: str) -> bool:
    return domain == original or domain.endswith("." + original)


def _is_valid_hostname(host: str) -> bool:
    if not host.isascii():
        try:
            host = idna.encode(host, uts46=True).decode("ascii")
        except idna.IDNAError:
            return False
    host = host.rstrip(".")
    if not host or len(host) > MAX_HOST_LENGTH:
        return False
    return all(LABEL_PATTERN.match(label) for label in host.split("."))


class DomainClassifier:
    """
    Decides which kind of domain a hostname is.

    Knows the network's original domain, any extra network domains from the
    configuration, and the original site URLs cached in the shared
    DomainIndex.
    """

    def __init__(
        self,
        site: SiteContext,
        request: RequestContext,
        index: DomainIndex,
        hooks: HookRegistry,
        config: MappingConfig,
    ) -> None:
        self._site = site
        self._request = request
        self._index = index
        self._hooks = hooks
        self._config = config
        self._original_domain: Optional[str] = None

    def get_original_domain(self, with_www: bool = False) -> str:
        """Host of the network home URL, optionally with ``www.`` prepended."""
        if self._original_domain is None:
            self._original_domain = url_host(self._site.network_home_url) or ""
        return f"www.{self._original_domain}" if with_www else self._original_domain

    def _known_original_hosts(self) -> list[str]:
        hosts = []
        for siteurl in self._index.original_siteurls.values():
            host = url_host(siteurl)
            if host:
                hosts.append(strip_www(host))
        return hosts

    def is_original_domain(self, domain: Optional[str] = None) -> bool:
        """
        True if ``domain`` (default: the request host) is an original domain.

        Subdomains of an original domain count as original.
        """
        if domain:
            candidate = "http://" + strip_http_prefix(domain)
        else:
            candidate = self._request.host_info
        host = strip_www(parse_mb_url(candidate).get("host") or "")

        if host and host in self._known_original_hosts():
            return self._hooks.apply(Hook.IS_ORIGINAL_DOMAIN, True, host)

        for network_domain in self._config.network_domains:
            if host and _matches_domain(host, strip_www(network_domain)):
                return self._hooks.apply(Hook.IS_ORIGINAL_DOMAIN, True, host)

        original = strip_www(self.get_original_domain())
        is_original = bool(host) and bool(original) and _matches_domain(host, original)
        return self._hooks.apply(Hook.IS_ORIGINAL_DOMAIN, is_original, host)

    def is_mapped_domain(self, domain: Optional[str] = None) -> bool:
        """
        True if ``domain`` (default: the current blog's domain) is mapped.

        A domain that is not a known mapped domain of the current blog is
        still considered mapped unless it is an original domain.
        """
        domain = strip_http_prefix(domain or self._site.blog_domain or "")
        if domain and self._index.mapped_contains(self._site.blog_id, domain):
            return True
        return not self.is_original_domain(domain)

    def is_subdomain(self) -> bool:
        """
        True if the request host differs from the network host once every
        occurrence of the network host is removed from it.
        """
        network_host = url_host(self._site.network_home_url)
        host = self._request.host or ""
        remainder = host.replace(network_host, "") if network_host else host
        return self._hooks.apply(Hook.IS_SUBDOMAIN, bool(remainder))

    @staticmethod
    def is_domain(domain_name: Optional[str]) -> bool:
        """Syntactic check that ``domain_name`` can be a domain."""
        if not domain_name or "." not in domain_name:
            return False
        if any(c.isspace() for c in domain_name):
            return False

        candidate = "http://" + domain_name.replace("http://", "").replace("www.", "")
        components = parse_mb_url(candidate)
        if components.get("scheme") != "http" or "host" not in components:
            return False
        return _is_valid_hostname(components["host"])
