"""
Scheme resolution for mapped domains.

Works out whether a domain should be served over http or https, from the
mapping already matched for the request or the stored per-domain flag, and
applies the result to URLs.
"""

from typing import Optional, Union

from .cache import ProcessCache
from .classifier import DomainClassifier
from .config import MappingConfig
from .enums import Hook, Scheme
from .hooks import HookRegistry
from .logger import DomainMapLogger
from .models import RequestContext
from .table_reader import DomainTableReader
from .url_tools import set_url_scheme, url_host


COMPONENT = "scheme_resolver"
SCHEME_GROUP = "schemes"


class SchemeResolver:
    """Resolves and enforces the scheme of mapped domains."""

    def __init__(
        self,
        reader: DomainTableReader,
        classifier: DomainClassifier,
        cache: ProcessCache,
        request: RequestContext,
        hooks: HookRegistry,
        config: MappingConfig,
        logger: DomainMapLogger,
    ) -> None:
        self._reader = reader
        self._classifier = classifier
        self._cache = cache
        self._request = request
        self._hooks = hooks
        self._config = config
        self._logger = logger

    def resolve_scheme(
        self,
        domain: Optional[str] = "",
        as_boolean: bool = False,
    ) -> Union[Scheme, bool, None]:
        """
        Return the scheme a domain should be served with.

        Args:
            domain: Host or URL; defaults to the request host
            as_boolean: Return True for https and False for http. A visitor
                choice flag then resolves to the scheme of the current
                request.

        Returns:
            A Scheme, or a bool when ``as_boolean`` is set. Extension point
            callbacks may substitute any value, including None.
        """
        domain = url_host(domain) or domain or self._request.hostname
        active = self._request.active_mapping

        if active is not None and self._classifier.is_original_domain(domain):
            return active.scheme

        if active is not None and active.domain == domain:
            scheme = Scheme(int(active.scheme))
        else:
            scheme, found = self._cache.get(domain, group=SCHEME_GROUP)
            if not found:
                scheme = self._reader.fetch_scheme(domain)
                self._cache.set(domain, scheme, group=SCHEME_GROUP)
                self._logger.debug(
                    COMPONENT, "Cached domain scheme", {"domain": domain, "scheme": scheme.name}
                )

        result: Union[Scheme, bool] = scheme
        if as_boolean:
            if scheme == Scheme.VISITOR_CHOICE:
                result = self._request.is_secure
            else:
                result = bool(scheme)

        return self._hooks.apply(Hook.FORCE_SSL_ON_MAPPED_DOMAIN, result, domain)

    def force_mapped_domain_url_scheme(self, url: str) -> str:
        """Rewrite the scheme of ``url`` to the one its host must use."""
        scheme = self.resolve_scheme(url)
        if scheme is None:
            return url
        if scheme == Scheme.HTTPS:
            return set_url_scheme(url, "https")
        if scheme == Scheme.HTTP:
            return set_url_scheme(url, "http")
        return url

    def get_mapped_domain_scheme(self, domain: Optional[str] = "") -> Optional[str]:
        """
        Return ``"https"`` or ``"http"`` when a scheme is forced for the
        domain, None when the visitor's choice applies.
        """
        scheme = self.resolve_scheme(domain)
        if scheme is None:
            return None
        if scheme == Scheme.HTTP:
            return "http"
        if scheme == Scheme.HTTPS:
            return "https"
        return None

    def get_admin_scheme(self, url: Optional[str] = None) -> Optional[str]:
        """Return ``"https"`` if admin pages are forced onto SSL, else None."""
        if not self._config.force_admin_ssl:
            return None
        if url is None or self._classifier.is_original_domain(url):
            return "https"
        return None
