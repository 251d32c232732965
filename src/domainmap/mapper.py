"""
Domain mapper facade.

A DomainMapper owns every cache used while serving one request and wires the
table reader, domain classifier and scheme resolver together. It resolves
the mapped domain of a blog and swaps URLs between original and mapped
domains.
"""

from typing import Optional, Union

from sqlalchemy.engine import Engine

from .cache import ProcessCache
from .classifier import DomainClassifier
from .config import MappingConfig, create_default_config
from .enums import Hook, RedirectType, Scheme
from .hooks import HookRegistry
from .logger import DomainMapLogger
from .models import DomainIndex, MappedDomain, RequestContext, SiteContext
from .scheme_resolver import SchemeResolver
from .table_reader import DomainTableReader
from .url_tools import build_url, is_admin_url, parse_mb_url, swap_url_scheme, url_host


COMPONENT = "mapper"


class DomainMapper:
    """
    Resolves mapped domains and rewrites URLs for one request.

    The mapping table is scanned once when the mapper is created; later
    lookups are answered from the mapper's own caches. Create a new mapper
    per request so no state leaks between requests.
    """

    def __init__(
        self,
        engine: Engine,
        site: SiteContext,
        request: RequestContext,
        config: Optional[MappingConfig] = None,
        hooks: Optional[HookRegistry] = None,
        logger: Optional[DomainMapLogger] = None,
        cache: Optional[ProcessCache] = None,
    ) -> None:
        """
        Initialize the mapper and load the domain index.

        Args:
            engine: Engine of the database holding the mapping table
            site: Current blog and network
            request: Inbound request
            config: Settings; defaults to create_default_config()
            hooks: Extension point callbacks; defaults to none registered
            logger: Logger; defaults to one built from ``config.logging``
            cache: Process cache; defaults to a fresh one
        """
        self._site = site
        self._request = request
        self._config = config if config is not None else create_default_config()
        self._hooks = hooks if hooks is not None else HookRegistry()
        self._logger = (
            logger if logger is not None
            else DomainMapLogger.from_config(self._config.logging)
        )
        self._cache = cache if cache is not None else ProcessCache()

        self._reader = DomainTableReader(engine, self._config.tables, self._cache, self._logger)
        self._index = DomainIndex.from_rows(self._reader.fetch_all_mappings())
        self._classifier = DomainClassifier(
            site, request, self._index, self._hooks, self._config
        )
        self._schemes = SchemeResolver(
            self._reader,
            self._classifier,
            self._cache,
            request,
            self._hooks,
            self._config,
            self._logger,
        )

    @property
    def config(self) -> MappingConfig:
        return self._config

    @property
    def hooks(self) -> HookRegistry:
        return self._hooks

    @property
    def logger(self) -> DomainMapLogger:
        return self._logger

    @property
    def reader(self) -> DomainTableReader:
        return self._reader

    @property
    def classifier(self) -> DomainClassifier:
        return self._classifier

    @property
    def scheme_resolver(self) -> SchemeResolver:
        return self._schemes

    @property
    def index(self) -> DomainIndex:
        return self._index

    # Index accessors

    def get_mapped_domains(self) -> dict:
        return dict(self._index.mapped)

    def get_mapped_primary_domains(self) -> dict:
        return dict(self._index.primary)

    def get_frontend_redirect_type(self) -> str:
        """Return the frontend redirect mode: 'mapped', 'user' or 'original'."""
        return self._config.redirect_type.value

    def get_current_domain(self) -> Optional[str]:
        """Host of the current blog's home URL."""
        home = self._site.home_url or f"http://{self._site.blog_domain}{self._site.network_path}"
        return url_host(home)

    # Classification

    def get_original_domain(self, with_www: bool = False) -> str:
        return self._classifier.get_original_domain(with_www)

    def is_original_domain(self, domain: Optional[str] = None) -> bool:
        return self._classifier.is_original_domain(domain)

    def is_mapped_domain(self, domain: Optional[str] = None) -> bool:
        return self._classifier.is_mapped_domain(domain)

    def is_subdomain(self) -> bool:
        return self._classifier.is_subdomain()

    def is_domain(self, domain_name: Optional[str]) -> bool:
        return self._classifier.is_domain(domain_name)

    def is_admin_url(self, url: str) -> bool:
        return is_admin_url(url, self._config.admin_path)

    def is_login(self) -> bool:
        """True if the current request is for a login or registration page."""
        pagenow = self._request.pagenow
        needle = pagenow if pagenow is not None else self._request.request_uri.replace("/", "")
        is_login = needle in self._config.login_pages
        return self._hooks.apply(Hook.IS_LOGIN, is_login, needle, pagenow)

    # Schemes

    def force_ssl_on_mapped_domain(
        self,
        domain: Optional[str] = "",
        as_boolean: bool = False,
    ) -> Union[Scheme, bool, None]:
        return self._schemes.resolve_scheme(domain, as_boolean)

    resolve_scheme = force_ssl_on_mapped_domain

    def force_mapped_domain_url_scheme(self, url: str) -> str:
        return self._schemes.force_mapped_domain_url_scheme(url)

    def get_mapped_domain_scheme(self, domain: Optional[str] = "") -> Optional[str]:
        return self._schemes.get_mapped_domain_scheme(domain)

    def get_admin_scheme(self, url: Optional[str] = None) -> Optional[str]:
        return self._schemes.get_admin_scheme(url)

    def swap_url_scheme(self, url: str) -> str:
        return swap_url_scheme(url)

    # Mapped domain resolution

    def _fetch_mapped_domain(self, blog_id: int) -> Optional[MappedDomain]:
        mapping = self._reader.fetch_mapping(blog_id, self._config.allow_multiple)
        return self._hooks.apply(Hook.FETCH_MAPPED_DOMAIN, mapping, blog_id)

    def get_mapped_domain(
        self,
        blog_id: Optional[int] = None,
        consider_front_redirect_type: bool = True,
    ) -> Optional[str]:
        """
        Return the mapped domain of a blog.

        Cached answers are preferred in this order unless visitors choose
        their own domain: the primary domain, the request host when it is
        one of the blog's mapped domains, then the last mapped domain.
        Otherwise the domain is looked up and remembered.

        Args:
            blog_id: Blog to look up; defaults to the current blog
            consider_front_redirect_type: Whether the 'user' redirect mode
                should make the request host the answer

        Returns:
            The mapped domain, or None if the blog is not mapped
        """
        if not blog_id:
            blog_id = self._site.blog_id
        redirect_type = self._config.redirect_type

        if redirect_type != RedirectType.USER:
            if blog_id in self._index.primary:
                return self._index.primary[blog_id]
            if blog_id in self._index.mapped:
                if self._index.mapped_contains(blog_id, self._request.hostname):
                    return self._request.hostname
                return self._index.last_mapped(blog_id)

        is_primary = False
        if consider_front_redirect_type and redirect_type == RedirectType.USER:
            if self._request.is_admin and self._classifier.is_original_domain():
                domain = None
            else:
                domain = self._request.host
        else:
            fetched = self._fetch_mapped_domain(blog_id)
            domain = fetched.domain if fetched is not None else None
            is_primary = fetched.is_primary if fetched is not None else False

        # A primary row lands in the mapped map, everything else in the primary map
        if not is_primary:
            self._index.primary[blog_id] = domain
        else:
            self._index.mapped[blog_id] = domain

        self._logger.debug(
            COMPONENT,
            "Resolved mapped domain",
            {"blog_id": blog_id, "domain": domain, "redirect_type": redirect_type.value},
        )
        return self._hooks.apply(
            Hook.MAPPED_DOMAIN, domain, blog_id, consider_front_redirect_type
        )

    # URL rewriting

    def parse_mb_url(self, url: Optional[str]) -> dict:
        return parse_mb_url(url)

    def build_url(self, components: dict) -> str:
        return self._hooks.apply(Hook.BUILT_URL, build_url(components), components)

    def swap_to_mapped_url(
        self,
        url: str,
        path: Optional[str] = None,
        orig_scheme: Optional[str] = None,
        blog_id: Optional[int] = None,
        consider_front_redirect_type: bool = True,
    ) -> str:
        """
        Rewrite a URL on the original domain onto the blog's mapped domain.

        Args:
            url: URL generated by the host platform
            path: Path requested by the caller; replaces the URL path unless
                empty, ``"/"``, or the request is building an asset URL
            orig_scheme: Scheme requested by the caller (passed to callbacks)
            blog_id: Blog the URL belongs to; defaults to the current blog
            consider_front_redirect_type: See get_mapped_domain()
        """
        components = parse_mb_url(url)
        if not components.get("host"):
            return self._hooks.apply(Hook.SWAP_MAPPED_URL, url, path, orig_scheme, blog_id)

        mapped_domain = self.get_mapped_domain(blog_id, consider_front_redirect_type)
        if not mapped_domain or components["host"] == mapped_domain:
            return self._hooks.apply(Hook.SWAP_MAPPED_URL, url, path, orig_scheme, blog_id)

        components["host"] = mapped_domain
        if (
            path not in (None, "", "/")
            and self._request.current_filter not in self._config.asset_filters
        ):
            components["path"] = "/" + path

        return self._hooks.apply(
            Hook.SWAP_MAPPED_URL, self.build_url(components), path, orig_scheme, blog_id
        )

    def unswap_url(
        self,
        url: str,
        blog_id: Optional[int] = None,
        include_path: bool = True,
    ) -> str:
        """
        Rewrite a URL on a mapped domain back onto the blog's original URL.

        Args:
            url: URL to rewrite
            blog_id: Blog the URL belongs to; defaults to the current blog
            include_path: Keep the URL's own path after the original path
        """
        if not blog_id:
            blog_id = self._site.blog_id

        if blog_id not in self._index.original_siteurls:
            self._index.original_siteurls[blog_id] = self._reader.fetch_original_siteurl(blog_id)

        siteurl = self._index.original_siteurls[blog_id]
        if not siteurl:
            return url

        url_components = parse_mb_url(url)
        orig_components = parse_mb_url(siteurl)

        if "host" in orig_components:
            url_components["host"] = orig_components["host"]
        else:
            url_components.pop("host", None)

        orig_path = orig_components.get("path", "")
        url_path = url_components.get("path", "") if include_path else ""
        url_components["path"] = (self._site.network_path + orig_path + url_path).replace("//", "/")

        unswapped = self.build_url(url_components)
        return self._hooks.apply(Hook.UNSWAPPED_URL, unswapped, url, blog_id, include_path)
