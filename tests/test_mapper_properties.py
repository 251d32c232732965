"""
Tests for the DomainMapper facade.

Covers mapped-domain resolution and its caches, URL swapping in both
directions, and the request helpers.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from domainmap.config import MappingConfig
from domainmap.enums import Hook, LogLevel
from domainmap.hooks import HookRegistry

from mapping_fixtures import QueryCounter, build_engine, build_mapper


MAPPED = MappingConfig(frontend_redirect_type="mapped")
MAPPED_MULTIPLE = MappingConfig(frontend_redirect_type="mapped", allow_multiple=True)
USER = MappingConfig(frontend_redirect_type="user")


class TestGetMappedDomain:
    """Tests for the cached mapped-domain resolution rules."""

    def test_primary_domain_is_returned_without_further_reads(self) -> None:
        engine = build_engine([(5, "shop.example", True, 0)])
        mapper = build_mapper(engine, config=MAPPED)
        counter = QueryCounter(engine)

        assert mapper.get_mapped_domain(5) == "shop.example"
        assert mapper.get_mapped_domain(5) == "shop.example"
        assert counter.statements == []

    def test_cold_lookup_is_cached(self) -> None:
        engine = build_engine([(5, "shop.example", True, 0)])
        mapper = build_mapper(engine, config=USER)
        counter = QueryCounter(engine)

        assert mapper.get_mapped_domain(5, consider_front_redirect_type=False) == "shop.example"
        assert mapper.get_mapped_domain(5, consider_front_redirect_type=False) == "shop.example"
        assert counter.count("SELECT domain, is_primary") == 1

    def test_last_mapped_domain_wins_without_primary(self) -> None:
        engine = build_engine([
            (7, "a.com", False, 0),
            (7, "b.com", False, 0),
        ])
        mapper = build_mapper(engine, config=MAPPED_MULTIPLE)

        assert mapper.get_mapped_domain(7) == "b.com"

    def test_request_host_is_preferred_when_it_is_mapped(self) -> None:
        engine = build_engine([
            (7, "a.com", False, 0),
            (7, "b.com", False, 0),
        ])
        mapper = build_mapper(engine, host="a.com", config=MAPPED_MULTIPLE)

        assert mapper.get_mapped_domain(7) == "a.com"

    def test_request_host_with_port_is_matched_by_hostname(self) -> None:
        engine = build_engine([
            (7, "a.com", False, 0),
            (7, "b.com", False, 0),
        ])
        mapper = build_mapper(engine, host="a.com:8080", config=MAPPED_MULTIPLE)

        assert mapper.get_mapped_domain(7) == "a.com"

    def test_primary_domain_beats_request_host(self) -> None:
        engine = build_engine([
            (7, "a.com", False, 0),
            (7, "b.com", True, 0),
        ])
        mapper = build_mapper(engine, host="a.com", config=MAPPED_MULTIPLE)

        assert mapper.get_mapped_domain(7) == "b.com"

    def test_unmapped_blog_resolves_to_none_once(self) -> None:
        engine = build_engine([(5, "shop.example", True, 0)])
        mapper = build_mapper(engine, config=MAPPED)
        counter = QueryCounter(engine)

        assert mapper.get_mapped_domain(9) is None
        assert mapper.get_mapped_domain(9) is None
        assert counter.count("SELECT domain, is_primary") == 1
        assert 9 in mapper.get_mapped_primary_domains()

    def test_defaults_to_current_blog(self) -> None:
        engine = build_engine([(5, "shop.example", True, 0)])
        mapper = build_mapper(engine, blog_id=5, config=MAPPED)

        assert mapper.get_mapped_domain() == "shop.example"

    def test_user_mode_returns_request_host(self) -> None:
        engine = build_engine([(5, "shop.example", True, 0)])
        mapper = build_mapper(engine, host="visitor.example", config=USER)

        assert mapper.get_mapped_domain(5) == "visitor.example"

    def test_user_mode_in_admin_on_original_domain_returns_none(self) -> None:
        engine = build_engine([(5, "shop.example", True, 0)])
        mapper = build_mapper(engine, host="example.com", is_admin=True, config=USER)

        assert mapper.get_mapped_domain(5) is None

    def test_cold_path_passes_hooks(self) -> None:
        hooks = HookRegistry()
        seen = []

        def record(domain, blog_id, consider):
            seen.append((domain, blog_id, consider))
            return domain.upper()

        hooks.add(Hook.MAPPED_DOMAIN, record)
        hooks.add(Hook.FETCH_MAPPED_DOMAIN, lambda row, blog_id: row)
        mapper = build_mapper(
            build_engine([(5, "shop.example", True, 0)]), config=USER, hooks=hooks
        )

        assert mapper.get_mapped_domain(5, consider_front_redirect_type=False) == "SHOP.EXAMPLE"
        assert seen == [("shop.example", 5, False)]

    def test_index_accessors(self) -> None:
        engine = build_engine([
            (5, "shop.example", True, 0),
            (7, "a.com", False, 0),
        ])
        mapper = build_mapper(engine)

        assert mapper.get_mapped_domains() == {5: ["shop.example"], 7: ["a.com"]}
        assert mapper.get_mapped_primary_domains() == {5: "shop.example"}
        assert mapper.get_frontend_redirect_type() == "mapped"

    def test_missing_mapping_table_behaves_as_unmapped(self) -> None:
        engine = build_engine(with_mapping_table=False)
        mapper = build_mapper(engine, config=MAPPED)

        assert mapper.get_mapped_domains() == {}
        assert mapper.get_mapped_domain(5) is None
        warnings = [e for e in mapper.logger.entries if e.level == LogLevel.WARN]
        assert len(warnings) == 2


class TestSwapToMappedUrl:
    """Tests for rewriting original URLs onto mapped domains."""

    def _mapper(self, **kwargs):
        return build_mapper(build_engine([(5, "shop.example", True, 0)]), config=MAPPED, **kwargs)

    def test_host_is_swapped_and_path_kept(self) -> None:
        mapper = self._mapper()

        assert mapper.swap_to_mapped_url("http://example.com/shop/cart?x=1", blog_id=5) == \
            "http://shop.example/shop/cart?x=1"

    def test_path_argument_replaces_url_path(self) -> None:
        mapper = self._mapper()

        assert mapper.swap_to_mapped_url("http://example.com/shop/cart", "cart", blog_id=5) == \
            "http://shop.example/cart"

    def test_root_path_argument_keeps_url_path(self) -> None:
        mapper = self._mapper()

        assert mapper.swap_to_mapped_url("http://example.com/shop/", "/", blog_id=5) == \
            "http://shop.example/shop/"

    def test_asset_urls_keep_their_path(self) -> None:
        mapper = self._mapper(current_filter="plugins_url")

        assert mapper.swap_to_mapped_url(
            "http://example.com/wp-content/plugins/x/app.js", "app.js", blog_id=5
        ) == "http://shop.example/wp-content/plugins/x/app.js"

    def test_urls_without_host_are_unchanged(self) -> None:
        assert self._mapper().swap_to_mapped_url("/relative/path", blog_id=5) == "/relative/path"

    def test_already_mapped_urls_are_unchanged(self) -> None:
        url = "https://shop.example/cart"

        assert self._mapper().swap_to_mapped_url(url, "other", blog_id=5) == url

    def test_unmapped_blog_urls_are_unchanged(self) -> None:
        url = "http://example.com/other/"

        assert self._mapper().swap_to_mapped_url(url, blog_id=9) == url

    def test_hook_sees_every_result(self) -> None:
        hooks = HookRegistry()
        seen = []

        def record(url, path, orig_scheme, blog_id):
            seen.append((url, path, orig_scheme, blog_id))
            return url

        hooks.add(Hook.SWAP_MAPPED_URL, record)
        mapper = self._mapper(hooks=hooks)

        mapper.swap_to_mapped_url("/relative", blog_id=5)
        mapper.swap_to_mapped_url("http://example.com/x", "y", "https", 5)

        assert seen == [
            ("/relative", None, None, 5),
            ("http://shop.example/y", "y", "https", 5),
        ]

    @given(segments=st.lists(
        st.text(alphabet="abcdefghijklmnopqrstuvwxyzäöü0123456789-", min_size=1, max_size=8),
        min_size=1,
        max_size=4,
    ))
    @settings(max_examples=50)
    def test_swap_then_unswap_restores_original_url(self, segments: list[str]) -> None:
        """
        *For any* path on a blog whose site URL is the bare network host,
        unswapping a swapped URL SHALL give back the original URL.
        """
        engine = build_engine(
            [(5, "shop.example", True, 0)],
            siteurls={5: "http://example.com"},
        )
        mapper = build_mapper(engine, config=MAPPED)
        url = "http://example.com/" + "/".join(segments)

        swapped = mapper.swap_to_mapped_url(url, blog_id=5)

        assert swapped == "http://shop.example/" + "/".join(segments)
        assert mapper.unswap_url(swapped, blog_id=5) == url


class TestUnswapUrl:
    """Tests for rewriting mapped URLs back onto original URLs."""

    def _mapper(self, **kwargs):
        engine = build_engine(
            [(5, "shop.example", True, 0)],
            siteurls={1: "http://example.com", 5: "http://example.com/shop"},
        )
        return build_mapper(engine, config=MAPPED, **kwargs)

    def test_host_and_path_are_restored(self) -> None:
        mapper = self._mapper()

        assert mapper.unswap_url("http://shop.example/cart?x=1", blog_id=5) == \
            "http://example.com/shop/cart?x=1"

    def test_path_can_be_dropped(self) -> None:
        mapper = self._mapper()

        assert mapper.unswap_url("https://shop.example/cart?x=1", blog_id=5, include_path=False) == \
            "https://example.com/shop?x=1"

    def test_main_blog_uses_main_options_table(self) -> None:
        mapper = self._mapper(blog_id=1)

        assert mapper.unswap_url("http://alias.example/about/") == "http://example.com/about/"

    def test_blog_without_site_url_is_unchanged(self) -> None:
        mapper = self._mapper()
        url = "http://elsewhere.example/x"

        assert mapper.unswap_url(url, blog_id=8) == url
        assert any(e.level == LogLevel.WARN for e in mapper.logger.entries)

    def test_site_url_is_read_once_and_makes_host_original(self) -> None:
        engine = build_engine(siteurls={6: "http://legacy.example/"})
        mapper = build_mapper(engine, config=MAPPED)
        counter = QueryCounter(engine)

        assert not mapper.is_original_domain("legacy.example")
        mapper.unswap_url("http://brand.example/a", blog_id=6)
        mapper.unswap_url("http://brand.example/b", blog_id=6)

        assert counter.count("SELECT option_value") == 1
        assert mapper.is_original_domain("legacy.example")

    def test_hook_receives_context(self) -> None:
        hooks = HookRegistry()
        seen = []

        def record(unswapped, url, blog_id, include_path):
            seen.append((unswapped, url, blog_id, include_path))
            return unswapped

        hooks.add("unswapped_url", record)
        mapper = self._mapper(hooks=hooks)

        mapper.unswap_url("http://shop.example/a", blog_id=5)

        assert seen == [("http://example.com/shop/a", "http://shop.example/a", 5, True)]

    def test_built_url_hook_is_applied(self) -> None:
        hooks = HookRegistry()
        hooks.add(Hook.BUILT_URL, lambda url, components: url + "#built")
        mapper = self._mapper(hooks=hooks)

        assert mapper.unswap_url("http://shop.example/a", blog_id=5) == "http://example.com/shop/a#built"


class TestRequestHelpers:
    """Tests for login, admin and current-domain helpers."""

    def _mapper(self, **kwargs):
        return build_mapper(build_engine(), **kwargs)

    def test_is_login_from_pagenow(self) -> None:
        assert self._mapper(pagenow="wp-login.php").is_login()
        assert not self._mapper(pagenow="index.php", request_uri="/wp-login.php").is_login()

    def test_is_login_from_request_uri(self) -> None:
        assert self._mapper(request_uri="/wp-register.php").is_login()
        assert not self._mapper(request_uri="/blog/").is_login()

    def test_is_login_hook(self) -> None:
        hooks = HookRegistry()
        seen = []

        def record(is_login, needle, pagenow):
            seen.append((is_login, needle, pagenow))
            return True

        hooks.add(Hook.IS_LOGIN, record)

        assert self._mapper(request_uri="/account/", hooks=hooks).is_login()
        assert seen == [(False, "account", None)]

    def test_is_admin_url(self) -> None:
        mapper = self._mapper()

        assert mapper.is_admin_url("http://example.com/wp-admin/index.php")
        assert not mapper.is_admin_url("http://example.com/about/")

    def test_get_current_domain(self) -> None:
        assert self._mapper(home_url="https://shop.example/").get_current_domain() == "shop.example"
        assert self._mapper(blog_domain="blog.example.com").get_current_domain() == "blog.example.com"

    def test_get_original_domain(self) -> None:
        mapper = self._mapper()

        assert mapper.get_original_domain() == "example.com"
        assert mapper.get_original_domain(with_www=True) == "www.example.com"

    def test_classification_is_delegated(self) -> None:
        mapper = self._mapper(host="blog.example.com")

        assert mapper.is_original_domain()
        assert mapper.is_subdomain()
        assert mapper.is_mapped_domain("brand.example")
        assert mapper.is_domain("brand.example")
