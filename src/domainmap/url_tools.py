"""
URL parsing and rebuilding helpers.

``parse_mb_url`` tolerates raw multi-byte characters anywhere in a URL;
``build_url`` puts the components back together. The remaining helpers
rewrite or toggle the scheme of a URL.
"""

import re
from typing import Optional
from urllib.parse import quote_plus, unquote, unquote_plus, urlsplit


# Runs of characters outside the URL delimiters are percent-encoded before
# splitting so that raw UTF-8 never reaches the parser
MB_SEGMENT_PATTERN = re.compile(r"[^:/?#&=.@\[\]]+")

SCHEME_PREFIX_PATTERN = re.compile(r"^\w+://")
HTTP_PREFIX_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

STRING_COMPONENTS = ("scheme", "user", "pass", "host", "path", "query", "fragment")


def _split_hostport(hostport: str) -> tuple[str, Optional[int]]:
    if hostport.startswith("["):
        end = hostport.find("]")
        if end == -1:
            return hostport, None
        host, rest = hostport[:end + 1], hostport[end + 1:]
        port = rest[1:] if rest.startswith(":") else ""
    elif ":" in hostport:
        host, _, port = hostport.rpartition(":")
    else:
        return hostport, None

    return host, int(port) if port.isdigit() else None


def parse_mb_url(url: Optional[str]) -> dict:
    """
    Split a URL into its components.

    The result holds any of the keys ``scheme``, ``host``, ``port``,
    ``user``, ``pass``, ``path``, ``query`` and ``fragment``; keys for
    components the URL does not have are left out. Input that cannot be
    parsed yields an empty dict.

    A port that is not numeric is dropped. An empty userinfo
    (``http://@host``) parses to an empty ``user``, which build_url()
    omits, so neither survives a rebuild.
    """
    if not url:
        return {}

    encoded = MB_SEGMENT_PATTERN.sub(lambda m: quote_plus(m.group(0), safe=""), url)
    try:
        parts = urlsplit(encoded)
    except ValueError:
        return {}

    components: dict = {}
    if parts.scheme:
        components["scheme"] = parts.scheme

    if parts.netloc:
        userinfo, at, hostport = parts.netloc.rpartition("@")
        if at:
            user, colon, password = userinfo.partition(":")
            components["user"] = user
            if colon:
                components["pass"] = password
        host, port = _split_hostport(hostport)
        if host:
            components["host"] = host
        if port is not None:
            components["port"] = port

    if parts.path:
        components["path"] = parts.path
    if parts.query or "?" in encoded.split("#", 1)[0]:
        components["query"] = parts.query
    if parts.fragment or "#" in encoded:
        components["fragment"] = parts.fragment

    for key in STRING_COMPONENTS:
        if key in components:
            components[key] = unquote_plus(components[key])
    return components


def build_url(components: dict) -> str:
    """
    Reassemble a URL from ``parse_mb_url`` components.

    Doubled slashes are collapsed between the credentials and the end of
    the path; the query and fragment are left as they are.
    """
    scheme = f"{components['scheme']}://" if "scheme" in components else ""
    host = components.get("host", "")
    port = f":{components['port']}" if "port" in components else ""

    user = components.get("user", "")
    password = f":{components['pass']}" if "pass" in components else ""
    credentials = f"{user}{password}@" if user or password else ""

    path = components.get("path", "")
    query = f"?{components['query']}" if "query" in components else ""
    fragment = f"#{components['fragment']}" if "fragment" in components else ""

    authority_and_path = f"{credentials}{host}{port}{path}".replace("//", "/")
    return f"{scheme}{authority_and_path}{query}{fragment}"


def set_url_scheme(url: str, scheme: str) -> str:
    """Replace the scheme of an absolute or protocol-relative URL."""
    url = url.strip()
    if url.startswith("//"):
        url = "http:" + url
    return SCHEME_PREFIX_PATTERN.sub(f"{scheme}://", url, count=1)


def swap_url_scheme(url: str) -> str:
    """Turn an http URL into https and vice versa; other URLs are returned as is."""
    scheme = parse_mb_url(url).get("scheme")
    if scheme == "https":
        return set_url_scheme(url, "http")
    if scheme == "http":
        return set_url_scheme(url, "https")
    return url


def strip_http_prefix(domain: str) -> str:
    return HTTP_PREFIX_PATTERN.sub("", domain, count=1)


def strip_www(domain: str) -> str:
    return domain[4:] if domain.startswith("www.") else domain


def url_host(url: Optional[str]) -> Optional[str]:
    """Host of a URL, or None if it has none."""
    return parse_mb_url(url).get("host")


def is_admin_url(url: str, admin_path: str = "/wp-admin") -> bool:
    """True if the URL-decoded path of ``url`` lies in the admin area."""
    path = parse_mb_url(unquote(url)).get("path")
    return bool(path) and admin_path in path
