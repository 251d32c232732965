"""
Enumeration types for the domain mapping library.

These enums provide type-safe constants for stored scheme flags, frontend
redirect modes, extension point names and log levels.
"""

from enum import Enum, IntEnum


class Scheme(IntEnum):
    """Scheme flag stored per mapped domain."""

    HTTP = 0
    HTTPS = 1
    VISITOR_CHOICE = 2  # defer to the scheme of the inbound request


class RedirectType(Enum):
    """Frontend redirect mode of the network."""

    MAPPED = "mapped"
    USER = "user"
    ORIGINAL = "original"


class Hook(Enum):
    """Named extension points that accept post-processing callbacks."""

    FORCE_SSL_ON_MAPPED_DOMAIN = "force_ssl_on_mapped_domain"
    IS_ORIGINAL_DOMAIN = "is_original_domain"
    IS_SUBDOMAIN = "is_subdomain"
    IS_LOGIN = "is_login"
    FETCH_MAPPED_DOMAIN = "fetch_mapped_domain"
    MAPPED_DOMAIN = "mapped_domain"
    BUILT_URL = "built_url"
    UNSWAPPED_URL = "unswapped_url"
    SWAP_MAPPED_URL = "swap_mapped_url"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
