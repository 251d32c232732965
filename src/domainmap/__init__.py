"""
Domainmap - mapped domain resolution and URL rewriting for multisite networks.

This package decides, per request, whether a URL belongs on a site's
original network domain or on one of its mapped (vanity) domains, which
scheme it must use, and rewrites URLs accordingly.
"""

__version__ = "0.1.0"
__author__ = "Domainmap Team"

from domainmap.exceptions import (
    DomainMapError,
    ConfigurationError,
    HookError,
)
from domainmap.enums import (
    Scheme,
    RedirectType,
    Hook,
    LogLevel,
)
from domainmap.config import (
    TableConfig,
    LoggingConfig,
    MappingConfig,
    create_default_config,
    config_from_dict,
    config_to_dict,
    load_config_from_file,
    load_config_from_env,
    save_config_to_file,
)
from domainmap.logger import (
    DomainMapLogger,
    LogEntry,
    mask_url_credentials,
)
from domainmap.hooks import (
    HookRegistry,
)
from domainmap.models import (
    MappedDomain,
    DomainIndex,
    RequestContext,
    SiteContext,
)
from domainmap.cache import (
    ProcessCache,
)
from domainmap.table_reader import (
    DomainTableReader,
    create_mapping_engine,
)
from domainmap.url_tools import (
    parse_mb_url,
    build_url,
    set_url_scheme,
    swap_url_scheme,
    is_admin_url,
)
from domainmap.classifier import (
    DomainClassifier,
)
from domainmap.scheme_resolver import (
    SchemeResolver,
)
from domainmap.mapper import (
    DomainMapper,
)

__all__ = [
    # Exceptions
    "DomainMapError",
    "ConfigurationError",
    "HookError",
    # Enums
    "Scheme",
    "RedirectType",
    "Hook",
    "LogLevel",
    # Configuration
    "TableConfig",
    "LoggingConfig",
    "MappingConfig",
    "create_default_config",
    "config_from_dict",
    "config_to_dict",
    "load_config_from_file",
    "load_config_from_env",
    "save_config_to_file",
    # Logging
    "DomainMapLogger",
    "LogEntry",
    "mask_url_credentials",
    # Hooks
    "HookRegistry",
    # Models
    "MappedDomain",
    "DomainIndex",
    "RequestContext",
    "SiteContext",
    # Cache
    "ProcessCache",
    # Table Reader
    "DomainTableReader",
    "create_mapping_engine",
    # URL tools
    "parse_mb_url",
    "build_url",
    "set_url_scheme",
    "swap_url_scheme",
    "is_admin_url",
    # Classifier
    "DomainClassifier",
    # Scheme Resolver
    "SchemeResolver",
    # Mapper
    "DomainMapper",
]
