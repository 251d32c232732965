"""
Configuration dataclasses for the domain mapping library.

This module defines the settings consulted while resolving mapped domains:
table names, the frontend redirect mode, the admin SSL flag, extra network
domains and logging, together with loaders for JSON files and environment
variables (including ``.env`` files).
"""

import json
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .enums import LogLevel, RedirectType
from .exceptions import ConfigurationError


# Table names are interpolated into SQL, so they must be plain identifiers
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

OUTPUT_FORMATS = ("json", "text", "both")

ENV_PREFIX = "DOMAINMAP_"


def _validate_identifier(name: str, value: str) -> None:
    if not isinstance(value, str) or not IDENTIFIER_PATTERN.match(value):
        raise ConfigurationError(
            code="invalid_identifier",
            message=f"{name} must be a plain SQL identifier, got {value!r}",
            details={"field": name, "value": value},
        )


@dataclass
class TableConfig:
    """Names of the tables the mapping data lives in."""

    mapping_table: str = "wp_domain_mapping"
    table_prefix: str = "wp_"
    main_blog_id: int = 1

    def __post_init__(self) -> None:
        _validate_identifier("mapping_table", self.mapping_table)
        _validate_identifier("table_prefix", self.table_prefix)

    def options_table(self, blog_id: int) -> str:
        """
        Return the options table of a blog.

        The main blog keeps its options in ``<prefix>options``, every other
        blog in ``<prefix><blog_id>_options``.
        """
        if int(blog_id) == self.main_blog_id:
            return f"{self.table_prefix}options"
        return f"{self.table_prefix}{int(blog_id)}_options"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'

    def __post_init__(self) -> None:
        try:
            LogLevel(self.level)
        except ValueError:
            raise ConfigurationError(
                code="invalid_log_level",
                message=f"Unknown log level {self.level!r}",
                details={"level": self.level},
            )
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                code="invalid_output_format",
                message=f"Unknown log output format {self.output_format!r}",
                details={"output_format": self.output_format},
            )


@dataclass
class MappingConfig:
    """Main configuration combining all settings."""

    tables: TableConfig = field(default_factory=TableConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    allow_multiple: bool = False
    frontend_redirect_type: str = RedirectType.MAPPED.value
    force_admin_ssl: bool = False
    # Additional domains served by the network itself (multi-domain networks)
    network_domains: list[str] = field(default_factory=list)
    login_pages: list[str] = field(
        default_factory=lambda: ["wp-login.php", "wp-register.php"]
    )
    asset_filters: list[str] = field(
        default_factory=lambda: ["plugins_url", "content_url"]
    )
    admin_path: str = "/wp-admin"

    def __post_init__(self) -> None:
        try:
            RedirectType(self.frontend_redirect_type)
        except ValueError:
            raise ConfigurationError(
                code="invalid_redirect_type",
                message=f"Unknown frontend redirect type {self.frontend_redirect_type!r}",
                details={
                    "frontend_redirect_type": self.frontend_redirect_type,
                    "allowed": [r.value for r in RedirectType],
                },
            )

    @property
    def redirect_type(self) -> RedirectType:
        return RedirectType(self.frontend_redirect_type)


def create_default_config() -> MappingConfig:
    """Create a configuration with the default table layout and settings."""
    return MappingConfig()


def config_to_dict(config: MappingConfig) -> dict:
    """Convert a configuration into a JSON-serializable dictionary."""
    return {
        "tables": {
            "mapping_table": config.tables.mapping_table,
            "table_prefix": config.tables.table_prefix,
            "main_blog_id": config.tables.main_blog_id,
        },
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
        "allow_multiple": config.allow_multiple,
        "frontend_redirect_type": config.frontend_redirect_type,
        "force_admin_ssl": config.force_admin_ssl,
        "network_domains": list(config.network_domains),
        "login_pages": list(config.login_pages),
        "asset_filters": list(config.asset_filters),
        "admin_path": config.admin_path,
    }


def config_from_dict(data: dict) -> MappingConfig:
    """
    Build a configuration from a dictionary.

    Missing keys fall back to defaults.

    Raises:
        ConfigurationError: If a value fails validation
    """
    defaults = MappingConfig()
    tables_data = data.get("tables", {})
    logging_data = data.get("logging", {})

    return MappingConfig(
        tables=TableConfig(
            mapping_table=tables_data.get("mapping_table", defaults.tables.mapping_table),
            table_prefix=tables_data.get("table_prefix", defaults.tables.table_prefix),
            main_blog_id=int(tables_data.get("main_blog_id", defaults.tables.main_blog_id)),
        ),
        logging=LoggingConfig(
            level=logging_data.get("level", defaults.logging.level),
            output_format=logging_data.get("output_format", defaults.logging.output_format),
        ),
        allow_multiple=bool(data.get("allow_multiple", defaults.allow_multiple)),
        frontend_redirect_type=data.get(
            "frontend_redirect_type", defaults.frontend_redirect_type
        ),
        force_admin_ssl=bool(data.get("force_admin_ssl", defaults.force_admin_ssl)),
        network_domains=list(data.get("network_domains", defaults.network_domains)),
        login_pages=list(data.get("login_pages", defaults.login_pages)),
        asset_filters=list(data.get("asset_filters", defaults.asset_filters)),
        admin_path=data.get("admin_path", defaults.admin_path),
    )


def load_config_from_file(config_path: Path) -> Optional[MappingConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        MappingConfig if the file exists, None otherwise

    Raises:
        ConfigurationError: If the file is not valid JSON or holds invalid values
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            code="parse_error",
            message=f"Failed to parse config file: {e}",
            details={"file_path": str(config_path)},
        )

    if not isinstance(data, dict):
        raise ConfigurationError(
            code="parse_error",
            message="Config file must contain a JSON object",
            details={"file_path": str(config_path)},
        )

    try:
        return config_from_dict(data)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            code="invalid_value",
            message=f"Invalid config value: {e}",
            details={"file_path": str(config_path)},
        )


def save_config_to_file(config: MappingConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)
        return True
    except OSError as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return list(default)
    items = [p.strip() for chunk in raw.replace(";", ",").split(",") for p in chunk.split()]
    return [item for item in items if item]


def load_config_from_env(env_file: Optional[Path] = None) -> MappingConfig:
    """
    Load configuration from ``DOMAINMAP_*`` environment variables.

    A ``.env`` file is read first (without overriding variables that are
    already set).

    Args:
        env_file: Optional explicit path of the ``.env`` file

    Raises:
        ConfigurationError: If a value fails validation
    """
    load_dotenv(dotenv_path=env_file)
    defaults = MappingConfig()

    try:
        main_blog_id = int(os.getenv(ENV_PREFIX + "MAIN_BLOG_ID", defaults.tables.main_blog_id))
    except ValueError:
        raise ConfigurationError(
            code="invalid_value",
            message="DOMAINMAP_MAIN_BLOG_ID must be an integer",
            details={"value": os.getenv(ENV_PREFIX + "MAIN_BLOG_ID")},
        )

    return MappingConfig(
        tables=TableConfig(
            mapping_table=os.getenv(ENV_PREFIX + "MAPPING_TABLE", defaults.tables.mapping_table),
            table_prefix=os.getenv(ENV_PREFIX + "TABLE_PREFIX", defaults.tables.table_prefix),
            main_blog_id=main_blog_id,
        ),
        logging=LoggingConfig(
            level=os.getenv(ENV_PREFIX + "LOG_LEVEL", defaults.logging.level).lower(),
            output_format=os.getenv(ENV_PREFIX + "LOG_FORMAT", defaults.logging.output_format).lower(),
        ),
        allow_multiple=_env_bool("ALLOW_MULTIPLE", defaults.allow_multiple),
        frontend_redirect_type=os.getenv(
            ENV_PREFIX + "FRONTEND_REDIRECT", defaults.frontend_redirect_type
        ).lower(),
        force_admin_ssl=_env_bool("FORCE_ADMIN_SSL", defaults.force_admin_ssl),
        network_domains=_env_list("NETWORK_DOMAINS", defaults.network_domains),
        login_pages=_env_list("LOGIN_PAGES", defaults.login_pages),
        asset_filters=_env_list("ASSET_FILTERS", defaults.asset_filters),
        admin_path=os.getenv(ENV_PREFIX + "ADMIN_PATH", defaults.admin_path),
    )
