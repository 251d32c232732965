"""
Read access to the domain mapping table and blog options tables.

Each distinct query shape sits behind an accessor. Results of the mapping
queries are kept in the resolver's ProcessCache. Database failures are
logged and reported as "nothing found": an unmapped blog is the normal
case, so the callers never see data-layer exceptions.
"""

from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .cache import ProcessCache
from .config import TableConfig
from .enums import LogLevel, Scheme
from .logger import DomainMapLogger
from .models import MappedDomain


COMPONENT = "table_reader"


def create_mapping_engine(url: str, **kwargs) -> Engine:
    """Create an engine for the database holding the mapping table."""
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


def coerce_scheme(value, logger: Optional[DomainMapLogger] = None) -> Scheme:
    """
    Convert a stored scheme flag to Scheme.

    Missing values count as HTTP, matching an integer cast of NULL.
    """
    if value is None:
        return Scheme.HTTP
    try:
        return Scheme(int(value))
    except (TypeError, ValueError):
        if logger is not None:
            logger.warn(COMPONENT, "Unknown scheme flag, using http", {"value": value})
        return Scheme.HTTP


class DomainTableReader:
    """Cached read queries against the mapping and options tables."""

    def __init__(
        self,
        engine: Engine,
        tables: TableConfig,
        cache: ProcessCache,
        logger: DomainMapLogger,
    ) -> None:
        self._engine = engine
        self._tables = tables
        self._cache = cache
        self._logger = logger

    def _query(self, sql: str, params: Optional[dict] = None) -> Optional[list]:
        """
        Run a read query.

        Returns:
            The result rows, or None if the query failed
        """
        try:
            with self._engine.connect() as connection:
                return list(connection.execute(text(sql), params or {}))
        except SQLAlchemyError as e:
            self._logger.log_error(
                COMPONENT,
                "Query failed, treating as not found",
                error=e,
                level=LogLevel.WARN,
                additional_data={"sql": sql, "params": params or {}},
            )
            return None

    def fetch_all_mappings(self) -> list[MappedDomain]:
        """Return every row of the mapping table in table order."""
        rows, found = self._cache.get("all")
        if found:
            return rows

        result = self._query(
            f"SELECT blog_id, domain, is_primary FROM {self._tables.mapping_table}"
        )
        rows = [
            MappedDomain(
                blog_id=int(row.blog_id),
                domain=row.domain,
                is_primary=bool(row.is_primary),
            )
            for row in (result or [])
        ]
        self._logger.debug(COMPONENT, "Loaded mapping table", {"rows": len(rows)})
        self._cache.set("all", rows)
        return rows

    def fetch_mapping(self, blog_id: int, allow_multiple: bool) -> Optional[MappedDomain]:
        """
        Return THE mapped domain of a blog.

        With multiple mappings allowed the primary row wins, otherwise the
        oldest row does.
        """
        cache_key = f"{blog_id}_multiple_allowed" if allow_multiple else str(blog_id)
        mapping, found = self._cache.get(cache_key)
        if found:
            return mapping

        order = "is_primary DESC, id ASC" if allow_multiple else "id ASC"
        result = self._query(
            f"SELECT domain, is_primary FROM {self._tables.mapping_table} "
            f"WHERE blog_id = :blog_id ORDER BY {order} LIMIT 1",
            {"blog_id": int(blog_id)},
        )
        mapping = None
        if result:
            row = result[0]
            mapping = MappedDomain(
                blog_id=int(blog_id),
                domain=row.domain,
                is_primary=bool(row.is_primary),
            )

        self._logger.debug(
            COMPONENT,
            "Fetched mapped domain",
            {"blog_id": blog_id, "domain": mapping.domain if mapping else None},
        )
        self._cache.set(cache_key, mapping)
        return mapping

    def fetch_scheme(self, domain: str) -> Scheme:
        """Return the stored scheme flag of a mapped domain."""
        result = self._query(
            f"SELECT scheme FROM {self._tables.mapping_table} WHERE domain = :domain",
            {"domain": domain},
        )
        value = result[0].scheme if result else None
        return coerce_scheme(value, self._logger)

    def fetch_original_siteurl(self, blog_id: int) -> Optional[str]:
        """Return the ``siteurl`` option of a blog."""
        result = self._query(
            f"SELECT option_value FROM {self._tables.options_table(blog_id)} "
            "WHERE option_name = 'siteurl'"
        )
        if not result:
            return None
        return result[0].option_value
