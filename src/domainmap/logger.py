"""
Structured logger for the domain mapping library.

Provides dual-format output (JSON and human-readable text), a minimum
severity threshold, and masking of credentials in log data, including
passwords embedded in URLs.
"""

import json
import re
import sys
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, TextIO

from domainmap.config import LoggingConfig
from domainmap.enums import LogLevel


LEVEL_ORDER = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARN: 30,
    LogLevel.ERROR: 40,
}

# scheme://user:password@ -> keep the user, hide the password
URL_CREDENTIALS_PATTERN = re.compile(r"(?P<prefix>[A-Za-z][A-Za-z0-9+.-]*://[^/:@\s]*):[^/@\s]*@")


@dataclass
class LogEntry:
    """A single log entry with its metadata."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)


class DomainMapLogger:
    """
    Logger with JSON/text output and credential masking.

    Entries below the configured level are dropped before formatting.
    The most recent emitted entries (up to ``max_entries``) are kept in
    memory so callers and tests can inspect what a resolver did.
    """

    SENSITIVE_KEYS = frozenset({
        'pass', 'password', 'secret', 'token', 'auth', 'authorization',
        'credential', 'credentials', 'api_key', 'private_key',
    })

    MASK_VALUE = "***MASKED***"

    DEFAULT_MAX_ENTRIES = 1000

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        level: LogLevel = LogLevel.INFO,
        max_entries: Optional[int] = DEFAULT_MAX_ENTRIES,
    ):
        """
        Initialize the logger.

        Args:
            output_format: Output format - 'json', 'text', or 'both'
            output_stream: Output stream for log entries (defaults to sys.stderr)
            level: Minimum severity that is emitted
            max_entries: Number of entries kept in memory; None keeps all,
                0 keeps none
        """
        if output_format not in ("json", "text", "both"):
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._output_stream = output_stream or sys.stderr
        self._level = level
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)

    @classmethod
    def from_config(
        cls,
        config: LoggingConfig,
        output_stream: Optional[TextIO] = None,
    ) -> "DomainMapLogger":
        return cls(
            output_format=config.output_format,
            output_stream=output_stream,
            level=LogLevel(config.level),
        )

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def entries(self) -> list[LogEntry]:
        """Get the retained entries, oldest first."""
        return list(self._entries)

    def is_enabled_for(self, level: LogLevel) -> bool:
        return LEVEL_ORDER[level] >= LEVEL_ORDER[self._level]

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Log an entry in the configured format(s).

        Returns:
            The created LogEntry, or None if the level is filtered out
        """
        if not self.is_enabled_for(level):
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )
        self._entries.append(entry)
        self._output_entry(entry)
        return entry

    def debug(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, component, message, data)

    def info(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, component, message, data)

    def warn(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, component, message, data)

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        level: LogLevel = LogLevel.ERROR,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Log an error with its exception context.

        Args:
            component: Component name generating the log
            message: Human-readable error message
            error: Optional exception object
            level: Severity; suppressed errors are usually logged as WARN
            additional_data: Optional additional context data
        """
        data = additional_data.copy() if additional_data else {}
        if error is not None:
            data["error_message"] = str(error)
            data["error_type"] = type(error).__name__
        return self.log(level, component, message, data)

    def mask_sensitive_data(self, data):
        """
        Recursively mask sensitive values.

        Keys matching SENSITIVE_KEYS are replaced outright; string values
        have URL passwords masked.
        """
        if isinstance(data, str):
            return mask_url_credentials(data)
        if isinstance(data, list):
            return [self.mask_sensitive_data(item) for item in data]
        if not isinstance(data, dict):
            return data

        masked = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(sensitive in key_lower for sensitive in self.SENSITIVE_KEYS):
                masked[key] = self.MASK_VALUE
            else:
                masked[key] = self.mask_sensitive_data(value)
        return masked

    def _output_entry(self, entry: LogEntry) -> None:
        if self._output_format in ("json", "both"):
            self._output_stream.write(self.format_json(entry) + "\n")
        if self._output_format in ("text", "both"):
            self._output_stream.write(self.format_text(entry) + "\n")
        self._output_stream.flush()

    def format_json(self, entry: LogEntry) -> str:
        obj = {
            "timestamp": entry.timestamp,
            "level": entry.level.value,
            "component": entry.component,
            "message": entry.message,
            "data": entry.data,
        }
        return json.dumps(obj, ensure_ascii=False, default=str)

    def format_text(self, entry: LogEntry) -> str:
        # [TIMESTAMP] LEVEL [COMPONENT] MESSAGE {data}
        parts = [
            f"[{entry.timestamp}]",
            entry.level.value.upper(),
            f"[{entry.component}]",
            entry.message,
        ]
        if entry.data:
            parts.append(json.dumps(entry.data, ensure_ascii=False, default=str))
        return " ".join(parts)

    def clear_entries(self) -> None:
        self._entries.clear()


def mask_url_credentials(text: str) -> str:
    """Replace the password part of ``scheme://user:pass@`` with a mask."""
    return URL_CREDENTIALS_PATTERN.sub(
        lambda m: f"{m.group('prefix')}:{DomainMapLogger.MASK_VALUE}@", text
    )
