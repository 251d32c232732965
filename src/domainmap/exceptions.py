"""
Exception classes for the domain mapping library.

All exceptions inherit from DomainMapError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DomainMapError(Exception):
    """Base exception for all domain mapping errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(DomainMapError):
    """Raised when configuration values are invalid."""

    pass


class HookError(DomainMapError):
    """Raised when an unknown extension point is addressed."""

    pass
