"""
Exception classes for the WordPress inspector.

All exceptions inherit from WPInspectorError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional

from .enums import ErrorKind


class WPInspectorError(Exception):
    """Base exception for all inspector errors."""

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


class ValidationError(WPInspectorError):
    """Raised when a site URL cannot be normalized."""

    pass


class ConfigError(WPInspectorError):
    """Raised when a configuration file is malformed."""

    pass


class TransportError(WPInspectorError):
    """Raised when an outbound HTTP call fails below the HTTP layer (DNS, connect, timeout)."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.kind = kind
        super().__init__(kind.value, message, details)


class InvalidCredentialsError(WPInspectorError):
    """Raised when a connection config lacks the fields its auth method requires."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        self.kind = ErrorKind.INVALID_CREDENTIALS
        super().__init__(ErrorKind.INVALID_CREDENTIALS.value, message, details)


class UnsupportedMethodError(WPInspectorError):
    """Raised when an authentication method is not recognised."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        self.kind = ErrorKind.UNSUPPORTED_METHOD
        super().__init__(ErrorKind.UNSUPPORTED_METHOD.value, message, details)
