"""
Configuration dataclasses for the WordPress inspector.

This module defines the per-attempt connection configuration and the
process-wide settings for transport, language and logging.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .enums import AuthMethod
from .exceptions import UnsupportedMethodError
from .url_normalizer import normalize_site_url


DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "SparkleWP/1.0"


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Everything needed to connect to one remote site.

    The meaning of ``secret`` is fully determined by ``method``: an
    application password, a bearer token, an API key, a nonce, or a
    ``sessionId:nonce`` pair.
    """

    target_url: str
    method: AuthMethod
    username: Optional[str] = None
    secret: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def create(
        cls,
        url: str,
        method: Union[AuthMethod, str],
        username: Optional[str] = None,
        secret: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> "ConnectionConfig":
        """
        Build a config from raw operator input.

        Raises:
            ValidationError: If the URL cannot be normalized
            UnsupportedMethodError: If the method name is unknown
        """
        return cls(
            target_url=normalize_site_url(url),
            method=parse_auth_method(method),
            username=username,
            secret=secret,
            timeout=timeout,
        )

    def __repr__(self) -> str:
        secret = "***MASKED***" if self.secret else None
        return (
            f"ConnectionConfig(target_url={self.target_url!r}, method={self.method.value!r}, "
            f"username={self.username!r}, secret={secret!r}, timeout={self.timeout!r})"
        )


def parse_auth_method(method: Union[AuthMethod, str]) -> AuthMethod:
    """Coerce a method name into an AuthMethod."""
    if isinstance(method, AuthMethod):
        return method
    try:
        return AuthMethod(str(method).strip().lower())
    except ValueError:
        raise UnsupportedMethodError(
            message=f"Unsupported authentication method: {method}",
            details={
                "method": str(method),
                "supported": [m.value for m in AuthMethod],
            },
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class InspectorSettings:
    """Process-wide settings shared by every connection attempt."""

    timeout: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    verify_tls: bool = True
    language: str = "en"  # 'de' or 'en'
    logging: LoggingConfig = field(default_factory=LoggingConfig)
