"""
Authentication header builders.

Each AuthMethod maps to exactly one builder. The table is closed: a method
without a builder fails at import time, so adding a method to the enum
without teaching this module how to encode it cannot ship.

| method               | required               | header                                     |
|----------------------|------------------------|--------------------------------------------|
| application_password | username, secret       | Authorization: Basic base64(user:secret)   |
| jwt_token, oauth     | secret                 | Authorization: Bearer secret               |
| api_key              | secret                 | X-API-Key: secret                          |
| cookie_auth          | secret                 | X-WP-Nonce: secret                         |
| custom_token         | secret                 | X-WP-SparkleWP-Token: secret               |
| session_auth         | secret (sessionId:nonce) | Cookie + X-WP-Nonce                      |
"""

import base64
import re
from typing import Callable

from .config import DEFAULT_USER_AGENT, ConnectionConfig
from .enums import AuthMethod
from .exceptions import InvalidCredentialsError, UnsupportedMethodError
from .models import AuthHeaders


WHITESPACE_PATTERN = re.compile(r"\s+")

CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")

HeaderBuilder = Callable[[ConnectionConfig], dict[str, str]]


def _is_header_safe(value: str) -> bool:
    try:
        value.encode("ascii")
    except UnicodeEncodeError:
        return False
    return not CONTROL_CHAR_PATTERN.search(value)


def _require(config: ConnectionConfig, *fields: str) -> None:
    # Whitespace-only values count as missing
    missing = [name for name in fields if not (getattr(config, name) or "").strip()]
    if missing:
        raise InvalidCredentialsError(
            message=f"Missing {', '.join(missing)} for {config.method.value}",
            details={"method": config.method.value, "missing": missing},
        )


def _application_password(config: ConnectionConfig) -> dict[str, str]:
    _require(config, "username", "secret")
    # WordPress displays application passwords in space-separated groups
    password = WHITESPACE_PATTERN.sub("", config.secret)
    token = base64.b64encode(f"{config.username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


def _bearer(config: ConnectionConfig) -> dict[str, str]:
    _require(config, "secret")
    return {"Authorization": f"Bearer {config.secret}"}


def _api_key(config: ConnectionConfig) -> dict[str, str]:
    _require(config, "secret")
    return {"X-API-Key": config.secret}


def _cookie_nonce(config: ConnectionConfig) -> dict[str, str]:
    _require(config, "secret")
    return {"X-WP-Nonce": config.secret}


def _custom_token(config: ConnectionConfig) -> dict[str, str]:
    _require(config, "secret")
    return {"X-WP-SparkleWP-Token": config.secret}


def _session(config: ConnectionConfig) -> dict[str, str]:
    _require(config, "secret")
    session_id, separator, nonce = config.secret.partition(":")
    if not separator or not session_id or not nonce:
        raise InvalidCredentialsError(
            message="Session secret must have the form sessionId:nonce",
            details={"method": config.method.value, "missing": ["secret"]},
        )
    return {
        "Cookie": f"wordpress_logged_in_{session_id}={config.secret}",
        "X-WP-Nonce": nonce,
    }


HEADER_BUILDERS: dict[AuthMethod, HeaderBuilder] = {
    AuthMethod.APPLICATION_PASSWORD: _application_password,
    AuthMethod.JWT_TOKEN: _bearer,
    AuthMethod.OAUTH: _bearer,
    AuthMethod.API_KEY: _api_key,
    AuthMethod.COOKIE_AUTH: _cookie_nonce,
    AuthMethod.CUSTOM_TOKEN: _custom_token,
    AuthMethod.SESSION_AUTH: _session,
}

_unhandled = set(AuthMethod) - set(HEADER_BUILDERS)
if _unhandled:
    raise RuntimeError(
        f"No header builder for: {sorted(m.value for m in _unhandled)}"
    )


def build_auth_headers(
    config: ConnectionConfig,
    user_agent: str = DEFAULT_USER_AGENT,
) -> AuthHeaders:
    """
    Build the request headers for a connection config.

    Args:
        config: Connection configuration
        user_agent: User-Agent added to every variant

    Returns:
        AuthHeaders for the config's method

    Raises:
        InvalidCredentialsError: If a required field is missing or a header
            value cannot be sent (non-ASCII or control characters)
        UnsupportedMethodError: If the method has no builder
    """
    builder = HEADER_BUILDERS.get(config.method)
    if builder is None:
        raise UnsupportedMethodError(
            message=f"Unsupported authentication method: {config.method}",
            details={"method": str(config.method)},
        )

    headers = builder(config)
    headers["User-Agent"] = user_agent
    headers["Accept"] = "application/json"

    invalid = [name for name, value in headers.items() if not _is_header_safe(value)]
    if invalid:
        raise InvalidCredentialsError(
            message=f"Header values for {config.method.value} must be printable ASCII",
            details={"method": config.method.value, "invalid": invalid},
        )

    return AuthHeaders(method=config.method, values=headers)
