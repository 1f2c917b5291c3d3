"""
Enumeration types for the WordPress inspector.

These enums provide type-safe constants for authentication methods, error
kinds, detection methods and configuration options throughout the system.
"""

from enum import Enum


class AuthMethod(Enum):
    """Supported credential schemes for a remote WordPress site."""

    APPLICATION_PASSWORD = "application_password"
    JWT_TOKEN = "jwt_token"
    OAUTH = "oauth"
    API_KEY = "api_key"
    COOKIE_AUTH = "cookie_auth"
    CUSTOM_TOKEN = "custom_token"
    SESSION_AUTH = "session_auth"


class ErrorKind(Enum):
    """Failure classification reported to the caller."""

    NOT_WORDPRESS = "not_wordpress"
    SITE_UNREACHABLE = "site_unreachable"
    TIMEOUT = "timeout"
    AUTHENTICATION_FAILED = "authentication_failed"
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"
    API_UNAVAILABLE = "api_unavailable"
    REMOTE_SERVER_ERROR = "remote_server_error"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNSUPPORTED_METHOD = "unsupported_method"


class DetectionMethod(Enum):
    """How a site was recognised as WordPress."""

    REST_API = "rest_api"
    HTML_FINGERPRINT = "html_fingerprint"


class InventorySource(Enum):
    """Where an inventory snapshot came from, strongest first."""

    PRIVILEGED_EXTENSION = "privileged_extension"
    STANDARD_REST_API = "standard_rest_api"
    HTML_FINGERPRINT = "html_fingerprint"
    UNAVAILABLE = "unavailable"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class UrlValidationErrorCode(Enum):
    """Error codes for site URL normalization failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    UNSUPPORTED_SCHEME = "unsupported_scheme"
    MISSING_HOST = "missing_host"
    IDNA_ERROR = "idna_error"
