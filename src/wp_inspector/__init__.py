"""
WP Inspector - Connection testing and introspection of remote WordPress sites.

This package detects WordPress installations, verifies credentials across
several authentication schemes, detects the core version and collects a
best-effort inventory of plugins, themes and posts.
"""

__version__ = "0.1.0"
__author__ = "SparkleWP Team"

from wp_inspector.exceptions import (
    WPInspectorError,
    ValidationError,
    ConfigError,
    TransportError,
    InvalidCredentialsError,
    UnsupportedMethodError,
)
from wp_inspector.enums import (
    AuthMethod,
    ErrorKind,
    DetectionMethod,
    InventorySource,
    LogLevel,
    UrlValidationErrorCode,
)
from wp_inspector.config import (
    ConnectionConfig,
    InspectorSettings,
    LoggingConfig,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from wp_inspector.models import (
    UNKNOWN_VERSION,
    SiteProbeResult,
    AuthHeaders,
    SiteInfo,
    UserIdentity,
    ConnectionOutcome,
    PluginInfo,
    ThemeInfo,
    InventorySnapshot,
    InspectionReport,
)
from wp_inspector.url_normalizer import (
    SiteUrlNormalizer,
    normalize_site_url,
)
from wp_inspector.audit_logger import (
    AuditLogger,
    LogEntry,
)
from wp_inspector.i18n import (
    get_message,
    get_all_message_keys,
    get_missing_translations,
    validate_translations,
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from wp_inspector.transport import Transport
from wp_inspector.auth import (
    HEADER_BUILDERS,
    build_auth_headers,
)
from wp_inspector.fallback_chain import (
    FallbackChain,
    FallbackResult,
    StepFailure,
)
from wp_inspector.site_probe import SiteProbe
from wp_inspector.version_detector import VersionDetector
from wp_inspector.connection_tester import ConnectionTester
from wp_inspector.inventory import InventoryAggregator
from wp_inspector.inspector import (
    SiteInspector,
    inspect_site,
)
from wp_inspector.cli import (
    main as cli_main,
    create_parser,
    create_default_settings,
    load_settings_from_file,
    save_settings_to_file,
)

__all__ = [
    # Exceptions
    "WPInspectorError",
    "ValidationError",
    "ConfigError",
    "TransportError",
    "InvalidCredentialsError",
    "UnsupportedMethodError",
    # Enums
    "AuthMethod",
    "ErrorKind",
    "DetectionMethod",
    "InventorySource",
    "LogLevel",
    "UrlValidationErrorCode",
    # Configuration
    "ConnectionConfig",
    "InspectorSettings",
    "LoggingConfig",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_USER_AGENT",
    # Models
    "UNKNOWN_VERSION",
    "SiteProbeResult",
    "AuthHeaders",
    "SiteInfo",
    "UserIdentity",
    "ConnectionOutcome",
    "PluginInfo",
    "ThemeInfo",
    "InventorySnapshot",
    "InspectionReport",
    # URL Normalizer
    "SiteUrlNormalizer",
    "normalize_site_url",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # I18n
    "get_message",
    "get_all_message_keys",
    "get_missing_translations",
    "validate_translations",
    "TRANSLATIONS",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # Transport
    "Transport",
    # Auth
    "HEADER_BUILDERS",
    "build_auth_headers",
    # Fallback Chain
    "FallbackChain",
    "FallbackResult",
    "StepFailure",
    # Components
    "SiteProbe",
    "VersionDetector",
    "ConnectionTester",
    "InventoryAggregator",
    # Inspector
    "SiteInspector",
    "inspect_site",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_settings",
    "load_settings_from_file",
    "save_settings_to_file",
]
