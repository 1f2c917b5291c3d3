"""
Data models for the WordPress inspector.

Every value here is built fresh for a single connection attempt and is
immutable once returned to the caller.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .enums import AuthMethod, DetectionMethod, ErrorKind, InventorySource


UNKNOWN_VERSION = "Unknown"


@dataclass(frozen=True)
class SiteProbeResult:
    """Whether a URL hosts WordPress and whether its REST API answers."""

    is_wordpress: bool
    rest_api_available: bool
    http_status: Optional[int] = None
    detection_method: Optional[DetectionMethod] = None
    failure: Optional[ErrorKind] = None
    message: str = ""


@dataclass(frozen=True)
class AuthHeaders:
    """Request headers produced by exactly one authentication variant."""

    method: AuthMethod
    values: Mapping[str, str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def as_dict(self) -> dict[str, str]:
        """Return a mutable copy for handing to the HTTP client."""
        return dict(self.values)

    def __getitem__(self, name: str) -> str:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def __repr__(self) -> str:
        return f"AuthHeaders(method={self.method.value!r}, names={sorted(self.values)!r})"


@dataclass(frozen=True)
class SiteInfo:
    """Fields parsed from the REST API root discovery document."""

    name: str = "Unknown"
    description: str = ""
    home_url: Optional[str] = None
    gmt_offset: float = 0.0
    timezone_string: Optional[str] = None
    raw: Any = None


@dataclass(frozen=True)
class UserIdentity:
    """The authenticated user as reported by users/me."""

    id: Optional[int]
    name: str
    slug: str = ""


@dataclass(frozen=True)
class ConnectionOutcome:
    """Result of a connection test, handed to the caller for persistence."""

    success: bool
    site_name: str = "Unknown"
    site_description: str = ""
    wp_version: str = UNKNOWN_VERSION
    canonical_site_url: str = ""
    gmt_offset: float = 0.0
    failure_reason: Optional[ErrorKind] = None
    message: str = ""
    http_status: Optional[int] = None
    user: Optional[UserIdentity] = None
    probe: Optional[SiteProbeResult] = None


@dataclass(frozen=True)
class PluginInfo:
    """A single installed plugin."""

    name: str
    version: str = ""
    description: str = ""
    author: str = ""
    active: bool = False
    update_available: bool = False
    latest_version: Optional[str] = None
    slug: str = ""
    file: str = ""
    network_active: bool = False


@dataclass(frozen=True)
class ThemeInfo:
    """A single installed theme."""

    name: str
    version: str = ""
    description: str = ""
    author: str = ""
    active: bool = False
    update_available: bool = False
    latest_version: Optional[str] = None
    slug: str = ""
    parent: Optional[str] = None


@dataclass(frozen=True)
class InventorySnapshot:
    """
    Plugin, theme and post inventory of a site.

    Counts are never None: missing data is expressed through
    ``source = UNAVAILABLE``.
    """

    plugin_count: int = 0
    theme_count: int = 0
    post_count: int = 0
    detailed_plugins: Optional[tuple[PluginInfo, ...]] = None
    detailed_themes: Optional[tuple[ThemeInfo, ...]] = None
    source: InventorySource = InventorySource.UNAVAILABLE
    wp_version: Optional[str] = None
    php_version: Optional[str] = None
    active_plugin_count: Optional[int] = None
    pages_count: Optional[int] = None
    detected_plugin_slugs: tuple[str, ...] = field(default_factory=tuple)
    failure_reason: Optional[ErrorKind] = None


@dataclass(frozen=True)
class InspectionReport:
    """Connection outcome plus, on success, the inventory snapshot."""

    outcome: ConnectionOutcome
    inventory: Optional[InventorySnapshot]
    duration_ms: float = 0.0
