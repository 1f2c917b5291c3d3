"""
Plugin, theme and post inventory of a remote WordPress site.

The companion extension's ``site-info`` endpoint is asked first; it returns
everything in one call. Without it, each resource falls back independently:

- posts:   HEAD on the posts collection, count from X-WP-Total
- plugins: plugins endpoint with context=edit, then context=view without
           credentials, then no context; then plugin paths in the home page
- themes:  themes endpoint only

The aggregator never raises. A resource that cannot be read counts 0, and
``source`` names the weakest method that still produced a usable answer.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .audit_logger import AuditLogger
from .config import ConnectionConfig
from .enums import ErrorKind, InventorySource, LogLevel
from .fallback_chain import FallbackChain
from .models import AuthHeaders, InventorySnapshot, PluginInfo, ThemeInfo
from .transport import Transport, parse_json


EXTENSION_PATH = "/wp-json/sparklewp/v1/site-info"
POSTS_PATH = "/wp-json/wp/v2/posts"
PLUGINS_PATH = "/wp-json/wp/v2/plugins"
THEMES_PATH = "/wp-json/wp/v2/themes"

TOTAL_HEADER = "X-WP-Total"

PERMISSION_DENIED_STATUSES = frozenset({401, 403})

# Directory names only; the markup is lower-cased before matching
PLUGIN_PATH_PATTERN = re.compile(r"wp-content/plugins/([a-z0-9._-]+)/")

# Strongest first; a snapshot reports the weakest source it relied on
SOURCE_STRENGTH = (
    InventorySource.PRIVILEGED_EXTENSION,
    InventorySource.STANDARD_REST_API,
    InventorySource.HTML_FINGERPRINT,
)


def weakest_source(sources: Iterable[InventorySource]) -> InventorySource:
    """Pick the weakest of the sources used, or UNAVAILABLE for none."""
    used = set(sources)
    for source in reversed(SOURCE_STRENGTH):
        if source in used:
            return source
    return InventorySource.UNAVAILABLE


def count_listing(data: Any) -> Optional[int]:
    """Count a REST listing: arrays by length, objects by key count."""
    if isinstance(data, list):
        return len(data)
    if isinstance(data, dict):
        return len(data)
    return None


def scan_plugin_slugs(markup: str) -> tuple[str, ...]:
    """
    Find plugin directory names referenced from page markup.

    Returns:
        Unique slugs in order of first appearance
    """
    slugs: list[str] = []
    for slug in PLUGIN_PATH_PATTERN.findall(markup.lower()):
        if slug == "index.php" or len(slug) <= 1:
            continue
        if slug not in slugs:
            slugs.append(slug)
    return tuple(slugs)


def _text(value: Any) -> str:
    # REST fields come either as plain strings or as {"raw": ..., "rendered": ...}
    if isinstance(value, dict):
        return str(value.get("raw") or value.get("rendered") or "")
    if value is None:
        return ""
    return str(value)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value)
    return text or None


def parse_extension_plugin(item: Any) -> Optional[PluginInfo]:
    if not isinstance(item, dict) or not item.get("name"):
        return None
    return PluginInfo(
        name=_text(item.get("name")),
        version=_text(item.get("version")),
        description=_text(item.get("description")),
        author=_text(item.get("author")),
        active=bool(item.get("active")),
        update_available=bool(item.get("update_available")),
        latest_version=_optional_text(item.get("latest_version")),
        slug=_text(item.get("slug")),
        file=_text(item.get("file")),
        network_active=bool(item.get("network_active")),
    )


def parse_extension_theme(item: Any) -> Optional[ThemeInfo]:
    if not isinstance(item, dict) or not item.get("name"):
        return None
    return ThemeInfo(
        name=_text(item.get("name")),
        version=_text(item.get("version")),
        description=_text(item.get("description")),
        author=_text(item.get("author")),
        active=bool(item.get("active")),
        update_available=bool(item.get("update_available")),
        latest_version=_optional_text(item.get("latest_version")),
        slug=_text(item.get("slug")),
        parent=_optional_text(item.get("parent")),
    )


def parse_rest_plugin(item: Any) -> Optional[PluginInfo]:
    """Parse one entry of the core plugins endpoint (``plugin`` is "dir/file")."""
    if not isinstance(item, dict):
        return None
    plugin_file = _text(item.get("plugin"))
    name = _text(item.get("name")) or plugin_file
    if not name:
        return None
    status = _text(item.get("status"))
    return PluginInfo(
        name=name,
        version=_text(item.get("version")),
        description=_text(item.get("description")),
        author=_text(item.get("author")),
        active=status in ("active", "network-active"),
        slug=plugin_file.split("/", 1)[0] if plugin_file else "",
        file=plugin_file,
        network_active=status == "network-active",
    )


def parse_rest_theme(item: Any) -> Optional[ThemeInfo]:
    """Parse one entry of the core themes endpoint."""
    if not isinstance(item, dict):
        return None
    stylesheet = _text(item.get("stylesheet"))
    name = _text(item.get("name")) or stylesheet
    if not name:
        return None
    template = _text(item.get("template"))
    return ThemeInfo(
        name=name,
        version=_text(item.get("version")),
        description=_text(item.get("description")),
        author=_text(item.get("author")),
        active=_text(item.get("status")) == "active",
        slug=stylesheet,
        parent=template if template and template != stylesheet else None,
    )


def _parse_items(data: Any, parser) -> Optional[tuple]:
    if not isinstance(data, list):
        return None
    return tuple(info for info in (parser(item) for item in data) if info is not None)


@dataclass
class _Listing:
    """A usable answer from a listing endpoint."""

    count: int
    details: Optional[tuple] = None


@dataclass
class _ResourceResult:
    count: int = 0
    details: Optional[tuple] = None
    sources: list[InventorySource] = field(default_factory=list)
    slugs: tuple[str, ...] = ()


class InventoryAggregator:
    """
    Collects a best-effort inventory of a site.

    ``collect`` always returns a snapshot; failures only lower the counts
    and weaken the reported source.
    """

    def __init__(
        self,
        transport: Transport,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Args:
            transport: Shared HTTP transport
            logger: Optional audit logger
        """
        self._transport = transport
        self._logger = logger

    async def collect(
        self,
        config: ConnectionConfig,
        auth_headers: AuthHeaders,
    ) -> InventorySnapshot:
        """
        Collect plugin, theme and post inventory.

        Args:
            config: Connection configuration of the site
            auth_headers: Headers built for the config

        Returns:
            InventorySnapshot, zeroed with source UNAVAILABLE on total failure
        """
        site_url = config.target_url
        headers = auth_headers.as_dict()

        chain: FallbackChain = FallbackChain("InventoryAggregator", self._logger)
        extension = await chain.run([
            ("privileged_extension", lambda: self._from_extension(site_url, headers)),
        ])
        if extension.found:
            return extension.value

        self._log(LogLevel.INFO, "Using standard REST API inventory", {"url": site_url})

        posts = await self._collect_posts(site_url, headers)
        plugins = await self._collect_plugins(site_url, headers)
        themes = await self._collect_themes(site_url, headers)

        snapshot = InventorySnapshot(
            plugin_count=plugins.count,
            theme_count=themes.count,
            post_count=posts.count,
            detailed_plugins=plugins.details or None,
            detailed_themes=themes.details or None,
            source=weakest_source(posts.sources + plugins.sources + themes.sources),
            detected_plugin_slugs=plugins.slugs,
        )

        self._log(
            LogLevel.INFO,
            "Inventory collected",
            {
                "url": site_url,
                "plugins": snapshot.plugin_count,
                "themes": snapshot.theme_count,
                "posts": snapshot.post_count,
                "source": snapshot.source.value,
            },
        )
        return snapshot

    async def _from_extension(
        self, site_url: str, headers: dict[str, str]
    ) -> Optional[InventorySnapshot]:
        response = await self._transport.get(f"{site_url}{EXTENSION_PATH}", headers=headers)

        if response.status_code in PERMISSION_DENIED_STATUSES:
            # The route exists but the user is not an administrator
            self._log(
                LogLevel.WARN,
                "Connector extension refused access; not falling back to weaker sources",
                {"url": site_url, "status": response.status_code},
            )
            return InventorySnapshot(failure_reason=ErrorKind.INSUFFICIENT_PERMISSIONS)

        if response.status_code != 200:
            return None

        data = parse_json(response)
        if not isinstance(data, dict) or not data.get("success"):
            return None

        self._log(LogLevel.INFO, "Connector extension answered", {"url": site_url})

        return InventorySnapshot(
            plugin_count=_int(data.get("plugin_count")),
            theme_count=_int(data.get("theme_count")),
            post_count=_int(data.get("posts_count")),
            detailed_plugins=_parse_items(data.get("plugins"), parse_extension_plugin) or (),
            detailed_themes=_parse_items(data.get("themes"), parse_extension_theme) or (),
            source=InventorySource.PRIVILEGED_EXTENSION,
            wp_version=_optional_text(data.get("wp_version")),
            php_version=_optional_text(data.get("php_version")),
            active_plugin_count=_optional_int(data.get("active_plugin_count")),
            pages_count=_optional_int(data.get("pages_count")),
        )

    async def _collect_posts(self, site_url: str, headers: dict[str, str]) -> _ResourceResult:
        async def head_posts() -> Optional[int]:
            response = await self._transport.head(f"{site_url}{POSTS_PATH}", headers=headers)
            if response.status_code != 200:
                return None
            return _optional_int(response.headers.get(TOTAL_HEADER))

        chain: FallbackChain = FallbackChain("InventoryAggregator", self._logger)
        result = await chain.run([("posts_total_header", head_posts)])
        if not result.found:
            return _ResourceResult()
        return _ResourceResult(count=result.value, sources=[InventorySource.STANDARD_REST_API])

    async def _collect_plugins(self, site_url: str, headers: dict[str, str]) -> _ResourceResult:
        url = f"{site_url}{PLUGINS_PATH}"
        anonymous = self._transport.base_headers()

        chain: FallbackChain = FallbackChain("InventoryAggregator", self._logger)
        listing = await chain.run([
            ("plugins_edit_context", lambda: self._fetch_listing(url, headers, {"context": "edit"}, parse_rest_plugin)),
            ("plugins_view_context", lambda: self._fetch_listing(url, anonymous, {"context": "view"}, parse_rest_plugin)),
            ("plugins_no_context", lambda: self._fetch_listing(url, headers, None, parse_rest_plugin)),
        ])

        result = _ResourceResult()
        if listing.found:
            result.count = listing.value.count
            result.details = listing.value.details
            result.sources.append(InventorySource.STANDARD_REST_API)

        if result.count > 0:
            return result

        async def scan_home_page() -> Optional[tuple[str, ...]]:
            response = await self._transport.get(
                site_url,
                headers={"User-Agent": self._transport.user_agent},
            )
            if response.status_code >= 400:
                return None
            return scan_plugin_slugs(response.text)

        scan = await chain.run([("plugins_html_scan", scan_home_page)])
        if scan.found:
            result.slugs = scan.value
            result.count = len(scan.value)
            result.sources.append(InventorySource.HTML_FINGERPRINT)
            self._log(
                LogLevel.INFO,
                f"Found {result.count} plugins from page markup",
                {"url": site_url, "slugs": list(scan.value)},
            )

        return result

    async def _collect_themes(self, site_url: str, headers: dict[str, str]) -> _ResourceResult:
        url = f"{site_url}{THEMES_PATH}"

        chain: FallbackChain = FallbackChain("InventoryAggregator", self._logger)
        listing = await chain.run([
            ("themes", lambda: self._fetch_listing(url, headers, None, parse_rest_theme)),
        ])

        if not listing.found:
            return _ResourceResult()
        return _ResourceResult(
            count=listing.value.count,
            details=listing.value.details,
            sources=[InventorySource.STANDARD_REST_API],
        )

    async def _fetch_listing(
        self,
        url: str,
        headers: dict[str, str],
        params: Optional[dict[str, str]],
        parser,
    ) -> Optional[_Listing]:
        response = await self._transport.get(url, headers=headers, params=params)

        if response.status_code in PERMISSION_DENIED_STATUSES:
            self._log(
                LogLevel.WARN,
                "Capability gap: listing requires permissions the user lacks",
                {"url": url, "status": response.status_code, "params": params},
            )
            return None

        if response.status_code != 200:
            return None

        data = parse_json(response)
        count = count_listing(data)
        if count is None:
            return None

        return _Listing(count=count, details=_parse_items(data, parser))

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "InventoryAggregator", message, data)
