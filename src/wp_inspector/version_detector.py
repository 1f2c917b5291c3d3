"""
WordPress core version detection.

Detection is a cascade; each step runs only when the previous one found
nothing:

1. Version fields in the already-fetched root discovery document
2. A second discovery request, trusted only when it looks like a real
   WordPress document (carries gmt_offset or timezone_string)
3. Asset and generator patterns in the home page markup
4. The most frequent ``?ver=`` value in the markup

Step 4 is a heuristic: a plugin whose assets are pinned to the same number
as core can win it. The detector never raises; total failure yields
``UNKNOWN_VERSION``.
"""

import re
from typing import Any, Optional

from .audit_logger import AuditLogger
from .enums import LogLevel
from .fallback_chain import FallbackChain
from .models import UNKNOWN_VERSION
from .transport import Transport, parse_json


VERSION_NUMBER = r"([0-9]+\.[0-9]+(?:\.[0-9]+)?)"

# Ordered by precedence; the first pattern that matches wins
VERSION_PATTERNS: tuple[tuple[str, re.Pattern], ...] = (
    ("emoji_release", re.compile(r"wp-emoji-release\.min\.js\?ver=" + VERSION_NUMBER)),
    ("core_js", re.compile(r"wp-(?:includes|admin|content)/js/[^/]+\.js\?ver=" + VERSION_NUMBER)),
    ("core_css", re.compile(r"wp-(?:includes|admin|content)/css/[^/]+\.css\?ver=" + VERSION_NUMBER)),
    ("generic_asset", re.compile(r"['\"/]wp-[^'\"/]*\.(?:js|css)\?ver=" + VERSION_NUMBER)),
    ("wp_includes_asset", re.compile(r"wp-includes/[^'\"]*\?ver=" + VERSION_NUMBER)),
    (
        "meta_generator",
        re.compile(r"<meta name=\"generator\" content=\"WordPress " + VERSION_NUMBER, re.IGNORECASE),
    ),
    ("text_mention", re.compile(r"WordPress " + VERSION_NUMBER)),
)

ASSET_VERSION_PATTERN = re.compile(r"\?ver=" + VERSION_NUMBER)

DISCOVERY_VERSION_FIELDS = ("wp_version", "version")


def match_version_patterns(markup: str) -> Optional[tuple[str, str]]:
    """
    Apply the ordered version patterns to page markup.

    Returns:
        (pattern name, version) of the first match, or None
    """
    for name, pattern in VERSION_PATTERNS:
        match = pattern.search(markup)
        if match:
            return name, match.group(1)
    return None


def most_common_asset_version(markup: str) -> Optional[str]:
    """
    Return the ``?ver=`` value seen most often; ties go to the first seen.
    """
    counts: dict[str, int] = {}
    for match in ASSET_VERSION_PATTERN.finditer(markup):
        version = match.group(1)
        counts[version] = counts.get(version, 0) + 1

    if not counts:
        return None

    highest = max(counts.values())
    return next(version for version, count in counts.items() if count == highest)


def version_from_discovery(discovery: Any) -> Optional[str]:
    """Read a version from structured discovery fields."""
    if not isinstance(discovery, dict):
        return None

    for key in DISCOVERY_VERSION_FIELDS:
        value = discovery.get(key)
        if value:
            return str(value)

    api_version = discovery.get("api_version")
    if api_version:
        return f"API v{api_version}"

    return None


class _PageMarkup:
    """Home page markup, fetched at most once per detection run."""

    def __init__(self, transport: Transport, site_url: str, discovery: Any) -> None:
        self._transport = transport
        self._site_url = site_url
        self._markup: Optional[str] = None
        if isinstance(discovery, str) and discovery.strip():
            # The discovery request already returned markup instead of JSON
            self._markup = discovery
        self._loaded = self._markup is not None

    async def get(self) -> str:
        if not self._loaded:
            self._loaded = True
            self._markup = ""
            response = await self._transport.get(
                self._site_url,
                headers={"User-Agent": self._transport.user_agent},
            )
            if response.status_code < 400:
                self._markup = response.text
        return self._markup or ""


class VersionDetector:
    """Finds the WordPress core version of a site by any means available."""

    def __init__(
        self,
        transport: Transport,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._transport = transport
        self._logger = logger

    async def detect(self, site_url: str, discovery: Any) -> str:
        """
        Detect the core version.

        Args:
            site_url: Canonical site URL
            discovery: Root discovery document as fetched: a dict when it was
                JSON, the raw text otherwise, or None

        Returns:
            The version string, or UNKNOWN_VERSION
        """
        page = _PageMarkup(self._transport, site_url, discovery)

        async def from_discovery() -> Optional[str]:
            return version_from_discovery(discovery)

        async def from_secondary_discovery() -> Optional[str]:
            return await self._from_secondary_discovery(site_url)

        async def from_markup_patterns() -> Optional[str]:
            match = match_version_patterns(await page.get())
            if match is None:
                return None
            self._log(LogLevel.DEBUG, f"Version matched by pattern '{match[0]}'", {"pattern": match[0]})
            return match[1]

        async def from_asset_frequency() -> Optional[str]:
            return most_common_asset_version(await page.get())

        chain: FallbackChain = FallbackChain("VersionDetector", self._logger)
        result = await chain.run([
            ("discovery_fields", from_discovery),
            ("secondary_discovery", from_secondary_discovery),
            ("html_fingerprint", from_markup_patterns),
            ("asset_frequency", from_asset_frequency),
        ])

        if not result.found:
            self._log(LogLevel.INFO, "WordPress version could not be detected", {"url": site_url})
            return UNKNOWN_VERSION

        self._log(
            LogLevel.INFO,
            f"Detected WordPress version {result.value}",
            {"url": site_url, "step": result.step},
        )
        return result.value

    async def _from_secondary_discovery(self, site_url: str) -> Optional[str]:
        response = await self._transport.get(f"{site_url}/wp-json")
        if response.status_code != 200:
            return None

        data = parse_json(response)
        if not isinstance(data, dict):
            return None

        # A document without timezone fields is not the standard WordPress shape
        if "gmt_offset" not in data and "timezone_string" not in data:
            return None

        value = data.get("wp_version")
        return str(value) if value else None

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "VersionDetector", message, data)
