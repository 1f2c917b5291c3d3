"""
Site probe: is this URL a WordPress site, and does its REST API answer?

The probe never raises for network trouble. A DNS failure, refused
connection or timeout is reported through ``SiteProbeResult.failure`` so the
caller can tell "retry later" apart from "this is not WordPress".
"""

from typing import Optional

from .audit_logger import AuditLogger
from .enums import DetectionMethod, LogLevel
from .exceptions import TransportError
from .i18n import get_message
from .models import SiteProbeResult
from .transport import Transport


REST_DISCOVERY_PATH = "/wp-json/wp/v2/"

# Lower-case markup fragments that only a WordPress front end emits
WORDPRESS_MARKERS = (
    "wp-content/",
    "wp-includes/",
    "/wp-json",
    "api.w.org",
)


def has_wordpress_markers(markup: str) -> bool:
    """Check raw page markup for WordPress path fragments."""
    content = markup.lower()
    return any(marker in content for marker in WORDPRESS_MARKERS)


class SiteProbe:
    """Detects WordPress through the REST API, falling back to page markup."""

    def __init__(
        self,
        transport: Transport,
        language: Optional[str] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._transport = transport
        self._language = language
        self._logger = logger

    async def probe(self, site_url: str) -> SiteProbeResult:
        """
        Probe a normalized site URL.

        Args:
            site_url: Canonical site URL without trailing slash

        Returns:
            SiteProbeResult describing what was found
        """
        try:
            response = await self._transport.get(f"{site_url}{REST_DISCOVERY_PATH}")
        except TransportError as e:
            self._log(
                LogLevel.WARN,
                "REST discovery request failed",
                {"url": site_url, "kind": e.kind.value},
            )
            return SiteProbeResult(
                is_wordpress=False,
                rest_api_available=False,
                failure=e.kind,
                message=get_message(f"error.{e.kind.value}", self._language),
            )

        status = response.status_code
        if status != 404 and status < 500:
            self._log(
                LogLevel.INFO,
                "WordPress REST API responded",
                {"url": site_url, "status": status},
            )
            return SiteProbeResult(
                is_wordpress=True,
                rest_api_available=status == 200,
                http_status=status,
                detection_method=DetectionMethod.REST_API,
                message=get_message("probe.rest_api", self._language, status=status),
            )

        self._log(
            LogLevel.INFO,
            "REST discovery inconclusive, checking home page markup",
            {"url": site_url, "status": status},
        )
        return await self._probe_home_page(site_url, status)

    async def _probe_home_page(self, site_url: str, api_status: int) -> SiteProbeResult:
        try:
            response = await self._transport.get(
                site_url,
                headers={"User-Agent": self._transport.user_agent},
            )
        except TransportError as e:
            return SiteProbeResult(
                is_wordpress=False,
                rest_api_available=False,
                http_status=api_status,
                failure=e.kind,
                message=get_message(f"error.{e.kind.value}", self._language),
            )

        if response.status_code < 400 and has_wordpress_markers(response.text):
            return SiteProbeResult(
                is_wordpress=True,
                rest_api_available=False,
                http_status=api_status,
                detection_method=DetectionMethod.HTML_FINGERPRINT,
                message=get_message("probe.html_fingerprint", self._language),
            )

        self._log(
            LogLevel.INFO,
            "No WordPress markers found",
            {"url": site_url, "home_status": response.status_code},
        )
        return SiteProbeResult(
            is_wordpress=False,
            rest_api_available=False,
            http_status=api_status,
            message=get_message("error.not_wordpress", self._language),
        )

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "SiteProbe", message, data)
