"""
Site inspector: the entry point that ties the components together.

One inspection opens one Transport, tests the connection and, when the
connection succeeded, collects the inventory with the same credentials.
Inspections share nothing and may run concurrently.
"""

import time
from typing import Optional

import httpx

from .audit_logger import AuditLogger
from .auth import build_auth_headers
from .config import ConnectionConfig, InspectorSettings
from .connection_tester import ConnectionTester
from .enums import LogLevel
from .inventory import InventoryAggregator
from .models import InspectionReport, SiteProbeResult
from .site_probe import SiteProbe
from .transport import Transport
from .url_normalizer import normalize_site_url


class SiteInspector:
    """
    Runs connection tests and inventory collection against WordPress sites.

    Usage:
        inspector = SiteInspector(InspectorSettings(language="de"))
        report = await inspector.inspect(ConnectionConfig.create(url, "api_key", secret=key))
    """

    def __init__(
        self,
        settings: Optional[InspectorSettings] = None,
        logger: Optional[AuditLogger] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the inspector.

        Args:
            settings: Process-wide settings (defaults apply when omitted)
            logger: Optional audit logger shared by all components
            http_transport: Optional httpx transport, mainly for tests
        """
        self._settings = settings or InspectorSettings()
        self._logger = logger
        self._http_transport = http_transport

    @property
    def settings(self) -> InspectorSettings:
        return self._settings

    def _open_transport(self, timeout: float) -> Transport:
        return Transport(
            timeout=timeout,
            user_agent=self._settings.user_agent,
            verify_tls=self._settings.verify_tls,
            http_transport=self._http_transport,
            logger=self._logger,
        )

    async def probe(self, url: str) -> SiteProbeResult:
        """
        Check whether a URL hosts WordPress, without credentials.

        Raises:
            ValidationError: If the URL cannot be normalized
        """
        site_url = normalize_site_url(url)
        async with self._open_transport(self._settings.timeout) as transport:
            probe = SiteProbe(transport, language=self._settings.language, logger=self._logger)
            return await probe.probe(site_url)

    async def inspect(self, config: ConnectionConfig) -> InspectionReport:
        """
        Test a connection and, on success, collect the site inventory.

        Args:
            config: Connection configuration

        Returns:
            InspectionReport; ``inventory`` is None when the connection failed
        """
        start_time = time.monotonic()

        self._log(
            LogLevel.INFO,
            "Starting inspection",
            {"url": config.target_url, "method": config.method.value},
        )

        async with self._open_transport(config.timeout) as transport:
            tester = ConnectionTester(
                transport,
                user_agent=self._settings.user_agent,
                language=self._settings.language,
                logger=self._logger,
            )
            outcome = await tester.test_connection(config)

            inventory = None
            if outcome.success:
                headers = build_auth_headers(config, user_agent=self._settings.user_agent)
                aggregator = InventoryAggregator(transport, logger=self._logger)
                inventory = await aggregator.collect(config, headers)

        duration_ms = (time.monotonic() - start_time) * 1000

        self._log(
            LogLevel.INFO,
            "Inspection finished",
            {
                "url": config.target_url,
                "success": outcome.success,
                "failure_reason": outcome.failure_reason.value if outcome.failure_reason else None,
                "duration_ms": round(duration_ms, 1),
            },
        )

        return InspectionReport(outcome=outcome, inventory=inventory, duration_ms=duration_ms)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "SiteInspector", message, data)


async def inspect_site(
    config: ConnectionConfig,
    settings: Optional[InspectorSettings] = None,
    logger: Optional[AuditLogger] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> InspectionReport:
    """Inspect one site with a throwaway SiteInspector."""
    inspector = SiteInspector(settings=settings, logger=logger, http_transport=http_transport)
    return await inspector.inspect(config)
