"""
Connection tester for remote WordPress sites.

Runs the probe, builds the authentication headers, asks WordPress who the
credentials belong to, classifies the answer and, on success, collects site
metadata and the core version.

| users/me status | outcome                                          |
|-----------------|--------------------------------------------------|
| 200             | success                                          |
| 401             | AUTHENTICATION_FAILED (after one diagnostic call)|
| 403             | INSUFFICIENT_PERMISSIONS                         |
| 404             | API_UNAVAILABLE                                  |
| >= 500          | REMOTE_SERVER_ERROR                              |
| anything else   | API_UNAVAILABLE                                  |

Nothing is retried here; retry policy belongs to the caller.
"""

from typing import Any, Optional

from .audit_logger import AuditLogger
from .auth import build_auth_headers
from .config import ConnectionConfig, DEFAULT_USER_AGENT
from .enums import ErrorKind, LogLevel
from .exceptions import InvalidCredentialsError, TransportError, UnsupportedMethodError
from .i18n import get_message
from .models import (
    ConnectionOutcome,
    SiteInfo,
    SiteProbeResult,
    UserIdentity,
)
from .site_probe import REST_DISCOVERY_PATH, SiteProbe
from .transport import Transport, parse_json
from .version_detector import VersionDetector


IDENTITY_PATH = "/wp-json/wp/v2/users/me"
ROOT_DISCOVERY_PATH = "/wp-json/"

# WordPress error codes that mean the login itself was rejected
INVALID_LOGIN_CODES = frozenset({"incorrect_password", "invalid_username"})


def parse_site_info(discovery: Any, fallback_url: str) -> SiteInfo:
    """Extract site metadata from a root discovery document."""
    if not isinstance(discovery, dict):
        return SiteInfo(home_url=fallback_url, raw=discovery)

    try:
        gmt_offset = float(discovery.get("gmt_offset") or 0)
    except (TypeError, ValueError):
        gmt_offset = 0.0

    return SiteInfo(
        name=discovery.get("name") or "Unknown",
        description=discovery.get("description") or "",
        home_url=discovery.get("home") or discovery.get("url") or fallback_url,
        gmt_offset=gmt_offset,
        timezone_string=discovery.get("timezone_string") or None,
        raw=discovery,
    )


def parse_user_identity(data: Any) -> Optional[UserIdentity]:
    if not isinstance(data, dict):
        return None
    user_id = data.get("id")
    return UserIdentity(
        id=user_id if isinstance(user_id, int) else None,
        name=str(data.get("name") or ""),
        slug=str(data.get("slug") or ""),
    )


class ConnectionTester:
    """
    Tests credentials against a WordPress site.

    The returned ConnectionOutcome always carries a localized message; on
    failure ``failure_reason`` names the ErrorKind.
    """

    def __init__(
        self,
        transport: Transport,
        user_agent: str = DEFAULT_USER_AGENT,
        language: Optional[str] = None,
        logger: Optional[AuditLogger] = None,
        probe: Optional[SiteProbe] = None,
        version_detector: Optional[VersionDetector] = None,
    ) -> None:
        """
        Initialize the connection tester.

        Args:
            transport: Shared HTTP transport
            user_agent: User-Agent for authenticated requests
            language: Message language ('de' or 'en')
            logger: Optional audit logger
            probe: Optional SiteProbe override
            version_detector: Optional VersionDetector override
        """
        self._transport = transport
        self._user_agent = user_agent
        self._language = language
        self._logger = logger
        self._probe = probe or SiteProbe(transport, language=language, logger=logger)
        self._version_detector = version_detector or VersionDetector(transport, logger=logger)

    async def test_connection(self, config: ConnectionConfig) -> ConnectionOutcome:
        """
        Test a connection configuration end to end.

        Args:
            config: Connection configuration with normalized target URL

        Returns:
            ConnectionOutcome describing success or the classified failure
        """
        site_url = config.target_url

        # Step 1: is there a WordPress site at all
        probe = await self._probe.probe(site_url)
        if probe.failure is not None:
            return self._failed(config, probe.failure, probe=probe)
        if not probe.is_wordpress:
            return self._failed(config, ErrorKind.NOT_WORDPRESS, probe=probe)

        # Step 2: headers for the chosen method
        try:
            headers = build_auth_headers(config, user_agent=self._user_agent)
        except InvalidCredentialsError as e:
            if "invalid" in e.details:
                message = get_message(
                    "error.invalid_credentials_encoding",
                    self._language,
                    method=config.method.value,
                    invalid=", ".join(e.details["invalid"]),
                )
            else:
                message = get_message(
                    "error.invalid_credentials",
                    self._language,
                    method=config.method.value,
                    missing=", ".join(e.details.get("missing", [])),
                )
            return self._failed(
                config,
                ErrorKind.INVALID_CREDENTIALS,
                probe=probe,
                message=message,
            )
        except UnsupportedMethodError:
            return self._failed(
                config,
                ErrorKind.UNSUPPORTED_METHOD,
                probe=probe,
                message=get_message(
                    "error.unsupported_method", self._language, method=str(config.method)
                ),
            )

        self._log(
            LogLevel.INFO,
            f"Testing {config.method.value} authentication",
            {"url": site_url, "username": config.username},
        )

        # Step 3: who am I
        try:
            response = await self._transport.get(
                f"{site_url}{IDENTITY_PATH}", headers=headers.as_dict()
            )
        except TransportError as e:
            return self._failed(config, e.kind, probe=probe)

        # Step 4: classify
        status = response.status_code
        if status != 200:
            return await self._classify_failure(config, probe, response.status_code, parse_json(response))

        user = parse_user_identity(parse_json(response))

        # Step 5: site metadata and version
        try:
            discovery_response = await self._transport.get(f"{site_url}{ROOT_DISCOVERY_PATH}")
        except TransportError as e:
            return self._failed(config, e.kind, probe=probe, http_status=status)

        if discovery_response.status_code >= 500:
            return self._failed(
                config,
                ErrorKind.REMOTE_SERVER_ERROR,
                probe=probe,
                http_status=discovery_response.status_code,
            )

        discovery = parse_json(discovery_response)
        if discovery is None:
            discovery = discovery_response.text
        site_info = parse_site_info(discovery, site_url)

        wp_version = await self._version_detector.detect(site_url, discovery)

        self._log(
            LogLevel.INFO,
            "Connection test succeeded",
            {"url": site_url, "site_name": site_info.name, "wp_version": wp_version},
        )

        return ConnectionOutcome(
            success=True,
            site_name=site_info.name,
            site_description=site_info.description,
            wp_version=wp_version,
            canonical_site_url=site_info.home_url or site_url,
            gmt_offset=site_info.gmt_offset,
            message=get_message(
                "connection.success", self._language, site=site_info.name, version=wp_version
            ),
            http_status=status,
            user=user,
            probe=probe,
        )

    async def _classify_failure(
        self,
        config: ConnectionConfig,
        probe: SiteProbeResult,
        status: int,
        body: Any,
    ) -> ConnectionOutcome:
        if status == 401:
            return await self._authentication_failed(config, probe, body)
        if status == 403:
            kind = ErrorKind.INSUFFICIENT_PERMISSIONS
        elif status >= 500:
            kind = ErrorKind.REMOTE_SERVER_ERROR
        else:
            kind = ErrorKind.API_UNAVAILABLE

        self._log(
            LogLevel.WARN,
            f"Identity request rejected with HTTP {status}",
            {"url": config.target_url, "status": status, "kind": kind.value},
        )
        return self._failed(config, kind, probe=probe, http_status=status)

    async def _authentication_failed(
        self,
        config: ConnectionConfig,
        probe: SiteProbeResult,
        body: Any,
    ) -> ConnectionOutcome:
        error_code = body.get("code") if isinstance(body, dict) else None
        api_reachable = await self._base_api_reachable(config.target_url)

        if error_code in INVALID_LOGIN_CODES:
            message_key = "error.authentication_failed_invalid_login"
        elif api_reachable:
            # The API answers anonymous requests, so the credentials are at fault
            message_key = "error.authentication_failed_credentials"
        else:
            message_key = "error.authentication_failed"

        self._log(
            LogLevel.WARN,
            "Authentication rejected",
            {"url": config.target_url, "wp_error_code": error_code, "diagnosis": message_key},
        )
        return self._failed(
            config,
            ErrorKind.AUTHENTICATION_FAILED,
            probe=probe,
            http_status=401,
            message=get_message(message_key, self._language),
        )

    async def _base_api_reachable(self, site_url: str) -> bool:
        try:
            response = await self._transport.get(f"{site_url}{REST_DISCOVERY_PATH}")
        except TransportError:
            return False
        return response.status_code == 200

    def _failed(
        self,
        config: ConnectionConfig,
        kind: ErrorKind,
        probe: Optional[SiteProbeResult] = None,
        http_status: Optional[int] = None,
        message: Optional[str] = None,
    ) -> ConnectionOutcome:
        return ConnectionOutcome(
            success=False,
            canonical_site_url=config.target_url,
            failure_reason=kind,
            message=message or get_message(f"error.{kind.value}", self._language),
            http_status=http_status,
            probe=probe,
        )

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "ConnectionTester", message, data)
