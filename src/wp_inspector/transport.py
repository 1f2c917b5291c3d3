"""
HTTP transport shared by every inspector component.

This module wraps a single httpx AsyncClient with a fixed per-call timeout
and turns network-level failures (DNS, refused connections, timeouts) into
TransportError carrying the matching ErrorKind. HTTP status codes are never
raised: classifying them is the caller's job.
"""

import time
from typing import Any, Optional

import httpx

from .audit_logger import AuditLogger
from .config import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from .enums import ErrorKind, LogLevel
from .exceptions import TransportError


class Transport:
    """
    Async HTTP client with a fixed timeout.

    Usable as an async context manager; the underlying client is created
    lazily on first use otherwise. Cancellation of the calling task aborts
    the in-flight request.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        verify_tls: bool = True,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            timeout: Per-call timeout in seconds
            user_agent: User-Agent sent with every request
            verify_tls: Verify server certificates
            http_transport: Optional httpx transport (e.g. httpx.MockTransport)
            logger: Optional audit logger
        """
        self._timeout = timeout
        self._user_agent = user_agent
        self._verify_tls = verify_tls
        self._http_transport = http_transport
        self._logger = logger
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "Transport":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def user_agent(self) -> str:
        return self._user_agent

    def base_headers(self) -> dict[str, str]:
        """Headers for unauthenticated requests."""
        return {
            "User-Agent": self._user_agent,
            "Accept": "application/json",
        }

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=self._verify_tls,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._http_transport,
            )
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Issue a request and return the response whatever its status.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Request headers; defaults to base_headers()
            params: Optional query parameters

        Returns:
            The httpx response

        Raises:
            TransportError: On timeout, DNS or connection failure
        """
        client = self._ensure_client()
        start_time = time.perf_counter()

        try:
            response = await client.request(
                method,
                url,
                headers=headers if headers is not None else self.base_headers(),
                params=params,
            )
        except httpx.TimeoutException as e:
            self._log_failure(method, url, e, start_time)
            raise TransportError(
                kind=ErrorKind.TIMEOUT,
                message=f"Request timed out after {self._timeout}s",
                details={"url": url, "method": method},
            )
        except httpx.ConnectError as e:
            self._log_failure(method, url, e, start_time)
            raise TransportError(
                kind=ErrorKind.SITE_UNREACHABLE,
                message=f"Connection error: {e}",
                details={"url": url, "method": method},
            )
        except httpx.RequestError as e:
            self._log_failure(method, url, e, start_time)
            raise TransportError(
                kind=ErrorKind.SITE_UNREACHABLE,
                message=f"Request failed: {e}",
                details={"url": url, "method": method, "error_type": type(e).__name__},
            )

        if self._logger:
            self._logger.log(
                LogLevel.DEBUG,
                "Transport",
                f"{method} {url} -> {response.status_code}",
                {
                    "status": response.status_code,
                    "response_time_ms": self._elapsed_ms(start_time),
                },
            )

        return response

    async def get(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        return await self.request("GET", url, headers=headers, params=params)

    async def head(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        return await self.request("HEAD", url, headers=headers)

    def _log_failure(
        self, method: str, url: str, error: Exception, start_time: float
    ) -> None:
        if self._logger:
            self._logger.log(
                LogLevel.DEBUG,
                "Transport",
                f"{method} {url} failed",
                {
                    "error_type": type(error).__name__,
                    "response_time_ms": self._elapsed_ms(start_time),
                },
            )

    def _elapsed_ms(self, start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


def parse_json(response: httpx.Response) -> Optional[Any]:
    """Decode a JSON body, returning None when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None
