"""
Site URL normalization module.

Turns operator input ("example.com", "HTTPS://Example.com/blog/") into the
canonical target URL used by every request: scheme-prefixed, lowercase
IDNA-encoded host, no query or fragment, no trailing slash.
"""

import re
from urllib.parse import urlsplit

import idna

from .enums import UrlValidationErrorCode
from .exceptions import ValidationError


# Control characters and whitespace are never valid inside a site URL
FORBIDDEN_CHARS_PATTERN = re.compile(r"[\x00-\x1f\x7f\s]")

SCHEME_PATTERN = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*)://")

ALLOWED_SCHEMES = frozenset({"http", "https"})
DEFAULT_SCHEME = "https"


class SiteUrlNormalizer:
    """
    Normalizes WordPress site URLs to canonical form.

    Handles:
    - Adding https:// when no scheme is given
    - Rejecting non-HTTP schemes and embedded whitespace
    - IDNA encoding of international host names
    - Keeping subdirectory installs (example.com/blog) intact
    """

    def normalize(self, raw_url: str) -> str:
        """
        Normalize a raw site URL.

        Args:
            raw_url: URL as typed by the operator

        Returns:
            Canonical URL without trailing slash

        Raises:
            ValidationError: If the URL cannot be normalized
        """
        if not raw_url or not raw_url.strip():
            raise ValidationError(
                code=UrlValidationErrorCode.EMPTY_INPUT.value,
                message="Site URL is empty",
                details={"raw_input": raw_url},
            )

        url = raw_url.strip()

        if FORBIDDEN_CHARS_PATTERN.search(url):
            raise ValidationError(
                code=UrlValidationErrorCode.FORBIDDEN_CHARS.value,
                message="Site URL contains whitespace or control characters",
                details={"raw_input": raw_url},
            )

        scheme_match = SCHEME_PATTERN.match(url)
        if scheme_match is None:
            url = f"{DEFAULT_SCHEME}://{url}"
        elif scheme_match.group(1).lower() not in ALLOWED_SCHEMES:
            raise ValidationError(
                code=UrlValidationErrorCode.UNSUPPORTED_SCHEME.value,
                message=f"Unsupported URL scheme: {scheme_match.group(1)}",
                details={"raw_input": raw_url, "scheme": scheme_match.group(1)},
            )

        try:
            parts = urlsplit(url)
            hostname = parts.hostname
            port = parts.port
        except ValueError as e:
            raise ValidationError(
                code=UrlValidationErrorCode.MISSING_HOST.value,
                message=f"Invalid host or port: {e}",
                details={"raw_input": raw_url},
            )

        if not hostname:
            raise ValidationError(
                code=UrlValidationErrorCode.MISSING_HOST.value,
                message="Site URL has no host",
                details={"raw_input": raw_url},
            )

        host = self.encode_host(hostname)
        netloc = f"{host}:{port}" if port is not None else host
        path = parts.path.rstrip("/")

        return f"{parts.scheme.lower()}://{netloc}{path}"

    def encode_host(self, hostname: str) -> str:
        """
        Convert a host name to lowercase ASCII, IDNA-encoding if needed.

        Raises:
            ValidationError: If IDNA encoding fails
        """
        host_lower = hostname.lower()

        if not any(ord(c) > 127 for c in host_lower):
            return host_lower

        try:
            return idna.encode(host_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=UrlValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"host": hostname, "idna_error": str(e)},
            )


def normalize_site_url(raw_url: str) -> str:
    """Normalize a site URL with the default normalizer."""
    return SiteUrlNormalizer().normalize(raw_url)
