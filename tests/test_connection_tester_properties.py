"""
Property-based tests for the connection tester.

Covers the success path end to end and the mapping of identity-request
status codes onto failure kinds.
"""

import base64

from hypothesis import given, settings
from hypothesis import strategies as st

from wp_inspector.config import ConnectionConfig
from wp_inspector.connection_tester import ConnectionTester, parse_site_info
from wp_inspector.enums import AuthMethod, ErrorKind
from wp_inspector.i18n import get_message
from wp_inspector.models import UNKNOWN_VERSION
from wp_inspector.transport import Transport

from wp_fakes import (
    BASE_URL,
    FakeSite,
    discovery_document,
    json_response,
    raise_timeout,
    run_async,
    wordpress_site,
)


APP_PASSWORD_CONFIG = ConnectionConfig(
    target_url=BASE_URL,
    method=AuthMethod.APPLICATION_PASSWORD,
    username="admin",
    secret="abcd efgh ijkl mnop",
)


def run_connection_test(site: FakeSite, config: ConnectionConfig = APP_PASSWORD_CONFIG, language=None):
    async def run():
        async with Transport(http_transport=site.transport()) as transport:
            return await ConnectionTester(transport, language=language).test_connection(config)

    return run_async(run())


class TestSuccessfulConnectionProperty:
    """A reachable site accepting the credentials yields a full outcome."""

    @given(
        version=st.from_regex(r"[4-6]\.[0-9]\.[0-9]", fullmatch=True),
        name=st.text(alphabet="abcdefghijklmnopqrstuvwxyz ", min_size=1, max_size=30).filter(str.strip),
    )
    @settings(max_examples=30)
    def test_valid_application_password(self, version: str, name: str) -> None:
        site = wordpress_site(discovery=discovery_document(name=name, wp_version=version))

        outcome = run_connection_test(site)

        assert outcome.success is True
        assert outcome.failure_reason is None
        assert outcome.site_name == name
        assert outcome.wp_version == version
        assert outcome.canonical_site_url == BASE_URL
        assert outcome.gmt_offset == 1.0
        assert outcome.user.name == "admin"
        assert outcome.message == f"Connected to {name} (WordPress {version})."

    def test_identity_request_carries_basic_auth(self) -> None:
        site = wordpress_site(discovery=discovery_document(wp_version="6.4.1"))

        run_connection_test(site)

        identity = site.calls("/wp-json/wp/v2/users/me")[0]
        expected = base64.b64encode(b"admin:abcdefghijklmnop").decode("ascii")
        assert identity.headers["Authorization"] == f"Basic {expected}"
        assert identity.headers["User-Agent"] == "SparkleWP/1.0"

    def test_root_discovery_is_requested_without_credentials(self) -> None:
        site = wordpress_site(discovery=discovery_document(wp_version="6.4.1"))

        run_connection_test(site)

        discovery = site.calls("/wp-json/")[0]
        assert "Authorization" not in discovery.headers

    def test_undetectable_version_is_unknown(self) -> None:
        site = wordpress_site(home_markup="<html><body>No hints here</body></html>")

        outcome = run_connection_test(site)

        assert outcome.success is True
        assert outcome.wp_version == UNKNOWN_VERSION

    def test_german_success_message(self) -> None:
        site = wordpress_site(discovery=discovery_document(name="Blog", wp_version="6.5"))

        outcome = run_connection_test(site, language="de")

        assert outcome.message == "Verbindung zu Blog erfolgreich (WordPress 6.5)."


class TestStatusMappingProperty:
    """Identity-request status codes map onto failure kinds."""

    @given(
        status_kind=st.sampled_from([
            (403, ErrorKind.INSUFFICIENT_PERMISSIONS),
            (404, ErrorKind.API_UNAVAILABLE),
            (410, ErrorKind.API_UNAVAILABLE),
            (500, ErrorKind.REMOTE_SERVER_ERROR),
            (502, ErrorKind.REMOTE_SERVER_ERROR),
            (503, ErrorKind.REMOTE_SERVER_ERROR),
        ]),
        language=st.sampled_from(["de", "en"]),
    )
    @settings(max_examples=40)
    def test_non_401_failures(self, status_kind, language: str) -> None:
        status, kind = status_kind
        site = wordpress_site()
        site.add_json("/wp-json/wp/v2/users/me", {"code": "error"}, status=status)

        outcome = run_connection_test(site, language=language)

        assert outcome.success is False
        assert outcome.failure_reason == kind
        assert outcome.http_status == status
        assert outcome.message == get_message(f"error.{kind.value}", language)
        assert site.calls("/wp-json/") == []

    def test_401_with_reachable_api_blames_credentials(self) -> None:
        site = wordpress_site()
        site.add_json("/wp-json/wp/v2/users/me", {"code": "rest_not_logged_in"}, status=401)

        outcome = run_connection_test(site)

        assert outcome.failure_reason == ErrorKind.AUTHENTICATION_FAILED
        assert outcome.message == get_message("error.authentication_failed_credentials")
        # One probe request plus one diagnostic request
        assert len(site.calls("/wp-json/wp/v2/")) == 2

    @given(code=st.sampled_from(["incorrect_password", "invalid_username"]))
    @settings(max_examples=10)
    def test_401_with_invalid_login_code(self, code: str) -> None:
        site = wordpress_site()
        site.add_json("/wp-json/wp/v2/users/me", {"code": code}, status=401)

        outcome = run_connection_test(site)

        assert outcome.failure_reason == ErrorKind.AUTHENTICATION_FAILED
        assert outcome.message == get_message("error.authentication_failed_invalid_login")

    def test_401_with_unreachable_api_is_generic(self) -> None:
        calls = {"count": 0}

        def discovery(request):
            # Answer the probe, fail the diagnostic
            calls["count"] += 1
            if calls["count"] == 1:
                return json_response({"namespace": "wp/v2"}, 200)
            return json_response({"code": "rest_disabled"}, 403)

        site = wordpress_site()
        site.add("/wp-json/wp/v2/", discovery)
        site.add_json("/wp-json/wp/v2/users/me", {}, status=401)

        outcome = run_connection_test(site)

        assert outcome.failure_reason == ErrorKind.AUTHENTICATION_FAILED
        assert outcome.message == get_message("error.authentication_failed")


class TestEarlyFailureProperty:
    """Probe and transport failures stop the test before authentication."""

    def test_not_wordpress(self) -> None:
        site = FakeSite()
        site.add_html("/", "<html><body>Static site</body></html>")

        outcome = run_connection_test(site)

        assert outcome.failure_reason == ErrorKind.NOT_WORDPRESS
        assert site.calls("/wp-json/wp/v2/users/me") == []

    def test_identity_timeout(self) -> None:
        site = wordpress_site()
        site.add("/wp-json/wp/v2/users/me", raise_timeout)

        outcome = run_connection_test(site)

        assert outcome.failure_reason == ErrorKind.TIMEOUT

    def test_discovery_server_error(self) -> None:
        site = wordpress_site()
        site.add_json("/wp-json/", {}, status=500)

        outcome = run_connection_test(site)

        assert outcome.success is False
        assert outcome.failure_reason == ErrorKind.REMOTE_SERVER_ERROR

    @given(
        method_header=st.sampled_from([
            (AuthMethod.API_KEY, "X-API-Key"),
            (AuthMethod.JWT_TOKEN, "Authorization"),
            (AuthMethod.CUSTOM_TOKEN, "X-WP-SparkleWP-Token"),
        ]),
        language=st.sampled_from(["de", "en"]),
    )
    @settings(max_examples=20)
    def test_non_ascii_secret_is_classified(self, method_header: tuple, language: str) -> None:
        method, header = method_header
        site = wordpress_site()
        config = ConnectionConfig(target_url=BASE_URL, method=method, secret="schlüssel")

        outcome = run_connection_test(site, config, language=language)

        assert outcome.success is False
        assert outcome.failure_reason == ErrorKind.INVALID_CREDENTIALS
        assert outcome.message == get_message(
            "error.invalid_credentials_encoding",
            language,
            method=method.value,
            invalid=header,
        )
        assert site.calls("/wp-json/wp/v2/users/me") == []


class TestParseSiteInfoProperty:
    """Site metadata parsing tolerates missing or malformed fields."""

    @given(offset=st.one_of(st.none(), st.just("abc"), st.integers(-12, 14)))
    def test_gmt_offset(self, offset) -> None:
        info = parse_site_info({"name": "X", "gmt_offset": offset}, BASE_URL)

        expected = float(offset) if isinstance(offset, int) else 0.0
        assert info.gmt_offset == expected
        assert info.home_url == BASE_URL

    def test_non_dict_discovery(self) -> None:
        info = parse_site_info("<html></html>", BASE_URL)

        assert info.name == "Unknown"
        assert info.home_url == BASE_URL