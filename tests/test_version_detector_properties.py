"""
Property-based tests for WordPress version detection.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from wp_inspector.models import UNKNOWN_VERSION
from wp_inspector.transport import Transport
from wp_inspector.version_detector import (
    VersionDetector,
    match_version_patterns,
    most_common_asset_version,
    version_from_discovery,
)

from wp_fakes import BASE_URL, FakeSite, raise_connect_error, run_async


version_strategy = st.from_regex(r"[1-9]\.[0-9]{1,2}(\.[0-9]{1,2})?", fullmatch=True)


def detect(site: FakeSite, discovery):
    async def run():
        async with Transport(http_transport=site.transport()) as transport:
            return await VersionDetector(transport).detect(BASE_URL, discovery)

    return run_async(run())


class TestDiscoveryVersionProperty:
    """Structured discovery fields win without any page fetch."""

    @given(version=version_strategy)
    @settings(max_examples=50)
    def test_wp_version_field_skips_html(self, version: str) -> None:
        site = FakeSite()

        assert detect(site, {"name": "Blog", "wp_version": version}) == version
        assert site.requests == []

    def test_literal_641(self) -> None:
        site = FakeSite()

        assert detect(site, {"wp_version": "6.4.1"}) == "6.4.1"
        assert site.calls("/") == []

    def test_api_version_fallback_is_labelled(self) -> None:
        assert version_from_discovery({"api_version": "2"}) == "API v2"

    def test_wp_version_beats_version(self) -> None:
        assert version_from_discovery({"version": "1.0", "wp_version": "6.1"}) == "6.1"


class TestSecondaryDiscoveryProperty:
    """The second discovery document is trusted only in the standard shape."""

    @given(version=version_strategy)
    @settings(max_examples=30)
    def test_standard_document_is_used(self, version: str) -> None:
        site = FakeSite()
        site.add_json("/wp-json", {"gmt_offset": 0, "wp_version": version})

        assert detect(site, {"name": "Blog"}) == version
        assert site.calls("/") == []

    def test_nonstandard_document_is_ignored(self) -> None:
        site = FakeSite()
        site.add_json("/wp-json", {"wp_version": "9.9"})
        site.add_html("/", "<meta name=\"generator\" content=\"WordPress 6.3\" />")

        assert detect(site, {"name": "Blog"}) == "6.3"


class TestMarkupVersionProperty:
    """Asset and generator patterns in the home page markup."""

    def test_theme_stylesheet_version(self) -> None:
        site = FakeSite()
        site.add_html("/", "<link href='https://example.com/wp-content/themes/x/style.css?ver=6.2.3'>")

        assert detect(site, None) == "6.2.3"

    @given(version=version_strategy, other=version_strategy)
    @settings(max_examples=50)
    def test_emoji_script_has_precedence(self, version: str, other: str) -> None:
        markup = (
            f"<meta name=\"generator\" content=\"WordPress {other}\" />"
            f"<script src='/wp-includes/js/wp-emoji-release.min.js?ver={version}'></script>"
        )

        assert match_version_patterns(markup) == ("emoji_release", version)

    @given(version=version_strategy)
    @settings(max_examples=30)
    def test_generator_meta_tag(self, version: str) -> None:
        markup = f"<head><META NAME=\"generator\" CONTENT=\"WordPress {version}\"></head>"

        assert match_version_patterns(markup) == ("meta_generator", version)

    def test_markup_from_failed_discovery_is_reused(self) -> None:
        """Discovery that returned HTML instead of JSON is scanned without a new fetch."""
        site = FakeSite()
        markup = "<script src='/wp-includes/js/wp-embed.min.js?ver=5.9.2'></script>"

        assert detect(site, markup) == "5.9.2"
        assert site.calls("/") == []

    def test_unreachable_home_page_yields_unknown(self) -> None:
        site = FakeSite()
        site.add("/", raise_connect_error)

        assert detect(site, None) == UNKNOWN_VERSION

    def test_error_page_yields_unknown(self) -> None:
        site = FakeSite()
        site.add_html("/", "<p>WordPress 6.1</p>", status=503)

        assert detect(site, None) == UNKNOWN_VERSION


class TestAssetFrequencyProperty:
    """The most frequent ?ver= value, ties broken by first appearance."""

    @given(
        common=version_strategy,
        rare=version_strategy,
        extra=st.integers(min_value=1, max_value=5),
    )
    @settings(max_examples=50)
    def test_most_frequent_wins(self, common: str, rare: str, extra: int) -> None:
        if common == rare:
            return
        markup = f"/a.js?ver={rare} " + " ".join(f"/b{i}.js?ver={common}" for i in range(extra + 1))

        assert most_common_asset_version(markup) == common

    @given(first=version_strategy, second=version_strategy)
    @settings(max_examples=50)
    def test_tie_goes_to_first_seen(self, first: str, second: str) -> None:
        markup = f"/x.js?ver={first} /y.js?ver={second}"

        assert most_common_asset_version(markup) == first

    def test_no_asset_versions(self) -> None:
        assert most_common_asset_version("<html></html>") is None
