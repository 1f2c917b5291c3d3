"""
End-to-end tests for the site inspector and the CLI commands built on it.

Every test runs against a FakeSite, so no network access is needed.
"""

import json
from io import StringIO
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from wp_inspector import cli
from wp_inspector.audit_logger import AuditLogger
from wp_inspector.config import ConnectionConfig, InspectorSettings
from wp_inspector.enums import AuthMethod, ErrorKind, InventorySource, LogLevel
from wp_inspector.i18n import get_message
from wp_inspector.inspector import SiteInspector, inspect_site

from wp_fakes import BASE_URL, FakeSite, json_response, run_async, wordpress_site


EXTENSION = "/wp-json/sparklewp/v1/site-info"

API_KEY_CONFIG = ConnectionConfig.create(BASE_URL, AuthMethod.API_KEY, secret="K123")


def extension_site(plugins: int = 4, themes: int = 2, posts: int = 10) -> FakeSite:
    site = wordpress_site()
    site.add_json(EXTENSION, {
        "success": True,
        "plugin_count": plugins,
        "theme_count": themes,
        "posts_count": posts,
    })
    return site


def inspect(site: FakeSite, config: ConnectionConfig = API_KEY_CONFIG, **kwargs):
    return run_async(inspect_site(config, http_transport=site.transport(), **kwargs))


class TestInspectionProperty:
    """A successful connection is followed by inventory collection."""

    @given(
        plugins=st.integers(min_value=0, max_value=300),
        themes=st.integers(min_value=0, max_value=30),
        posts=st.integers(min_value=0, max_value=5000),
    )
    @settings(max_examples=30)
    def test_success_collects_inventory(self, plugins: int, themes: int, posts: int) -> None:
        site = extension_site(plugins, themes, posts)

        report = inspect(site)

        assert report.outcome.success is True
        assert report.inventory is not None
        assert report.inventory.plugin_count == plugins
        assert report.inventory.theme_count == themes
        assert report.inventory.post_count == posts
        assert report.inventory.source == InventorySource.PRIVILEGED_EXTENSION
        assert report.duration_ms >= 0

    def test_inventory_uses_the_same_credentials(self) -> None:
        site = extension_site()

        inspect(site)

        request = site.calls(EXTENSION)[0]
        assert request.headers["X-API-Key"] == "K123"

    def test_failed_connection_skips_inventory(self) -> None:
        site = extension_site()
        site.add_json("/wp-json/wp/v2/users/me", {"code": "rest_not_logged_in"}, status=401)

        report = inspect(site)

        assert report.outcome.success is False
        assert report.outcome.failure_reason == ErrorKind.AUTHENTICATION_FAILED
        assert report.inventory is None
        assert site.calls(EXTENSION) == []

    def test_unsendable_secret_is_reported(self) -> None:
        site = extension_site()
        config = ConnectionConfig.create(BASE_URL, AuthMethod.API_KEY, secret="schlüssel")

        report = inspect(site, config)

        assert report.outcome.failure_reason == ErrorKind.INVALID_CREDENTIALS
        assert report.inventory is None
        assert site.calls(EXTENSION) == []

    def test_insufficient_permissions_inventory(self) -> None:
        site = wordpress_site()
        site.add(EXTENSION, json_response({"code": "rest_forbidden"}, status=403))

        report = inspect(site)

        assert report.outcome.success is True
        assert report.inventory.failure_reason == ErrorKind.INSUFFICIENT_PERMISSIONS

    def test_inspection_is_logged(self) -> None:
        output = StringIO()
        logger = AuditLogger(output_format="json", output_stream=output)

        inspect(extension_site(), logger=logger)

        inspector_entries = [e for e in logger.entries if e.component == "SiteInspector"]
        assert [e.message for e in inspector_entries] == ["Starting inspection", "Inspection finished"]
        assert all(e.level == LogLevel.INFO for e in inspector_entries)
        assert "K123" not in output.getvalue()

    def test_probe(self) -> None:
        site = wordpress_site()
        inspector = SiteInspector(http_transport=site.transport())

        result = run_async(inspector.probe("example.com"))

        assert result.is_wordpress is True
        assert result.rest_api_available is True


@pytest.fixture
def fake_cli_site(monkeypatch):
    """Route every SiteInspector the CLI creates to a FakeSite."""
    site = extension_site(plugins=7, themes=3, posts=21)

    def make_inspector(settings: InspectorSettings, logger=None) -> SiteInspector:
        return SiteInspector(settings=settings, logger=logger, http_transport=site.transport())

    monkeypatch.setattr(cli, "SiteInspector", make_inspector)
    monkeypatch.setattr(cli, "DEFAULT_CONFIG_PATH", Path("/nonexistent/wp_inspector.json"))
    monkeypatch.delenv(cli.SECRET_ENV_VAR, raising=False)
    return site


class TestCliProperty:
    """The CLI reports inspection results and exit codes."""

    def test_connect_prints_inventory(self, fake_cli_site, capsys) -> None:
        code = cli.main(["connect", "example.com", "--method", "api_key", "--secret", "K123"])

        out = capsys.readouterr().out
        assert code == 0
        assert get_message(
            "cli.inventory", "en", plugins=7, themes=3, posts=21, source="privileged_extension"
        ) in out
        assert "K123" not in out

    def test_connect_json(self, fake_cli_site, capsys) -> None:
        code = cli.main([
            "connect", "https://example.com", "--method", "api_key", "--secret", "K123", "--json",
        ])

        report = json.loads(capsys.readouterr().out)
        assert code == 0
        assert report["outcome"]["success"] is True
        assert report["inventory"]["source"] == "privileged_extension"
        assert report["inventory"]["plugin_count"] == 7

    def test_secret_from_environment(self, fake_cli_site, monkeypatch, capsys) -> None:
        monkeypatch.setenv(cli.SECRET_ENV_VAR, "K123")

        code = cli.main(["connect", "example.com", "--method", "api_key"])

        assert code == 0
        assert fake_cli_site.calls(EXTENSION)[0].headers["X-API-Key"] == "K123"

    def test_missing_secret_is_reported(self, fake_cli_site, capsys) -> None:
        code = cli.main(["connect", "example.com", "--method", "api_key"])

        assert code == 1
        assert "Failed:" in capsys.readouterr().err
        assert fake_cli_site.calls("/wp-json/wp/v2/users/me") == []

    def test_failed_connection_exit_code(self, fake_cli_site, capsys) -> None:
        fake_cli_site.add_json("/wp-json/wp/v2/users/me", {"code": "rest_not_logged_in"}, status=401)

        code = cli.main(["connect", "example.com", "--method", "api_key", "--secret", "bad"])

        assert code == 1
        assert "Failed:" in capsys.readouterr().err

    def test_unusable_config_stops_before_any_request(self, fake_cli_site, tmp_path, capsys) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"user_agent": "Prüfagent/1.0"}), encoding="utf-8")

        code = cli.main([
            "connect", "example.com", "--method", "api_key", "--secret", "K123",
            "--config", str(config_path),
        ])

        assert code == 1
        assert "user_agent must be printable ASCII" in capsys.readouterr().err
        assert fake_cli_site.requests == []

    def test_german_output(self, fake_cli_site, capsys) -> None:
        code = cli.main([
            "connect", "example.com", "--method", "api_key", "--secret", "K123", "--language", "de",
        ])

        assert code == 0
        assert "Beiträge: 21" in capsys.readouterr().out

    def test_probe_command(self, fake_cli_site, capsys) -> None:
        code = cli.main(["probe", "example.com"])

        assert code == 0
        assert "WordPress: yes" in capsys.readouterr().out

    def test_probe_rejects_invalid_url(self, fake_cli_site, capsys) -> None:
        code = cli.main(["probe", "   "])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys) -> None:
        assert cli.main([]) == 0
        assert "wp-inspector" in capsys.readouterr().out
