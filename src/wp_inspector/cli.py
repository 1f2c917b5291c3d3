"""
Command-line interface for the WordPress inspector.

Commands:
- probe: Check whether a URL hosts WordPress
- connect: Test credentials and collect the site inventory
- config: Configuration management

Secrets are never stored in the configuration file. ``connect`` takes them
from ``--secret`` or the WP_INSPECTOR_SECRET environment variable; a ``.env``
file in the working directory is loaded first.
"""

import argparse
import asyncio
import dataclasses
import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    ConnectionConfig,
    InspectorSettings,
    LoggingConfig,
)
from .enums import AuthMethod, LogLevel
from .exceptions import ConfigError, UnsupportedMethodError, ValidationError
from .i18n import SUPPORTED_LANGUAGES, get_message
from .inspector import SiteInspector
from .models import InspectionReport


SECRET_ENV_VAR = "WP_INSPECTOR_SECRET"

DEFAULT_CONFIG_PATH = Path.home() / ".wp_inspector" / "config.json"

VALID_OUTPUT_FORMATS = ("json", "text", "both")


def create_default_settings(language: str = "en") -> InspectorSettings:
    """
    Create default inspector settings.

    Args:
        language: Output language ('de' or 'en')

    Returns:
        InspectorSettings with default values
    """
    return InspectorSettings(
        timeout=DEFAULT_TIMEOUT_SECONDS,
        user_agent=DEFAULT_USER_AGENT,
        verify_tls=True,
        language=language,
        logging=LoggingConfig(
            level="info",
            output_format="text",
        ),
    )


def validate_settings(settings: InspectorSettings) -> list[str]:
    """
    Check settings for values the inspector cannot work with.

    Returns:
        List of problems, empty when the settings are usable
    """
    problems = []
    if settings.timeout <= 0:
        problems.append(f"timeout must be positive, got {settings.timeout}")
    if not settings.user_agent:
        problems.append("user_agent must not be empty")
    elif not settings.user_agent.isascii() or not settings.user_agent.isprintable():
        problems.append("user_agent must be printable ASCII")
    if settings.language not in SUPPORTED_LANGUAGES:
        problems.append(f"unsupported language: {settings.language}")
    if settings.logging.level not in [level.value for level in LogLevel]:
        problems.append(f"unknown log level: {settings.logging.level}")
    if settings.logging.output_format not in VALID_OUTPUT_FORMATS:
        problems.append(f"unknown log output format: {settings.logging.output_format}")
    return problems


def load_settings_from_file(config_path: Path) -> Optional[InspectorSettings]:
    """
    Load settings from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        InspectorSettings if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return settings_from_dict(data)

    except json.JSONDecodeError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except ConfigError as e:
        print(f"Error loading config: {e.message}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def settings_from_dict(data: Any) -> InspectorSettings:
    """
    Build settings from parsed configuration data.

    Raises:
        ConfigError: If the data does not have the expected shape
    """
    if not isinstance(data, dict):
        raise ConfigError(
            code="invalid_config",
            message="Configuration must be a JSON object",
            details={"type": type(data).__name__},
        )

    logging_data = data.get("logging") or {}
    if not isinstance(logging_data, dict):
        raise ConfigError(
            code="invalid_config",
            message="'logging' must be a JSON object",
            details={"type": type(logging_data).__name__},
        )

    try:
        timeout = float(data.get("timeout", DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError):
        raise ConfigError(
            code="invalid_config",
            message="'timeout' must be a number",
            details={"timeout": data.get("timeout")},
        )

    return InspectorSettings(
        timeout=timeout,
        user_agent=str(data.get("user_agent", DEFAULT_USER_AGENT)),
        verify_tls=bool(data.get("verify_tls", True)),
        language=str(data.get("language", "en")),
        logging=LoggingConfig(
            level=str(logging_data.get("level", "info")),
            output_format=str(logging_data.get("output_format", "text")),
        ),
    )


def save_settings_to_file(settings: InspectorSettings, config_path: Path) -> bool:
    """
    Save settings to a JSON file.

    Args:
        settings: InspectorSettings to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "timeout": settings.timeout,
            "user_agent": settings.user_agent,
            "verify_tls": settings.verify_tls,
            "language": settings.language,
            "logging": {
                "level": settings.logging.level,
                "output_format": settings.logging.output_format,
            },
        }

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def report_to_dict(report: InspectionReport) -> dict:
    """Convert an inspection report into JSON-ready primitives."""
    return _jsonable(dataclasses.asdict(report))


def _resolve_settings(args: argparse.Namespace) -> Optional[InspectorSettings]:
    settings = None
    if args.config:
        settings = load_settings_from_file(Path(args.config))
        if settings is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
            return None
    elif DEFAULT_CONFIG_PATH.exists():
        settings = load_settings_from_file(DEFAULT_CONFIG_PATH)

    if settings is None:
        settings = create_default_settings()

    if args.language:
        settings = dataclasses.replace(settings, language=args.language)
    if args.timeout:
        settings = dataclasses.replace(settings, timeout=args.timeout)

    problems = validate_settings(settings)
    if problems:
        for problem in problems:
            print(f"Error: {problem}", file=sys.stderr)
        return None

    return settings


def _create_logger(settings: InspectorSettings, verbose: bool) -> Optional[AuditLogger]:
    if not verbose:
        return None
    try:
        return AuditLogger.from_config(settings.logging, output_stream=sys.stderr)
    except ValueError as e:
        print(f"Warning: {e}; using text logging", file=sys.stderr)
        return AuditLogger(output_format="text", output_stream=sys.stderr)


async def run_probe(url: str, settings: InspectorSettings, verbose: bool = False) -> int:
    """
    Probe a URL and print the result.

    Returns:
        Exit code (0 when WordPress was found)
    """
    language = settings.language
    print(get_message("cli.probing", language, url=url))

    inspector = SiteInspector(settings=settings, logger=_create_logger(settings, verbose))
    result = await inspector.probe(url)

    answer = get_message("cli.yes" if result.is_wordpress else "cli.no", language)
    print(get_message("cli.is_wordpress", language, value=answer))
    if result.message:
        print(f"  {result.message}")

    return 0 if result.is_wordpress else 1


async def run_connect(
    config: ConnectionConfig,
    settings: InspectorSettings,
    as_json: bool = False,
    verbose: bool = False,
) -> int:
    """
    Test a connection, collect the inventory and print the report.

    Returns:
        Exit code (0 when the connection succeeded)
    """
    language = settings.language
    if not as_json:
        print(get_message(
            "cli.connecting", language, url=config.target_url, method=config.method.value
        ))

    inspector = SiteInspector(settings=settings, logger=_create_logger(settings, verbose))
    report = await inspector.inspect(config)
    outcome = report.outcome

    if as_json:
        print(json.dumps(report_to_dict(report), indent=2, ensure_ascii=False))
        return 0 if outcome.success else 1

    if not outcome.success:
        print(get_message("cli.failed", language, message=outcome.message), file=sys.stderr)
        return 1

    print(outcome.message)
    if outcome.user and outcome.user.name:
        print(f"  User: {outcome.user.name}")
    if verbose:
        print(f"  URL: {outcome.canonical_site_url}")
        print(f"  Duration: {report.duration_ms:.1f}ms")

    inventory = report.inventory
    if inventory is not None:
        if inventory.failure_reason is not None:
            print(get_message(f"error.{inventory.failure_reason.value}", language))
        else:
            print(get_message(
                "cli.inventory",
                language,
                plugins=inventory.plugin_count,
                themes=inventory.theme_count,
                posts=inventory.post_count,
                source=inventory.source.value,
            ))
        if verbose and inventory.detected_plugin_slugs:
            print(f"  Detected plugins: {', '.join(inventory.detected_plugin_slugs)}")

    return 0


def cmd_probe(args: argparse.Namespace) -> int:
    """Handle the 'probe' command."""
    settings = _resolve_settings(args)
    if settings is None:
        return 1

    try:
        return asyncio.run(run_probe(args.url, settings, verbose=args.verbose))
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


def cmd_connect(args: argparse.Namespace) -> int:
    """Handle the 'connect' command."""
    settings = _resolve_settings(args)
    if settings is None:
        return 1

    load_dotenv()
    secret = args.secret or os.environ.get(SECRET_ENV_VAR)

    try:
        config = ConnectionConfig.create(
            args.url,
            args.method,
            username=args.username,
            secret=secret,
            timeout=settings.timeout,
        )
    except (ValidationError, UnsupportedMethodError) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    return asyncio.run(run_connect(config, settings, as_json=args.json, verbose=args.verbose))


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        settings = load_settings_from_file(config_path)
        if settings is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Language: {settings.language}")
        print(f"  Timeout: {settings.timeout}s")
        print(f"  User-Agent: {settings.user_agent}")
        print(f"  Verify TLS: {settings.verify_tls}")
        print(f"  Log level: {settings.logging.level}")
        print(f"  Log format: {settings.logging.output_format}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        settings = create_default_settings(language=args.language or "en")
        if save_settings_to_file(settings, config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    elif args.action == "validate":
        settings = load_settings_from_file(config_path)
        if settings is None:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return 1

        problems = validate_settings(settings)
        if problems:
            print(f"Configuration at {config_path} is invalid:", file=sys.stderr)
            for problem in problems:
                print(f"  - {problem}", file=sys.stderr)
            return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Output language (default: from config, else en)",
    )
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT_SECONDS:g})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output and logging to stderr",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="wp-inspector",
        description="Connect to and inspect remote WordPress sites",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'probe' command
    probe_parser = subparsers.add_parser(
        "probe",
        help="Check whether a URL hosts WordPress",
    )
    probe_parser.add_argument(
        "url",
        help="Site URL (e.g., example.com or https://example.com/blog)",
    )
    _add_common_arguments(probe_parser)
    probe_parser.set_defaults(func=cmd_probe)

    # 'connect' command
    connect_parser = subparsers.add_parser(
        "connect",
        help="Test credentials and collect the site inventory",
    )
    connect_parser.add_argument(
        "url",
        help="Site URL",
    )
    connect_parser.add_argument(
        "--method", "-m",
        required=True,
        choices=[method.value for method in AuthMethod],
        help="Authentication method",
    )
    connect_parser.add_argument(
        "--username", "-u",
        help="Username (application_password only)",
    )
    connect_parser.add_argument(
        "--secret", "-s",
        help=f"Password, token or key (default: ${SECRET_ENV_VAR})",
    )
    connect_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full report as JSON",
    )
    _add_common_arguments(connect_parser)
    connect_parser.set_defaults(func=cmd_connect)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Default language for new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
