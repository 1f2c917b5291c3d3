"""
Audit Logger module for the WordPress inspector.

Provides structured logging with dual-format output (JSON and human-readable text),
minimum-level filtering, and masking of credentials before anything is written.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

from .config import LoggingConfig
from .enums import LogLevel


LEVEL_ORDER = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARN: 30,
    LogLevel.ERROR: 40,
}


@dataclass
class LogEntry:
    """Represents a single log entry with all metadata."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)


class AuditLogger:
    """
    Structured logger handed to the inspector components by the caller.

    Supports:
    - JSON and human-readable text output formats
    - Dropping entries below a configured minimum level
    - Automatic masking of credentials (passwords, tokens, nonces, cookies)
    """

    # Keys that should be masked in log output
    SENSITIVE_KEYS = frozenset({
        'token', 'secret', 'password', 'api_key', 'nonce', 'cookie',
        'authorization', 'credential', 'credentials',
        'x-api-key', 'x-wp-nonce', 'x-wp-sparklewp-token',
        'access_token', 'refresh_token', 'session',
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "both",
        output_stream: Optional[TextIO] = None,
        min_level: LogLevel = LogLevel.DEBUG,
    ):
        """
        Initialize the audit logger.

        Args:
            output_format: Output format - 'json', 'text', or 'both'
            output_stream: Output stream for log entries (defaults to sys.stderr)
            min_level: Entries below this level are discarded
        """
        if output_format not in ("json", "text", "both"):
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._output_stream = output_stream or sys.stderr
        self._min_level = min_level
        self._entries: list[LogEntry] = []

    @classmethod
    def from_config(
        cls,
        config: LoggingConfig,
        output_stream: Optional[TextIO] = None,
    ) -> "AuditLogger":
        """Build a logger from a LoggingConfig."""
        try:
            level = LogLevel(config.level.lower())
        except ValueError:
            raise ValueError(f"Invalid log level: {config.level}")
        return cls(
            output_format=config.output_format,
            output_stream=output_stream,
            min_level=level,
        )

    @property
    def output_format(self) -> str:
        """Get the current output format."""
        return self._output_format

    @property
    def min_level(self) -> LogLevel:
        return self._min_level

    @property
    def entries(self) -> list[LogEntry]:
        """Get all logged entries (for testing)."""
        return self._entries.copy()

    def is_enabled_for(self, level: LogLevel) -> bool:
        return LEVEL_ORDER[level] >= LEVEL_ORDER[self._min_level]

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Log an entry in the configured format(s).

        Args:
            level: Log severity level
            component: Component name generating the log
            message: Human-readable log message
            data: Optional additional data to include

        Returns:
            The created LogEntry, or None if the level is filtered out
        """
        if not self.is_enabled_for(level):
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )

        self._entries.append(entry)
        self._output_entry(entry)

        return entry

    def mask_sensitive_data(self, data: dict) -> dict:
        """
        Return a copy of ``data`` with credential values replaced.

        A key is sensitive when it contains one of SENSITIVE_KEYS, compared
        case-insensitively, so header names such as ``X-WP-Nonce`` are caught
        as well as plain field names. Nested dicts and lists are walked.
        """
        if not isinstance(data, dict):
            return data
        return self._mask(data)

    def _mask(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                key: self.MASK_VALUE if self._is_sensitive(key) else self._mask(item)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self._mask(item) for item in value]
        return value

    def _is_sensitive(self, key: Any) -> bool:
        key_lower = str(key).lower()
        return any(pattern in key_lower for pattern in self.SENSITIVE_KEYS)

    def _output_entry(self, entry: LogEntry) -> None:
        if self._output_format in ("json", "both"):
            self._output_stream.write(self._format_json(entry) + "\n")

        if self._output_format in ("text", "both"):
            self._output_stream.write(self._format_text(entry) + "\n")

        self._output_stream.flush()

    def _format_json(self, entry: LogEntry) -> str:
        return json.dumps(
            {
                "timestamp": entry.timestamp,
                "level": entry.level.value,
                "component": entry.component,
                "message": entry.message,
                "data": entry.data,
            },
            ensure_ascii=False,
            default=str,
        )

    def _format_text(self, entry: LogEntry) -> str:
        # [TIMESTAMP] LEVEL [COMPONENT] MESSAGE {data}
        line = f"[{entry.timestamp}] {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + json.dumps(entry.data, ensure_ascii=False, default=str)
        return line

    def clear_entries(self) -> None:
        """Clear all stored log entries (for testing)."""
        self._entries.clear()
