"""
Fallback chain for best-effort lookups.

Runs an ordered list of fallible async steps and returns the first value a
step produces. A step that returns None or raises simply hands over to the
next one; the chain itself never raises, except for task cancellation which
always propagates.
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from .audit_logger import AuditLogger
from .enums import LogLevel

T = TypeVar("T")

Step = tuple[str, Callable[[], Awaitable[Optional[T]]]]


@dataclass
class StepFailure:
    """A step that raised."""

    step: str
    error: Exception


@dataclass
class FallbackResult(Generic[T]):
    """Result of running a fallback chain."""

    value: Optional[T]
    step: Optional[str]
    attempts: int
    failures: list[StepFailure] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.value is not None


class FallbackChain:
    """
    First-success-wins combinator.

    Each step is a ``(name, operation)`` pair. Operations are called in
    order; ``None`` means "nothing here", an exception means "this step
    broke". Both advance to the next step.
    """

    def __init__(
        self,
        component: str,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Args:
            component: Component name used in log entries
            logger: Optional audit logger
        """
        self._component = component
        self._logger = logger

    async def run(self, steps: Sequence[Step]) -> FallbackResult[T]:
        """
        Run steps until one yields a value.

        Args:
            steps: Ordered (name, async callable) pairs

        Returns:
            FallbackResult with the winning value and step name, or an
            empty result when every step came up short
        """
        failures: list[StepFailure] = []
        attempts = 0

        for name, operation in steps:
            attempts += 1
            try:
                value = await operation()
            except Exception as e:
                failures.append(StepFailure(step=name, error=e))
                self._log(
                    LogLevel.DEBUG,
                    f"Step '{name}' failed",
                    {"step": name, "error_type": type(e).__name__, "error_message": str(e)},
                )
                continue

            if value is not None:
                self._log(LogLevel.DEBUG, f"Step '{name}' succeeded", {"step": name})
                return FallbackResult(
                    value=value,
                    step=name,
                    attempts=attempts,
                    failures=failures,
                )

            self._log(LogLevel.DEBUG, f"Step '{name}' found nothing", {"step": name})

        return FallbackResult(
            value=None,
            step=None,
            attempts=attempts,
            failures=failures,
        )

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self._component, message, data)
