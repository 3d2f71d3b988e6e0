"""Logging setup and timing helpers for the descriptor service.

``configure_logging`` installs one log file per process run under the
configured log directory, plus an optional stdout handler. Every record is
tagged with the run identifier.

``perf`` (decorator) and ``perf_span`` (context manager) emit a single
structured line per timed call:

    event=perf name=<span> duration_ms=<float> success=<bool> tags={...}
"""

import functools
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional

from torii.config import AppConfig

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [run=%(run_id)s] %(message)s"
PERF_LINE = "event=perf name=%s duration_ms=%.3f success=%s tags=%s"


class _RunContextFilter(logging.Filter):
    """Stamp the run identifier on every record passing through a handler."""

    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self._run_id
        return True


def _file_token(run_id: str) -> str:
    return "".join(ch if ch.isalnum() or ch in ("-", "_") else "-" for ch in run_id)


def generate_run_id() -> str:
    """Return a run identifier derived from the current UTC time."""
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def configure_logging(
    config: AppConfig,
    run_id: Optional[str] = None,
    include_console: bool = True,
    fmt: str = DEFAULT_LOG_FORMAT,
) -> Path:
    """Replace the root handlers with a per-run file handler (and stdout).

    Returns:
        The path of the log file written for this run.
    """
    run_id = run_id or generate_run_id()

    config.log_directory.mkdir(parents=True, exist_ok=True)
    log_path = config.log_directory / f"{config.app_name}-{_file_token(run_id)}.log"

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: List[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if include_console:
        handlers.append(logging.StreamHandler(sys.stdout))

    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(_RunContextFilter(run_id))
        root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    return log_path


def _format_tags(tags: Optional[Mapping[str, Any]]) -> str:
    if not tags:
        return "{}"
    return "{" + ", ".join(f"{key}={tags[key]!r}" for key in sorted(tags)) + "}"


def _log_perf(
    logger: logging.Logger,
    level: int,
    name: str,
    start_ns: int,
    success: bool,
    tags: Optional[Mapping[str, Any]],
) -> None:
    duration_ms = (time.monotonic_ns() - start_ns) / 1_000_000.0
    logger.log(level, PERF_LINE, name, duration_ms, str(success).lower(), _format_tags(tags))


def perf(
    name: Optional[str] = None,
    *,
    tags: Optional[Mapping[str, Any]] = None,
    level: int = logging.INFO,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator logging the wall time and outcome of each call.

    Args:
        name: Span name; defaults to ``<module>.<qualname>`` of the function.
        tags: Extra metadata rendered into the log line.
        level: Logging level for the perf line.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        span_name = name or f"{func.__module__}.{func.__qualname__}"
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_ns = time.monotonic_ns()
            try:
                result = func(*args, **kwargs)
            except Exception:
                _log_perf(logger, level, span_name, start_ns, False, tags)
                raise
            _log_perf(logger, level, span_name, start_ns, True, tags)
            return result

        return wrapper

    return decorator


class perf_span:
    """Context manager timing an arbitrary block.

    Example:
        with perf_span("providers.bootstrap", tags={"provider": "riseup"}):
            provider.bootstrap()
    """

    def __init__(
        self,
        name: str,
        *,
        tags: Optional[Mapping[str, Any]] = None,
        level: int = logging.INFO,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._name = name
        self._tags = dict(tags or {})
        self._level = level
        self._logger = logger or logging.getLogger(__name__)
        self._start_ns = 0

    def __enter__(self) -> "perf_span":
        self._start_ns = time.monotonic_ns()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        _log_perf(
            self._logger,
            self._level,
            self._name,
            self._start_ns,
            exc_type is None,
            self._tags,
        )
        return False


__all__ = [
    "configure_logging",
    "generate_run_id",
    "DEFAULT_LOG_FORMAT",
    "perf",
    "perf_span",
]
