"""Structured logging configuration with structlog.

Environment variables:
- LOG_FORMAT: "json" for production log aggregation, "console" or unset for
  human-readable colored output.
- LOG_LEVEL: "DEBUG", "INFO" (default), "WARNING", "ERROR", or "CRITICAL".

Every event passes through redact_credentials before a renderer sees it, so
passwords, hashes, bearer tokens and Authorization headers never reach stdout
or the log file, however deeply they are nested in the event.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
REDACTED = "[redacted]"

_LOG_FORMATS = ("json", "console", "")
_LOG_LEVELS = ("critical", "debug", "error", "info", "warning")
_SENSITIVE_KEYS = frozenset({"password", "password_hash", "token", "authorization", "token_secret"})


def _scrub(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: REDACTED if str(k).lower() in _SENSITIVE_KEYS else _scrub(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_scrub(item) for item in value)
    return value


def redact_credentials(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Mask credential-bearing keys at any depth of dicts, lists and tuples."""
    for key, value in event_dict.items():
        event_dict[key] = REDACTED if key.lower() in _SENSITIVE_KEYS else _scrub(value)
    return event_dict


def event_processors() -> list:
    """Processor chain shared by the service and the test suite.

    Request context bound with structlog.contextvars (request_id, method,
    path, user_id) is merged into every event.
    """
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_credentials,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        # format_exc_info runs in ProcessorFormatter so tracebacks render once per handler.
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def configure_structlog() -> None:
    """Route structlog through the stdlib logging tree."""
    structlog.configure(
        processors=event_processors(),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _env_choice(name: str, default: str, allowed: tuple[str, ...]) -> str:
    value = os.environ.get(name, default).strip().lower()
    if value not in allowed:
        shown = ", ".join(repr(a) for a in allowed if a) + (" or unset" if "" in allowed else "")
        raise ValueError(f"Invalid {name}={value!r}. Must be one of {shown}.")
    return value


def _in_test_run() -> bool:
    return "pytest" in sys.modules


def _formatter(*, json_mode: bool, colors: bool) -> logging.Formatter:
    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def _open_log_file(log_dir: Path | str, *, json_mode: bool) -> logging.FileHandler:
    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)
    handler = logging.FileHandler(dir_path / f"{stamp}.log")
    handler.setFormatter(_formatter(json_mode=json_mode, colors=False))
    return handler


def setup_logging(log_dir: Path | str | None = None, level: int | None = None) -> Path | None:
    """Configure structlog output to stdout and, outside tests, a timestamped file in log_dir.

    Returns the log file path when one was opened.
    """
    json_mode = _env_choice("LOG_FORMAT", "", _LOG_FORMATS) == "json"
    if level is None:
        level = getattr(logging, _env_choice("LOG_LEVEL", "info", _LOG_LEVELS).upper())

    configure_structlog()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    # RequestLogMiddleware already emits one event per request.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setFormatter(_formatter(json_mode=json_mode, colors=sys.stdout.isatty()))
    root.addHandler(stdout)

    if log_dir is None or _in_test_run():
        return None
    file_handler = _open_log_file(log_dir, json_mode=json_mode)
    root.addHandler(file_handler)
    return Path(file_handler.baseFilename)
