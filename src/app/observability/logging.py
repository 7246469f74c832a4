"""Loguru logging setup with request-scoped context.

Production output is one JSON object per line (serialized with orjson);
development output is colorized text. Standard library logging from
third-party packages is routed through Loguru.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

import orjson
from loguru import logger


if TYPE_CHECKING:
    from loguru import Logger, Record


_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

_NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "asyncio",
    "arq",
    "stripe",
    "botocore",
    "boto3",
    "urllib3",
)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _json_sink_format(record: Record) -> str:
    record["extra"].update(_log_context.get())

    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["extra"].get("name", record["name"]),
        "function": record["function"],
        "line": record["line"],
        **record["extra"],
    }
    exception = record["exception"]
    if exception:
        payload["exception"] = {
            "type": exception.type.__name__ if exception.type else None,
            "value": str(exception.value) if exception.value else None,
        }

    # Stash the serialized line so the format string does not re-parse braces
    record["extra"]["_json"] = orjson.dumps(payload, default=str).decode()
    return "{extra[_json]}\n{exception}"


def _text_sink_format(record: Record) -> str:
    context = _log_context.get()
    context_str = ""
    if context:
        context_str = " | " + " ".join(f"{k}={v}" for k, v in context.items())
        # Braces in values would be read as format fields
        context_str = context_str.replace("{", "{{").replace("}", "}}")

    fmt = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
        f"{context_str} - "
        "<level>{message}</level>\n"
    )
    if record["exception"]:
        fmt += "{exception}\n"
    return fmt


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
) -> None:
    """Configure Loguru sinks and intercept standard library logging.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        log_format: ``json`` or ``text``.
        is_development: Force colorized text output.
    """
    logger.remove()

    if log_format == "json" and not is_development:
        logger.add(
            sys.stdout,
            format=_json_sink_format,
            level=log_level.upper(),
            colorize=False,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=_text_sink_format,
            level=log_level.upper(),
            colorize=True,
            backtrace=True,
            diagnose=is_development,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Logger:
    """Return the Loguru logger bound to a module name."""
    return logger.bind(name=name)


def bind_context(**kwargs: Any) -> None:
    """Add key/values to every log line emitted in the current context.

    Example:
        bind_context(request_id="abc-123", user_id=42)
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def clear_context() -> None:
    """Drop all request-scoped logging context."""
    _log_context.set({})


def unbind_context(*keys: str) -> None:
    """Remove specific keys from the logging context."""
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


def get_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "setup_logging",
    "unbind_context",
]
