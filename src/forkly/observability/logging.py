"""Loguru setup for Forkly.

Records carry the favorites session (active user id, session token) bound
through ``bind_context``. API keys are scrubbed from every record by a
patcher before any sink sees it, including records forwarded from the
standard library loggers of httpx and the Google clients.
"""

from __future__ import annotations

import logging
import re
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
from loguru import logger


if TYPE_CHECKING:
    from typing import Any


_session_context: ContextVar[dict[str, Any]] = ContextVar("session_context", default={})

# Third-party loggers that are only interesting when something breaks.
_QUIET_LOGGERS = (
    "httpx",
    "httpcore",
    "asyncio",
    "urllib3",
    "google",
    "google.auth",
    "google.api_core",
    "grpc",
)

_API_KEY_PARAM = re.compile(r"(?i)\b(apiKey|key)=([^&\s\"']+)")

_TEXT_TEMPLATE = (
    "<green>{time:HH:mm:ss.SSS}</green> "
    "<level>{level: <8}</level> "
    "<cyan>{extra[name]}</cyan>:<cyan>{line}</cyan>"
    "{session} "
    "<level>{message}</level>\n"
)


class InterceptHandler(logging.Handler):
    """Route standard library records into Loguru."""

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


def _escape(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def _redact_record(record: dict[str, Any]) -> None:
    """Patcher: merge the session context and scrub API keys in place."""
    extra = record["extra"]
    for key, value in _session_context.get().items():
        extra.setdefault(key, value)
    record["message"] = redact_url(record["message"])
    for key, value in extra.items():
        if isinstance(value, str):
            extra[key] = redact_url(value)


def _json_format(record: dict[str, Any]) -> str:
    """One JSON object per line."""
    extra = dict(record["extra"])
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": extra.pop("name", record["name"]),
        "message": record["message"],
        "function": record["function"],
        "line": record["line"],
        **_session_context.get(),
        **extra,
    }
    exc = record["exception"]
    if exc:
        payload["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }
    return _escape(orjson.dumps(payload, default=str).decode()) + "\n"


def _text_format(record: dict[str, Any]) -> str:
    """Colorized single-line template for terminals."""
    record["extra"].setdefault("name", record["name"])
    session = _session_context.get()
    suffix = ""
    if session:
        suffix = " [" + " ".join(f"{k}={v}" for k, v in session.items()) + "]"
    template = _TEXT_TEMPLATE.replace("{session}", _escape(suffix))
    if record["exception"]:
        template += "{exception}\n"
    return template


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
    log_file: Path | str | None = None,
) -> None:
    """Replace every Loguru sink with Forkly's.

    Args:
        log_level: Minimum level name, case-insensitive.
        log_format: ``"json"`` or ``"text"``.
        is_development: Use the text format whatever ``log_format`` says.
        log_file: Optional JSON file sink, rotated at 10 MB.
    """
    level = log_level.upper()
    as_json = log_format == "json" and not is_development

    logger.remove()
    logger.configure(patcher=_redact_record)
    logger.add(
        sys.stdout,
        format=_json_format if as_json else _text_format,
        level=level,
        colorize=not as_json,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=_json_format,
            level=level,
            rotation="10 MB",
            retention="7 days",
            compression="gz",
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> "logger":  # type: ignore[valid-type]
    """Loguru logger tagged with ``name`` (pass ``__name__``)."""
    return logger.bind(name=name)


def mask_secret(value: str | None, visible: int = 5) -> str:
    """Render only the first ``visible`` characters of a secret.

    >>> mask_secret("abcdef123456")
    'abcde...'
    """
    if not value:
        return "<unset>"
    return f"{value[:visible]}..."


def redact_url(url: str) -> str:
    """Replace API key query parameters in ``url`` with a placeholder."""
    return _API_KEY_PARAM.sub(lambda m: f"{m.group(1)}=API_KEY", url)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every later record logged from this context."""
    _session_context.set({**_session_context.get(), **kwargs})


def clear_context() -> None:
    _session_context.set({})


def get_context() -> dict[str, Any]:
    """Copy of the fields currently bound."""
    return dict(_session_context.get())


__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "mask_secret",
    "redact_url",
    "setup_logging",
]
