"""Structured logging with session context and API key redaction."""

from forkly.observability.logging import (
    bind_context,
    clear_context,
    get_context,
    get_logger,
    logger,
    mask_secret,
    redact_url,
    setup_logging,
)


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
