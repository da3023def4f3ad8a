"""
Logging for wallet sessions.

Session modules log through stdlib ``logging``. ``setup_logging`` renders
those records with structlog, and every line carries the active session
(space, provider, state) bound by the session manager through context
variables.
"""

import logging
import sys
from typing import TYPE_CHECKING, Optional

import structlog

from .config import settings

if TYPE_CHECKING:
    from .core.session.models import Session


SESSION_CONTEXT_KEYS = ("space", "provider", "session_state")

# Chatty below WARNING when the HTTP provider is polling receipts
QUIET_LOGGERS = ("httpcore", "httpx")


def bind_session_context(session: "Session") -> None:
    """Attach the session's space, provider and state to later log lines."""
    structlog.contextvars.bind_contextvars(
        space=session.space.name if session.space else None,
        provider=session.provider_name,
        session_state=session.state.value,
    )


def clear_session_context() -> None:
    structlog.contextvars.unbind_contextvars(*SESSION_CONTEXT_KEYS)


def _select_renderer(level: int, log_format: str) -> structlog.types.Processor:
    if log_format == "console" or (log_format == "auto" and level == logging.DEBUG):
        return structlog.dev.ConsoleRenderer()
    if log_format in ("auto", "json"):
        return structlog.processors.JSONRenderer()
    raise ValueError(f"Unknown log format {log_format!r}. Expected auto, json or console")


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Route stdlib logging through structlog.

    Args:
        log_level: Override log level (default: from settings.log_level)
        log_format: ``json``, ``console`` or ``auto`` (console at DEBUG,
            JSON otherwise; default: from settings.log_format)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    renderer = _select_renderer(level, (log_format or settings.log_format).lower())

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if isinstance(renderer, structlog.processors.JSONRenderer):
        pre_chain.append(structlog.processors.format_exc_info)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # stdout belongs to the CLI output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
