"""Logfire setup and structured logging helpers.

Modules log through ``logging.getLogger(__name__)``; once ``configure_logfire`` has
run, those records and the operation spans land in the same Logfire trace.
"""

import logging

import logfire

from tasklist import __version__
from tasklist.core.config import settings


def configure_logfire() -> None:
    """Configure Pydantic Logfire with token from environment.

    Standard library log records are routed through Logfire's handler so spans and
    logs end up in the same trace.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name="tasklist",
        service_version=__version__,
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )
    logging.basicConfig(handlers=[logfire.LogfireLoggingHandler()], level=logging.INFO)

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def span(name: str) -> logfire.LogfireSpan:
    """Span around one engine or store operation, named ``<module>.<operation>``."""
    return logfire.span(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context: object) -> None:
    """Log ``message`` at ``level`` with task fields (task_id, tenant_id, ...) as record extras."""
    getattr(logger, level.lower())(message, extra=context)


def log_with_user_context(
    logger: logging.Logger,
    level: str,
    message: str,
    user_id: str | None = None,
    **extra: object,
) -> None:
    """Like ``log_with_context``, adding the acting ``user_id`` when known.

    Access-control denials and duplicate rejections go through here at warning level.
    """
    context = {"user_id": user_id, **extra} if user_id else extra
    log_with_context(logger, level, message, **context)
