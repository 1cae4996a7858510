"""Logging configuration using structlog."""

import logging
import sys
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

SECRET_LOG_KEYS = frozenset(
    {"password", "new_password", "admin_password", "bootstrap_secret", "recovery_secret"}
)


def redact_secrets(
    logger: structlog.typing.WrappedLogger, method_name: str, event_dict: structlog.typing.EventDict
) -> structlog.typing.EventDict:
    """Replace credential values bound by mistake so they never reach a sink."""
    for key in SECRET_LOG_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def setup_logging(debug: bool = False) -> None:
    """Configure structlog for structured logging.

    Args:
        debug: If True, use colored console output. If False, use JSON for production.
    """
    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=logging.DEBUG if debug else logging.INFO
    )

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        redact_secrets,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors = shared_processors + [structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Provider calls go through httpx; keep its per-request lines out of INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Optional logger name.

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None) -> None:
    """Bind request-level context to all subsequent log calls.

    Args:
        request_id: The correlation ID for the current request.
    """
    if request_id:
        bind_contextvars(request_id=request_id)


def bind_actor_context(actor_id: UUID, email: str | None = None) -> None:
    """Bind the authenticated caller to all subsequent log calls.

    Args:
        actor_id: Identity id of the caller (token subject).
        email: Optional caller email.
               Only logged if settings.log_user_emails is True (GDPR compliance).
    """
    from src.schoolops.core.config import get_settings

    bind_contextvars(actor_id=str(actor_id))
    settings = get_settings()
    if email and settings.log_user_emails:
        bind_contextvars(actor_email=email)


def bind_tenant_context(tenant_id: UUID, tenant_slug: str) -> None:
    """Bind the resolved tenant to all subsequent log calls."""
    bind_contextvars(tenant_id=str(tenant_id), tenant_slug=tenant_slug)


def clear_request_context() -> None:
    """Clear all request-scoped context."""
    clear_contextvars()
