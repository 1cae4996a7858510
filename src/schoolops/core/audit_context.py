"""Request metadata for audit records, held in a contextvar.

The API layer sets it once per request; AuditService reads it when
appending records so services never take request objects.
"""

from contextvars import ContextVar
from dataclasses import dataclass

MAX_USER_AGENT_LENGTH = 500

_audit_context: ContextVar["AuditContext | None"] = ContextVar("audit_context", default=None)


@dataclass(frozen=True)
class AuditContext:
    """Immutable audit context for the current request."""

    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None


def get_client_ip(forwarded_for: str | None, client_host: str | None) -> str | None:
    """First address of X-Forwarded-For, else the direct peer."""
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return client_host


def set_audit_context(
    ip_address: str | None = None,
    user_agent: str | None = None,
    request_id: str | None = None,
) -> None:
    """Set audit context for the current request."""
    _audit_context.set(
        AuditContext(
            ip_address=ip_address,
            user_agent=user_agent[:MAX_USER_AGENT_LENGTH] if user_agent else None,
            request_id=request_id,
        )
    )


def get_audit_context() -> AuditContext | None:
    """Get the current audit context."""
    return _audit_context.get()


def clear_audit_context() -> None:
    """Clear the audit context."""
    _audit_context.set(None)
