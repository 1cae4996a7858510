"""Unit tests for audit context module."""

from dataclasses import FrozenInstanceError

import pytest

from src.schoolops.core.audit_context import (
    AuditContext,
    clear_audit_context,
    get_audit_context,
    get_client_ip,
    set_audit_context,
)

pytestmark = pytest.mark.unit


class TestAuditContext:
    def test_audit_context_is_immutable(self):
        ctx = AuditContext(ip_address="1.2.3.4")
        with pytest.raises(FrozenInstanceError):
            ctx.ip_address = "5.6.7.8"  # type: ignore[misc]


class TestSetAndGetAuditContext:
    def test_set_and_get_context(self):
        set_audit_context(
            ip_address="192.168.1.1",
            user_agent="Mozilla/5.0",
            request_id="abc-123",
        )

        ctx = get_audit_context()
        assert ctx == AuditContext("192.168.1.1", "Mozilla/5.0", "abc-123")

    def test_get_context_returns_none_when_not_set(self):
        assert get_audit_context() is None

    def test_clear_context(self):
        set_audit_context(ip_address="1.2.3.4")
        clear_audit_context()
        assert get_audit_context() is None

    def test_user_agent_truncation(self):
        """User agent over 500 chars should be truncated."""
        set_audit_context(user_agent="x" * 600)

        ctx = get_audit_context()
        assert ctx is not None
        assert len(ctx.user_agent) == 500


class TestGetClientIp:
    def test_returns_first_ip_from_forwarded_for(self):
        assert get_client_ip("1.2.3.4, 5.6.7.8, 9.10.11.12", "192.168.1.1") == "1.2.3.4"

    def test_strips_whitespace_from_forwarded_for(self):
        assert get_client_ip("  1.2.3.4  , 5.6.7.8", "192.168.1.1") == "1.2.3.4"

    @pytest.mark.parametrize("forwarded_for", [None, ""])
    def test_falls_back_to_client_host(self, forwarded_for):
        assert get_client_ip(forwarded_for, "192.168.1.1") == "192.168.1.1"

    def test_returns_none_when_both_are_none(self):
        assert get_client_ip(None, None) is None
