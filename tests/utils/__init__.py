"""Test utilities package."""

from tests.utils.cleanup import (
    cleanup_platform_admins,
    cleanup_tenant_by_slug,
    cleanup_tenant_cascade,
)

__all__ = [
    "cleanup_platform_admins",
    "cleanup_tenant_by_slug",
    "cleanup_tenant_cascade",
]
