"""Tenant factories for test data generation."""

from polyfactory import Use

from src.schoolops.models import Tenant, TenantBootstrap
from tests.factories.base import BaseFactory, generate_uuid, utc_now


class TenantFactory(BaseFactory):
    """Factory for generating Tenant (school) test data."""

    __model__ = Tenant

    id = Use(generate_uuid)
    name = Use(lambda: f"Test School {generate_uuid().hex[-8:]}")
    slug = Use(lambda: f"test-{generate_uuid().hex[-8:]}")
    is_active = True
    created_at = Use(utc_now)

    @classmethod
    def inactive(cls, **kwargs):
        """Create a deactivated school."""
        return cls.build(is_active=False, **kwargs)


class TenantBootstrapFactory(BaseFactory):
    """Factory for a locked bootstrap record. Pass tenant_id."""

    __model__ = TenantBootstrap

    locked = True
    bootstrapped_at = Use(utc_now)
    bootstrapped_by = Use(generate_uuid)
