"""Integration test fixtures for database operations.

These fixtures require a PostgreSQL database at DATABASE_URL. The identity
provider stays faked: only the relational side is exercised for real.
Uses polyfactory for type-safe test data generation.
"""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from src.schoolops.core import db
from src.schoolops.core.config import get_settings
from src.schoolops.core.migrations import run_migrations_async
from src.schoolops.models import Tenant
from src.schoolops.repositories import (
    AuditLogRepository,
    DirectoryRepository,
    MembershipRepository,
    PlatformAdminRepository,
    RoleGrantRepository,
    TenantBootstrapRepository,
    TenantRepository,
)
from src.schoolops.services import (
    AuditService,
    BootstrapService,
    BulkImportService,
    IdentityResolver,
    PermissionService,
    ProvisioningSequencer,
)
from tests.factories import TenantFactory
from tests.fakes import FakeIdentityProvider
from tests.utils.cleanup import cleanup_tenant_cascade


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Create test database engine and ensure migrations are applied."""
    await db.dispose_engine()

    settings = get_settings()
    test_engine = create_async_engine(settings.database_url, poolclass=NullPool)
    try:
        async with test_engine.connect():
            pass
    except (OSError, SQLAlchemyError) as e:
        await test_engine.dispose()
        pytest.skip(f"PostgreSQL unavailable: {e}")

    await run_migrations_async()

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for database operations.

    The session does NOT auto-commit. Tests must call `await session.commit()`
    to persist changes.
    """
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def audit_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Separate session for audit writes, as the API wires it."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def test_tenant(engine: AsyncEngine, db_session: AsyncSession) -> AsyncGenerator[Tenant]:
    """Create an isolated school for each test and remove it afterwards."""
    tenant = TenantFactory.build()
    db_session.add(tenant)
    await db_session.commit()
    tenant_id = tenant.id

    yield tenant

    async with engine.connect() as conn:
        await cleanup_tenant_cascade(conn, tenant_id)
        await conn.commit()


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def sequencer(
    db_session: AsyncSession, audit_session: AsyncSession, identity_provider: FakeIdentityProvider
) -> ProvisioningSequencer:
    return ProvisioningSequencer(
        identity_provider,
        db_session,
        MembershipRepository(db_session),
        RoleGrantRepository(db_session),
        DirectoryRepository(db_session),
        AuditService(AuditLogRepository(audit_session), audit_session),
    )


@pytest.fixture
def bulk_import_service(
    db_session: AsyncSession,
    identity_provider: FakeIdentityProvider,
    sequencer: ProvisioningSequencer,
) -> BulkImportService:
    """BulkImportService over PostgreSQL repositories and the fake provider."""
    return BulkImportService(
        TenantRepository(db_session),
        PermissionService(PlatformAdminRepository(db_session), RoleGrantRepository(db_session)),
        IdentityResolver(identity_provider),
        sequencer,
        sequencer.audit_service,
    )


@pytest.fixture
def bootstrap_service(
    db_session: AsyncSession,
    identity_provider: FakeIdentityProvider,
    sequencer: ProvisioningSequencer,
) -> BootstrapService:
    return BootstrapService(
        db_session,
        TenantRepository(db_session),
        TenantBootstrapRepository(db_session),
        PlatformAdminRepository(db_session),
        IdentityResolver(identity_provider),
        sequencer,
        sequencer.audit_service,
        bootstrap_secret="integration-bootstrap-secret",
        recovery_secret="integration-recovery-secret",
    )
