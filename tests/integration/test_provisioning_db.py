"""Integration tests for bulk import and bootstrap against PostgreSQL."""

from uuid import uuid4

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.schoolops.core.exceptions import BootstrapLockedError
from src.schoolops.models import AuditAction, Tenant
from src.schoolops.repositories import (
    AuditLogRepository,
    DirectoryRepository,
    MembershipRepository,
    PlatformAdminRepository,
    RoleGrantRepository,
    TenantBootstrapRepository,
)
from src.schoolops.services import BootstrapService, BulkImportService, ProvisioningSequencer
from src.schoolops.services.row_validation import ImportRow
from tests.factories import RoleGrantFactory
from tests.fakes import FakeIdentityProvider
from tests.utils.cleanup import cleanup_platform_admins, cleanup_tenant_by_slug

pytestmark = [pytest.mark.integration]


class BrokenMembershipRepository(MembershipRepository):
    """Runs an invalid statement for one identity, failing its transaction."""

    def __init__(self, session: AsyncSession, broken_user_id):
        super().__init__(session)
        self.broken_user_id = broken_user_id

    async def upsert_active(self, tenant_id, user_id, created_by):
        if user_id == self.broken_user_id:
            await self.session.execute(text("SELECT no_such_column FROM tenant_memberships"))
        await super().upsert_active(tenant_id, user_id, created_by)


@pytest.fixture
async def operator_id(db_session: AsyncSession, test_tenant: Tenant):
    """An HR manager of the test school."""
    grant = RoleGrantFactory.build(tenant_id=test_tenant.id, role="hr_manager")
    db_session.add(grant)
    await db_session.commit()
    return grant.user_id


def staff_rows() -> list[ImportRow]:
    return [
        ImportRow(
            email="teacher@school.test",
            password="password123",
            roles=["teacher", "counselor"],
            display_name="Tess Teacher",
        ),
        ImportRow(email="parent@school.test", password="password123", roles=["parent"]),
    ]


class TestBulkImportCommit:
    async def test_commit_provisions_rows(
        self,
        db_session: AsyncSession,
        test_tenant: Tenant,
        operator_id,
        bulk_import_service: BulkImportService,
        identity_provider: FakeIdentityProvider,
    ) -> None:
        result = await bulk_import_service.execute(
            operator_id, "commit", test_tenant.slug, staff_rows(), reason="term start"
        )

        assert result.ok
        teacher_id = identity_provider.user_id("teacher@school.test")
        roles = RoleGrantRepository(db_session)
        assert await roles.list_roles(test_tenant.id, teacher_id) == ["counselor", "teacher"]

        membership = await MembershipRepository(db_session).get_membership(
            test_tenant.id, teacher_id
        )
        assert membership is not None
        assert membership.created_by == operator_id

        entries, _, _ = await DirectoryRepository(db_session).list_by_tenant(test_tenant.id)
        assert {(e.email, e.display_name) for e in entries} == {
            ("teacher@school.test", "Tess Teacher"),
            ("parent@school.test", None),
        }

        logs, _, _ = await AuditLogRepository(db_session).list_by_tenant(test_tenant.id)
        actions = [log.action for log in logs]
        assert actions.count(AuditAction.BULK_IMPORT_ROW.value) == 2
        assert actions.count(AuditAction.BULK_IMPORT_COMMIT.value) == 1

    async def test_rerun_converges(
        self,
        db_session: AsyncSession,
        test_tenant: Tenant,
        operator_id,
        bulk_import_service: BulkImportService,
        identity_provider: FakeIdentityProvider,
    ) -> None:
        await bulk_import_service.execute(operator_id, "commit", test_tenant.slug, staff_rows())
        rows = staff_rows()
        rows[0] = ImportRow(
            email="teacher@school.test",
            password="password123",
            roles=["teacher"],
            display_name="Tess Teacher",
        )

        result = await bulk_import_service.execute(operator_id, "commit", test_tenant.slug, rows)

        assert result.ok
        assert identity_provider.created == ["teacher@school.test", "parent@school.test"]
        teacher_id = identity_provider.user_id("teacher@school.test")
        roles = await RoleGrantRepository(db_session).list_roles(test_tenant.id, teacher_id)
        assert roles == ["teacher"]
        entries, _, _ = await DirectoryRepository(db_session).list_by_tenant(test_tenant.id)
        assert len(entries) == 2


class TestBootstrap:
    async def test_bootstrap_then_lock(
        self,
        engine: AsyncEngine,
        db_session: AsyncSession,
        bootstrap_service: BootstrapService,
    ) -> None:
        slug = f"boot-{uuid4().hex[-8:]}"
        admin_id = None
        try:
            tenant, admin_id = await bootstrap_service.bootstrap(
                "integration-bootstrap-secret",
                school_slug=slug,
                school_name="Bootstrapped School",
                admin_email=f"admin-{slug}@school.test",
                admin_password="password123",
            )

            assert await TenantBootstrapRepository(db_session).is_locked(tenant.id)
            assert await PlatformAdminRepository(db_session).is_platform_admin(admin_id)
            assert await RoleGrantRepository(db_session).list_roles(tenant.id, admin_id) == [
                "principal",
                "school_owner",
                "super_admin",
            ]

            with pytest.raises(BootstrapLockedError):
                await bootstrap_service.bootstrap(
                    "integration-bootstrap-secret",
                    school_slug=slug,
                    school_name="Bootstrapped School",
                    admin_email=f"admin-{slug}@school.test",
                    admin_password="password123",
                )
        finally:
            async with engine.connect() as conn:
                await cleanup_tenant_by_slug(conn, slug)
                if admin_id is not None:
                    await cleanup_platform_admins(conn, [admin_id])
                await conn.commit()


class TestRowFailureIsolation:
    async def test_failed_row_does_not_break_later_rows(
        self,
        db_session: AsyncSession,
        test_tenant: Tenant,
        operator_id,
        bulk_import_service: BulkImportService,
        sequencer: ProvisioningSequencer,
        identity_provider: FakeIdentityProvider,
    ) -> None:
        """Rolling back the first row leaves later rows and the batch audit intact."""
        tenant_id, slug = test_tenant.id, test_tenant.slug
        broken = identity_provider.add_user("teacher@school.test")
        sequencer.membership_repo = BrokenMembershipRepository(db_session, broken.id)
        rows = [
            *staff_rows(),
            ImportRow(email="counselor@school.test", password="password123", roles=["counselor"]),
        ]

        result = await bulk_import_service.execute(operator_id, "commit", slug, rows)

        assert not result.ok
        assert [r.ok for r in result.results] == [False, True, True]
        assert result.results[0].errors[0].startswith("Membership update failed:")
        assert result.results[0].user_id is None
        counselor_id = identity_provider.user_id("counselor@school.test")
        assert result.results[2].user_id == counselor_id
        assert await RoleGrantRepository(db_session).list_roles(tenant_id, counselor_id) == [
            "counselor"
        ]

        logs, _, _ = await AuditLogRepository(db_session).list_by_tenant(
            tenant_id, action=AuditAction.BULK_IMPORT_COMMIT.value
        )
        assert len(logs) == 1
        assert logs[0].event_metadata["okCount"] == 2
        assert logs[0].event_metadata["errorCount"] == 1
