"""Tests for version constraint governance."""

import asyncio

import pytest

from catalog.core.exceptions import (
    CatalogValidationError,
    ConflictError,
    InvalidVersionRangeError,
    NotFoundError,
)
from catalog.schemas.policy import TechnologyCreate, VersionConstraintCreate, VersionConstraintUpdate
from catalog.services.registry import RegistryService
from catalog.services.technologies import TechnologyService
from catalog.services.version_constraints import VersionConstraintService, validate_version_range
from tests.mocks.catalog import seed_version_constraint


class TestValidateVersionRange:
    def test_valid_range_trimmed(self):
        assert validate_version_range("  ^18.0.0 ") == "^18.0.0"

    def test_blank(self):
        with pytest.raises(InvalidVersionRangeError):
            validate_version_range("   ")

    def test_none(self):
        with pytest.raises(InvalidVersionRangeError):
            validate_version_range(None)

    def test_malformed(self):
        with pytest.raises(InvalidVersionRangeError):
            validate_version_range(">=eighteen")


class TestCreate:
    def test_create(self, db):
        async def scenario():
            constraint = await seed_version_constraint(db)
            assert constraint.technology == "React"
            assert constraint.version_range == ">=18.0.0 <19.0.0"
            assert constraint.status == "active"
            assert constraint.created_by == "governance"

        asyncio.run(scenario())

    def test_unknown_technology(self, db):
        data = VersionConstraintCreate(
            name="Angular 16", technology="Angular", version_range="^16.0.0", severity="error"
        )
        with pytest.raises(NotFoundError) as exc_info:
            asyncio.run(VersionConstraintService(db).create(data))
        assert exc_info.value.entity_type == "Technology"

    def test_invalid_range_rejected_on_write(self, db):
        async def scenario():
            await TechnologyService(db).create(TechnologyCreate(name="React"))
            await VersionConstraintService(db).create(
                VersionConstraintCreate(name="bad", technology="React", version_range="18 to 19", severity="error")
            )

        with pytest.raises(InvalidVersionRangeError):
            asyncio.run(scenario())

    def test_invalid_severity(self, db):
        with pytest.raises(CatalogValidationError):
            asyncio.run(seed_version_constraint(db, severity="urgent"))

    def test_team_scope_needs_team(self, db):
        with pytest.raises(CatalogValidationError) as exc_info:
            asyncio.run(seed_version_constraint(db, scope="team"))
        assert exc_info.value.field == "subject_team"

    def test_team_scope_unknown_team(self, db):
        with pytest.raises(NotFoundError):
            asyncio.run(seed_version_constraint(db, scope="team", subject_team="ghosts"))

    def test_team_scope(self, db):
        async def scenario():
            await RegistryService(db).create_team("payments")
            constraint = await seed_version_constraint(db, scope="team", subject_team="payments")
            assert constraint.subject_team == "payments"

        asyncio.run(scenario())

    def test_duplicate(self, db):
        async def scenario():
            await seed_version_constraint(db)
            await seed_version_constraint(db)

        with pytest.raises(ConflictError):
            asyncio.run(scenario())


class TestUpdate:
    def test_range_update(self, db):
        async def scenario():
            await seed_version_constraint(db)
            service = VersionConstraintService(db)
            updated = await service.update("React 18", VersionConstraintUpdate(version_range="^18.2.0"))

            assert updated.version_range == "^18.2.0"
            entry = await db["audit_logs"].find_one({"operation": "UPDATE"})
            assert entry["changed_fields"] == ["version_range"]

        asyncio.run(scenario())

    def test_invalid_range_update(self, db):
        async def scenario():
            await seed_version_constraint(db)
            await VersionConstraintService(db).update("React 18", VersionConstraintUpdate(version_range="nope"))

        with pytest.raises(InvalidVersionRangeError):
            asyncio.run(scenario())

    def test_scope_back_to_organization_clears_team(self, db):
        async def scenario():
            await RegistryService(db).create_team("payments")
            await seed_version_constraint(db, scope="team", subject_team="payments")
            updated = await VersionConstraintService(db).update(
                "React 18", VersionConstraintUpdate(scope="organization")
            )
            assert updated.scope == "organization"
            assert updated.subject_team is None

        asyncio.run(scenario())

    def test_empty_update(self, db):
        async def scenario():
            original = await seed_version_constraint(db)
            unchanged = await VersionConstraintService(db).update("React 18", VersionConstraintUpdate())
            assert unchanged.version_range == original.version_range

        asyncio.run(scenario())


class TestStatusAndDelete:
    def test_status_transition(self, db):
        async def scenario():
            await seed_version_constraint(db)
            result = await VersionConstraintService(db).update_status("React 18", "draft")
            assert result["previous_status"] == "active"
            assert result["constraint"].status == "draft"

        asyncio.run(scenario())

    def test_same_status_rejected(self, db):
        async def scenario():
            await seed_version_constraint(db)
            await VersionConstraintService(db).update_status("React 18", "active")

        with pytest.raises(CatalogValidationError):
            asyncio.run(scenario())

    def test_find_all_filters(self, db):
        async def scenario():
            await seed_version_constraint(db)
            await seed_version_constraint(db, name="Vue 3", technology="Vue", version_range="^3.0.0")
            service = VersionConstraintService(db)

            assert [c.name for c in await service.find_all()] == ["React 18", "Vue 3"]
            assert [c.name for c in await service.find_all({"technology": "Vue"})] == ["Vue 3"]

        asyncio.run(scenario())

    def test_find_all_unknown_filter_key(self, db):
        with pytest.raises(CatalogValidationError) as exc_info:
            asyncio.run(VersionConstraintService(db).find_all({"tech": "Vue"}))
        assert exc_info.value.field == "tech"

    def test_delete(self, db):
        async def scenario():
            await seed_version_constraint(db)
            service = VersionConstraintService(db)
            await service.delete("React 18")
            assert await service.find_by_name("React 18") is None

        asyncio.run(scenario())

    def test_delete_missing(self, db):
        with pytest.raises(NotFoundError):
            asyncio.run(VersionConstraintService(db).delete("React 18"))
