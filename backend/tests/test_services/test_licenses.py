"""Tests for the license catalog - curation, whitelist, usage queries."""

import asyncio

import pytest

from catalog.core.exceptions import CatalogValidationError, ConflictError, NotFoundError
from catalog.repositories.audit_logs import AuditLogRepository
from catalog.schemas.license import LicenseCreate, LicenseUpdate
from catalog.services.ingestion import IngestionService
from catalog.services.licenses import LicenseService
from catalog.services.policies import PolicyService
from tests.mocks.catalog import FRONTEND_REPO, make_component, seed_license_policy, seed_licenses, seed_system


async def _seed_catalog(db):
    service = LicenseService(db)
    await service.create(LicenseCreate(id="MIT", name="MIT License", category="permissive", osi_approved=True))
    await service.create(
        LicenseCreate(id="GPL-3.0", name="GNU General Public License v3.0", category="strong_copyleft", osi_approved=True)
    )
    await service.create(
        LicenseCreate(id="GPL-2.0+", name="GNU GPL v2 or later", category="strong_copyleft", deprecated=True)
    )
    await service.create(LicenseCreate(id="Acme-EULA", name="Acme End User Agreement", category="proprietary"))
    return service


class TestCreateAndUpdate:
    def test_create(self, db):
        async def scenario():
            service = LicenseService(db)
            created = await service.create(
                LicenseCreate(id="MIT", name="MIT License", category="permissive", osi_approved=True),
                user_id="alice",
            )
            assert created.category == "permissive"
            assert created.whitelisted is False

            stored = await db["licenses"].find_one({"_id": "MIT"})
            assert stored["name"] == "MIT License"
            assert stored["osi_approved"] is True
            entry = await db["audit_logs"].find_one({"operation": "CREATE", "entity_type": "License"})
            assert entry["entity_id"] == "MIT"
            assert entry["user_id"] == "alice"

        asyncio.run(scenario())

    def test_create_existing_conflicts(self, db):
        async def scenario():
            await seed_licenses(db, "MIT")
            await LicenseService(db).create(LicenseCreate(id="MIT"))

        with pytest.raises(ConflictError):
            asyncio.run(scenario())

    def test_create_after_ingestion_conflicts(self, db):
        async def scenario():
            await seed_system(db)
            await IngestionService(db).ingest(FRONTEND_REPO, [make_component("react", licenses=["MIT"])])
            await LicenseService(db).create(LicenseCreate(id="MIT"))

        with pytest.raises(ConflictError):
            asyncio.run(scenario())

    def test_invalid_category(self):
        with pytest.raises(ValueError):
            LicenseCreate(id="MIT", category="mostly-fine")

    def test_update_curated_fields(self, db):
        async def scenario():
            await seed_system(db)
            await IngestionService(db).ingest(FRONTEND_REPO, [make_component("react", licenses=["MIT"])])
            service = LicenseService(db)

            updated = await service.update(
                "MIT", LicenseUpdate(category="permissive", osi_approved=True), user_id="bob"
            )
            assert updated.category == "permissive"
            assert updated.osi_approved is True
            assert updated.name == "MIT"
            assert updated.updated_at is not None

            entries = await AuditLogRepository(db).find_for_entity("License", "MIT")
            assert [e.operation for e in entries] == ["UPDATE"]
            assert entries[0].changed_fields == ["category", "osi_approved"]
            assert entries[0].user_id == "bob"

        asyncio.run(scenario())

    def test_update_keeps_unset_fields(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            updated = await service.update("GPL-3.0", LicenseUpdate(url="https://www.gnu.org/licenses/gpl-3.0"))
            assert updated.category == "strong_copyleft"
            assert updated.url == "https://www.gnu.org/licenses/gpl-3.0"

        asyncio.run(scenario())

    def test_update_unknown(self, db):
        with pytest.raises(NotFoundError) as exc_info:
            asyncio.run(LicenseService(db).update("Made-Up-1.0", LicenseUpdate(deprecated=True)))
        assert exc_info.value.entity_type == "License"

    def test_ingestion_keeps_curated_fields(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            await seed_system(db)
            await IngestionService(db).ingest(FRONTEND_REPO, [make_component("react", licenses=["MIT"])])

            entry = await service.get("MIT")
            assert entry.name == "MIT License"
            assert entry.category == "permissive"

        asyncio.run(scenario())


class TestFindAll:
    def test_all_sorted_by_id(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            page = await service.find_all()
            assert [lic.id for lic in page.licenses] == ["Acme-EULA", "GPL-2.0+", "GPL-3.0", "MIT"]
            assert page.count == page.total == 4

        asyncio.run(scenario())

    def test_category(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            page = await service.find_all({"category": "strong_copyleft"})
            assert [lic.id for lic in page.licenses] == ["GPL-2.0+", "GPL-3.0"]

        asyncio.run(scenario())

    def test_flags(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            assert [lic.id for lic in (await service.find_all({"osi_approved": True})).licenses] == ["GPL-3.0", "MIT"]
            assert [lic.id for lic in (await service.find_all({"deprecated": True})).licenses] == ["GPL-2.0+"]
            not_deprecated = await service.find_all({"deprecated": False})
            assert "GPL-2.0+" not in [lic.id for lic in not_deprecated.licenses]
            assert not_deprecated.total == 3

        asyncio.run(scenario())

    def test_search_is_case_insensitive(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            by_name = await service.find_all({"search": "general public"})
            assert [lic.id for lic in by_name.licenses] == ["GPL-3.0"]
            by_id = await service.find_all({"search": "gpl-2.0+"})
            assert [lic.id for lic in by_id.licenses] == ["GPL-2.0+"]

        asyncio.run(scenario())

    def test_pagination(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            page = await service.find_all(skip=1, limit=2)
            assert [lic.id for lic in page.licenses] == ["GPL-2.0+", "GPL-3.0"]
            assert page.count == 2
            assert page.total == 4

        asyncio.run(scenario())

    def test_component_counts(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            await seed_system(db)
            await IngestionService(db).ingest(
                FRONTEND_REPO,
                [
                    make_component("react", licenses=["MIT"]),
                    make_component("lodash", "4.17.21", licenses=["MIT"]),
                    make_component("readline-sync", "1.4.10", licenses=["GPL-3.0", "MIT"]),
                ],
            )

            counts = {lic.id: lic.component_count for lic in (await service.find_all()).licenses}
            assert counts == {"Acme-EULA": 0, "GPL-2.0+": 0, "GPL-3.0": 1, "MIT": 3}
            assert (await service.find_by_id("GPL-3.0")).component_count == 1

        asyncio.run(scenario())

    def test_unknown_filter_key_rejected(self, db):
        with pytest.raises(CatalogValidationError) as exc_info:
            asyncio.run(LicenseService(db).find_all({"categroy": "permissive"}))
        assert exc_info.value.field == "categroy"

    def test_invalid_filter_value_rejected(self, db):
        with pytest.raises(CatalogValidationError) as exc_info:
            asyncio.run(LicenseService(db).find_all({"category": "mostly-fine"}))
        assert exc_info.value.field == "category"

    def test_find_by_id_missing(self, db):
        assert asyncio.run(LicenseService(db).find_by_id("Made-Up-1.0")) is None

    def test_get_missing(self, db):
        with pytest.raises(NotFoundError):
            asyncio.run(LicenseService(db).get("Made-Up-1.0"))


class TestWhitelist:
    def test_whitelist_and_withdraw(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            assert await service.set_whitelisted(["MIT", "GPL-3.0", "MIT"], True, user_id="alice") == 2
            assert [lic.id for lic in await service.find_whitelisted()] == ["GPL-3.0", "MIT"]
            assert [lic.id for lic in (await service.find_all({"whitelisted": True})).licenses] == ["GPL-3.0", "MIT"]

            assert await service.set_whitelisted(["GPL-3.0"], False) == 1
            assert [lic.id for lic in await service.find_whitelisted()] == ["MIT"]
            assert await db["audit_logs"].count_documents({"operation": "WHITELIST"}) == 2
            assert await db["audit_logs"].count_documents({"operation": "UNWHITELIST"}) == 1

        asyncio.run(scenario())

    def test_unknown_id_updates_nothing(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            with pytest.raises(NotFoundError) as exc_info:
                await service.set_whitelisted(["MIT", "Made-Up-1.0", "Other-2.0"], True)
            assert exc_info.value.name == "Made-Up-1.0, Other-2.0"
            assert await service.find_whitelisted() == []

        asyncio.run(scenario())


class TestStatistics:
    def test_counts(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            await service.set_whitelisted(["MIT"], True)
            await seed_system(db)
            await IngestionService(db).ingest(FRONTEND_REPO, [make_component("left-pad", "1.3.0", licenses=["WTFPL"])])

            stats = await service.statistics()
            assert stats.total == 5
            assert stats.by_category == {"permissive": 1, "strong_copyleft": 2, "proprietary": 1}
            assert stats.osi_approved == 2
            assert stats.deprecated == 1
            assert stats.whitelisted == 1

        asyncio.run(scenario())

    def test_empty_catalog(self, db):
        stats = asyncio.run(LicenseService(db).statistics())
        assert stats.total == 0
        assert stats.by_category == {}


class TestComponentsUsing:
    def test_ordered_by_name(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            await seed_system(db)
            await IngestionService(db).ingest(
                FRONTEND_REPO,
                [
                    make_component("react", licenses=["MIT"]),
                    make_component("lodash", "4.17.21", licenses=["MIT"]),
                    make_component("readline-sync", "1.4.10", licenses=["GPL-3.0"]),
                ],
            )

            result = await service.components_using("MIT")
            assert [c["name"] for c in result["components"]] == ["lodash", "react"]
            assert result["total"] == 2

            page = await service.components_using("MIT", skip=1, limit=1)
            assert [c["name"] for c in page["components"]] == ["react"]
            assert page["count"] == 1
            assert page["total"] == 2

        asyncio.run(scenario())

    def test_unused_license(self, db):
        async def scenario():
            service = await _seed_catalog(db)
            result = await service.components_using("Acme-EULA")
            assert result == {"components": [], "count": 0, "total": 0}

        asyncio.run(scenario())

    def test_unknown_license(self, db):
        with pytest.raises(NotFoundError):
            asyncio.run(LicenseService(db).components_using("Made-Up-1.0"))


class TestPolicyReferences:
    def test_policy_can_deny_curated_license_before_any_bom(self, db):
        async def scenario():
            await seed_licenses(db, "AGPL-3.0", name="GNU Affero GPL v3", category="network_copyleft")
            policy = await seed_license_policy(db, name="No AGPL", licenses=("AGPL-3.0",))
            assert policy.denied_licenses == ["AGPL-3.0"]

            result = await PolicyService(db).deny_license("AGPL-3.0")
            assert result["added"] is True

        asyncio.run(scenario())
