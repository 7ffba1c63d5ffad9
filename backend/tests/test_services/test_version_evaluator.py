"""Tests for version constraint evaluation."""

import asyncio

import pytest

from catalog.core.exceptions import CatalogValidationError
from catalog.services.compliance.version_evaluator import VersionViolationEvaluator
from catalog.services.ingestion import IngestionService
from catalog.services.registry import RegistryService
from catalog.services.technologies import TechnologyService
from catalog.services.version_constraints import VersionConstraintService
from tests.mocks.catalog import FRONTEND_REPO, make_component, seed_system, seed_version_constraint


async def _use_react(db, *versions, technology="React"):
    """Ingest react at the given versions and map every one to ``technology``."""
    await IngestionService(db).ingest(FRONTEND_REPO, [make_component("react", version) for version in versions])
    technologies = TechnologyService(db)
    for doc in await db["components"].find({"name": "react"}).to_list(None):
        await technologies.map_component(technology, doc["_id"])


class TestEvaluate:
    def test_version_outside_range(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await _use_react(db, "17.0.0")

            report = await VersionViolationEvaluator(db).evaluate()
            assert report.count == 1
            violation = report.violations[0]
            assert violation.team == "payments"
            assert violation.system == "shop-frontend"
            assert violation.component.name == "react"
            assert violation.component.version == "17.0.0"
            assert violation.technology == "React"
            assert violation.technology_type == "framework"
            assert violation.constraint.name == "React 18"
            assert violation.constraint.version_range == ">=18.0.0 <19.0.0"
            assert report.summary["warning"] == 1

        asyncio.run(scenario())

    def test_version_inside_range(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await _use_react(db, "18.2.0")

            assert (await VersionViolationEvaluator(db).evaluate()).count == 0

        asyncio.run(scenario())

    def test_only_out_of_range_versions_reported(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await _use_react(db, "17.0.0", "18.2.0", "19.0.0")

            report = await VersionViolationEvaluator(db).evaluate()
            assert [v.component.version for v in report.violations] == ["17.0.0", "19.0.0"]

        asyncio.run(scenario())

    def test_non_semantic_version_skipped(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await _use_react(db, "latest")

            assert (await VersionViolationEvaluator(db).evaluate()).count == 0

        asyncio.run(scenario())

    def test_partial_versions_coerced(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await _use_react(db, "18.2", "v17")

            report = await VersionViolationEvaluator(db).evaluate()
            assert [v.component.version for v in report.violations] == ["v17"]

        asyncio.run(scenario())

    def test_unmapped_component_ignored(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await IngestionService(db).ingest(FRONTEND_REPO, [make_component("react", "17.0.0")])

            assert (await VersionViolationEvaluator(db).evaluate()).count == 0

        asyncio.run(scenario())

    def test_other_technology_not_governed(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await seed_version_constraint(db, name="Vue 3", technology="Vue", version_range="^3.0.0")
            await _use_react(db, "17.0.0", technology="Vue")

            report = await VersionViolationEvaluator(db).evaluate()
            assert [v.constraint.name for v in report.violations] == ["Vue 3"]

        asyncio.run(scenario())

    def test_team_scope(self, db):
        async def scenario():
            await seed_system(db)
            await RegistryService(db).create_team("platform")
            await seed_version_constraint(db, scope="team", subject_team="platform")
            await _use_react(db, "17.0.0")

            assert (await VersionViolationEvaluator(db).evaluate()).count == 0

        asyncio.run(scenario())

    def test_archived_constraint_ignored(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await _use_react(db, "17.0.0")
            await VersionConstraintService(db).update_status("React 18", "archived")

            assert (await VersionViolationEvaluator(db).evaluate()).count == 0

        asyncio.run(scenario())

    def test_malformed_stored_range_skipped(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await seed_version_constraint(db, name="React 17", version_range="^17.0.0")
            await _use_react(db, "16.14.0")
            await db["version_constraints"].update_one(
                {"name": "React 18"}, {"$set": {"version_range": ">=eighteen"}}
            )

            report = await VersionViolationEvaluator(db).evaluate()
            assert [v.constraint.name for v in report.violations] == ["React 17"]

        asyncio.run(scenario())


class TestFilters:
    def test_technology(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await _use_react(db, "17.0.0")
            evaluator = VersionViolationEvaluator(db)

            assert (await evaluator.evaluate({"technology": "React"})).count == 1
            assert (await evaluator.evaluate({"technology": "Vue"})).count == 0

        asyncio.run(scenario())

    def test_severity_team_system(self, db):
        async def scenario():
            await seed_system(db)
            await seed_version_constraint(db)
            await _use_react(db, "17.0.0")
            evaluator = VersionViolationEvaluator(db)

            assert (await evaluator.evaluate({"severity": "warning"})).count == 1
            assert (await evaluator.evaluate({"severity": "critical"})).count == 0
            assert (await evaluator.evaluate({"team": "platform"})).count == 0
            assert (await evaluator.evaluate({"system": "shop-frontend"})).count == 1

        asyncio.run(scenario())

    def test_invalid_severity(self, db):
        with pytest.raises(CatalogValidationError):
            asyncio.run(VersionViolationEvaluator(db).evaluate({"severity": "major"}))

    def test_unknown_filter_key_rejected(self, db):
        with pytest.raises(CatalogValidationError) as exc_info:
            asyncio.run(VersionViolationEvaluator(db).evaluate({"technolgy": "React"}))
        assert exc_info.value.field == "technolgy"
        assert "Unknown filter" in str(exc_info.value)
