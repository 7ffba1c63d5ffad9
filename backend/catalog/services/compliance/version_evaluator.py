"""
Version Constraint Evaluator

Joins team -> owned system -> used component -> technology against the
active version constraints governing that technology. A candidate is a
violation only when the constraint has a range, the component has a
version, and that version coerces to a semantic version outside the range.
Versions that do not coerce (``"latest"``) are neither violations nor
passes.
"""

import logging
from typing import Any, Dict, List, Tuple, Union

from motor.motor_asyncio import AsyncIOMotorDatabase

from catalog.core.constants import VALID_SEVERITIES
from catalog.core.exceptions import InvalidVersionRangeError
from catalog.core.semver_range import VersionRange, coerce_version, parse_range
from catalog.models.policy import VersionConstraint
from catalog.repositories.components import ComponentRepository
from catalog.repositories.systems import SystemRepository
from catalog.repositories.technologies import TechnologyRepository
from catalog.repositories.usage_edges import UsageEdgeRepository
from catalog.repositories.version_constraints import VersionConstraintRepository
from catalog.schemas.filters import parse_filters
from catalog.schemas.violations import (
    VersionViolation,
    VersionViolationFilters,
    ViolatedConstraint,
    ViolatingComponent,
    ViolationReport,
)
from catalog.services.compliance.scope import applies_to_team, group_components_by_system
from catalog.services.compliance.summary import build_report
from catalog.services.policies import validate_choice

logger = logging.getLogger(__name__)


class VersionViolationEvaluator:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.constraints = VersionConstraintRepository(db)
        self.systems = SystemRepository(db)
        self.usage_edges = UsageEdgeRepository(db)
        self.components = ComponentRepository(db)
        self.technologies = TechnologyRepository(db)

    def _parsed_constraints(self, constraints: List[VersionConstraint]) -> List[Tuple[VersionConstraint, VersionRange]]:
        parsed = []
        for constraint in constraints:
            if not constraint.version_range or not constraint.version_range.strip():
                continue
            try:
                parsed.append((constraint, parse_range(constraint.version_range)))
            except InvalidVersionRangeError as e:
                logger.warning(f"Skipping version constraint '{constraint.name}': {e}")
        return parsed

    async def evaluate(
        self,
        filters: Union[VersionViolationFilters, Dict[str, Any], None] = None,
    ) -> ViolationReport:
        """
        Compute version violations. Filters (severity, team, system,
        technology) are conjunctive.

        Raises:
            CatalogValidationError: unknown filter key or severity
        """
        filters = parse_filters(VersionViolationFilters, filters)
        validate_choice(filters.severity, VALID_SEVERITIES, "severity")

        constraints = await self.constraints.find_active(technology=filters.technology)
        if filters.severity:
            constraints = [c for c in constraints if c.severity == filters.severity]
        constraints = self._parsed_constraints(constraints)
        if not constraints:
            return build_report([])

        systems = await self.systems.find_owned_raw(team=filters.team, system=filters.system)
        edges = await self.usage_edges.find_by_systems_raw([s["name"] for s in systems])
        components_by_system = group_components_by_system(edges)

        governed = {constraint.technology for constraint, _ in constraints}
        component_docs = await self.components.find_by_ids_raw(
            list({edge["component_id"] for edge in edges}),
            {"_id": 1, "name": 1, "version": 1, "purl": 1, "technology": 1},
        )
        components = {c["_id"]: c for c in component_docs if c.get("technology") in governed}

        technology_types = {
            t.name: t.type for t in await self.technologies.find_all() if t.name in governed
        }

        violations: Dict[tuple, VersionViolation] = {}
        skipped = 0
        for system in systems:
            team = system["owner_team"]
            applicable = [
                (c, r)
                for c, r in constraints
                if applies_to_team(c.scope, team, [c.subject_team] if c.subject_team else [])
            ]
            if not applicable:
                continue

            for component_id in components_by_system.get(system["name"], []):
                component = components.get(component_id)
                if component is None or not component.get("version"):
                    continue

                version = coerce_version(component["version"])
                if version is None:
                    skipped += 1
                    continue

                for constraint, version_range in applicable:
                    if constraint.technology != component["technology"]:
                        continue
                    if version_range.satisfied_by(version):
                        continue
                    key = (team, system["name"], component_id, constraint.name)
                    violations.setdefault(
                        key,
                        self._to_violation(
                            team,
                            system["name"],
                            component,
                            technology_types.get(constraint.technology),
                            constraint,
                        ),
                    )

        if skipped:
            logger.debug(f"Skipped {skipped} component versions that are not semantic versions")
        return build_report(list(violations.values()))

    @staticmethod
    def _to_violation(
        team: str,
        system_name: str,
        component: Dict[str, Any],
        technology_type: Any,
        constraint: VersionConstraint,
    ) -> VersionViolation:
        return VersionViolation(
            team=team,
            system=system_name,
            component=ViolatingComponent(
                id=component["_id"],
                name=component["name"],
                version=component.get("version"),
                purl=component.get("purl"),
            ),
            technology=constraint.technology,
            technology_type=technology_type,
            constraint=ViolatedConstraint(
                name=constraint.name,
                description=constraint.description,
                severity=constraint.severity,
                version_range=constraint.version_range,
            ),
        )
