"""
License Violation Evaluator

Joins team -> owned system -> used component -> license against the active
license-compliance policies each team is subject to.

A policy's ``license_mode`` decides how its list is read, at evaluation
time:

- allowlist: a license not in ``allowed_licenses`` is a violation
- denylist: a license in ``denied_licenses`` is a violation; any license
  the list does not name (including ones added to the catalog later) is
  allowed
"""

import logging
from typing import Any, Dict, Optional, Union

from motor.motor_asyncio import AsyncIOMotorDatabase

from catalog.core.constants import VALID_SEVERITIES
from catalog.models.policy import Policy
from catalog.models.types import LicenseMode
from catalog.repositories.components import ComponentRepository
from catalog.repositories.licenses import LicenseRepository
from catalog.repositories.policies import PolicyRepository
from catalog.repositories.systems import SystemRepository
from catalog.repositories.usage_edges import UsageEdgeRepository
from catalog.schemas.filters import parse_filters
from catalog.schemas.violations import (
    LicenseViolation,
    LicenseViolationFilters,
    ViolatedLicense,
    ViolatedPolicy,
    ViolatingComponent,
    ViolationReport,
)
from catalog.services.compliance.scope import applies_to_team, group_components_by_system
from catalog.services.compliance.summary import build_report
from catalog.services.policies import validate_choice

logger = logging.getLogger(__name__)


def _breaches_allowlist(policy: Policy, license_id: str) -> bool:
    return license_id not in policy.allowed_licenses


def _breaches_denylist(policy: Policy, license_id: str) -> bool:
    return license_id in policy.denied_licenses


_MODE_CHECKS = {
    LicenseMode.ALLOWLIST: _breaches_allowlist,
    LicenseMode.DENYLIST: _breaches_denylist,
}


def license_breaches_policy(policy: Policy, license_id: str) -> bool:
    # Policies written before modes existed carry an allow-set only
    mode = LicenseMode(policy.license_mode) if policy.license_mode else LicenseMode.ALLOWLIST
    return _MODE_CHECKS[mode](policy, license_id)


class LicenseViolationEvaluator:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.policies = PolicyRepository(db)
        self.systems = SystemRepository(db)
        self.usage_edges = UsageEdgeRepository(db)
        self.components = ComponentRepository(db)
        self.licenses = LicenseRepository(db)

    async def evaluate(
        self,
        filters: Union[LicenseViolationFilters, Dict[str, Any], None] = None,
    ) -> ViolationReport:
        """
        Compute license violations. Filters (severity, team, system, license)
        are conjunctive; an empty result is a valid report.

        Raises:
            CatalogValidationError: unknown filter key or severity
        """
        filters = parse_filters(LicenseViolationFilters, filters)
        validate_choice(filters.severity, VALID_SEVERITIES, "severity")

        policies = await self.policies.find_active_license_policies()
        if filters.severity:
            policies = [p for p in policies if p.severity == filters.severity]
        if not policies:
            return build_report([])

        systems = await self.systems.find_owned_raw(team=filters.team, system=filters.system)
        edges = await self.usage_edges.find_by_systems_raw([s["name"] for s in systems])
        components_by_system = group_components_by_system(edges)

        component_ids = list({edge["component_id"] for edge in edges})
        components = {c["_id"]: c for c in await self.components.find_licensed_raw(component_ids)}

        license_ids = {lid for c in components.values() for lid in c.get("license_ids", [])}
        licenses = {doc["_id"]: doc for doc in await self.licenses.find_by_ids_raw(list(license_ids))}

        violations: Dict[tuple, LicenseViolation] = {}
        for system in systems:
            team = system["owner_team"]
            applicable = [p for p in policies if applies_to_team(p.scope, team, p.subject_teams)]
            if not applicable:
                continue

            for component_id in components_by_system.get(system["name"], []):
                component = components.get(component_id)
                if component is None:
                    continue

                for license_id in component.get("license_ids", []):
                    if filters.license and license_id != filters.license:
                        continue
                    for policy in applicable:
                        if not license_breaches_policy(policy, license_id):
                            continue
                        key = (team, system["name"], component_id, license_id, policy.name)
                        if key not in violations:
                            violations[key] = self._to_violation(
                                team, system["name"], component, licenses.get(license_id), license_id, policy
                            )

        logger.debug(f"License evaluation produced {len(violations)} violations")
        return build_report(list(violations.values()))

    @staticmethod
    def _to_violation(
        team: str,
        system_name: str,
        component: Dict[str, Any],
        license_doc: Optional[Dict[str, Any]],
        license_id: str,
        policy: Policy,
    ) -> LicenseViolation:
        license_doc = license_doc or {}
        return LicenseViolation(
            team=team,
            system=system_name,
            component=ViolatingComponent(
                id=component["_id"],
                name=component["name"],
                version=component.get("version"),
                purl=component.get("purl"),
            ),
            license=ViolatedLicense(
                id=license_id,
                name=license_doc.get("name"),
                category=license_doc.get("category"),
                osi_approved=license_doc.get("osi_approved"),
                deprecated=license_doc.get("deprecated"),
            ),
            policy=ViolatedPolicy(
                name=policy.name,
                description=policy.description,
                severity=policy.severity,
                rule_type=policy.rule_type,
                license_mode=policy.license_mode,
                enforced_by=policy.enforced_by,
            ),
        )
