"""
Version Constraint Service

Governance writes and reads for version constraints. Ranges are parsed on
write so the evaluator never meets a malformed expression it could only
skip.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from catalog.core.constants import (
    SCOPE_TEAM,
    STATUS_AUDIT_OPERATIONS,
    VALID_SCOPES,
    VALID_SEVERITIES,
    VALID_STATUSES,
)
from catalog.core.exceptions import (
    CatalogValidationError,
    ConflictError,
    InvalidVersionRangeError,
    NotFoundError,
)
from catalog.core.semver_range import parse_range
from catalog.models.policy import VersionConstraint
from catalog.repositories.teams import TeamRepository
from catalog.repositories.technologies import TechnologyRepository
from catalog.repositories.version_constraints import VersionConstraintRepository
from catalog.schemas.filters import parse_filters
from catalog.schemas.policy import VersionConstraintCreate, VersionConstraintFilters, VersionConstraintUpdate
from catalog.services.audit_log import AuditLogService
from catalog.services.policies import check_transition, validate_choice

logger = logging.getLogger(__name__)


def validate_version_range(version_range: Optional[str]) -> str:
    if version_range is None or not version_range.strip():
        raise InvalidVersionRangeError(version_range or "", "range is required")
    parse_range(version_range.strip())
    return version_range.strip()


class VersionConstraintService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.repo = VersionConstraintRepository(db)
        self.technologies = TechnologyRepository(db)
        self.teams = TeamRepository(db)
        self.audit = AuditLogService(db)

    async def find_all(
        self, filters: Union[VersionConstraintFilters, Dict[str, Any], None] = None
    ) -> List[VersionConstraint]:
        filters = parse_filters(VersionConstraintFilters, filters)
        validate_choice(filters.scope, VALID_SCOPES, "scope")
        validate_choice(filters.status, VALID_STATUSES, "status")
        return await self.repo.find_all(filters.model_dump(exclude_none=True))

    async def find_by_name(self, name: str) -> Optional[VersionConstraint]:
        return await self.repo.get_by_name(name)

    async def get(self, name: str) -> VersionConstraint:
        constraint = await self.repo.get_by_name(name)
        if constraint is None:
            raise NotFoundError("Version constraint", name)
        return constraint

    async def _validate_scope(self, scope: str, subject_team: Optional[str]) -> None:
        validate_choice(scope, VALID_SCOPES, "scope")
        if scope == SCOPE_TEAM:
            if not subject_team:
                raise CatalogValidationError(
                    "Team-scoped constraints require a subject_team", field="subject_team"
                )
            if not await self.teams.exists_by_name(subject_team):
                raise NotFoundError("Team", subject_team)

    async def create(self, data: VersionConstraintCreate, user_id: Optional[str] = None) -> VersionConstraint:
        validate_choice(data.severity, VALID_SEVERITIES, "severity")
        validate_choice(data.status, VALID_STATUSES, "status")
        await self._validate_scope(data.scope, data.subject_team)
        version_range = validate_version_range(data.version_range)

        if not await self.technologies.exists_by_name(data.technology):
            raise NotFoundError("Technology", data.technology)
        if await self.repo.exists_by_name(data.name):
            raise ConflictError("Version constraint", data.name)

        constraint = VersionConstraint(
            name=data.name,
            description=data.description,
            severity=data.severity,
            scope=data.scope,
            subject_team=data.subject_team if data.scope == SCOPE_TEAM else None,
            technology=data.technology,
            version_range=version_range,
            status=data.status,
            created_by=user_id,
        )
        try:
            await self.repo.create(constraint)
        except DuplicateKeyError:
            raise ConflictError("Version constraint", data.name) from None

        logger.info(f"Created version constraint '{constraint.name}' on {constraint.technology}")
        await self.audit.record(
            "CREATE",
            "VersionConstraint",
            constraint.id,
            entity_label=constraint.name,
            changed_fields=list(data.model_dump(exclude_defaults=True).keys()),
            user_id=user_id,
        )
        return constraint

    async def update(
        self,
        name: str,
        data: VersionConstraintUpdate,
        user_id: Optional[str] = None,
    ) -> VersionConstraint:
        constraint = await self.get(name)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return constraint

        if "severity" in changes:
            validate_choice(changes["severity"], VALID_SEVERITIES, "severity")
        if "version_range" in changes:
            changes["version_range"] = validate_version_range(changes["version_range"])
        if "scope" in changes or "subject_team" in changes:
            scope = changes.get("scope", constraint.scope)
            subject_team = changes.get("subject_team", constraint.subject_team)
            await self._validate_scope(scope, subject_team)
            if scope != SCOPE_TEAM:
                changes["subject_team"] = None

        updated = await self.repo.update_by_name(name, changes)
        logger.info(f"Updated version constraint '{name}': {', '.join(changes)}")
        await self.audit.record(
            "UPDATE",
            "VersionConstraint",
            constraint.id,
            entity_label=name,
            changed_fields=list(changes.keys()),
            user_id=user_id,
        )
        return updated

    async def update_status(
        self,
        name: str,
        status: str,
        reason: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Returns {"constraint": VersionConstraint, "previous_status": str}."""
        constraint = await self.get(name)
        previous_status = constraint.status
        check_transition("Version constraint", name, previous_status, status)

        updated = await self.repo.update_by_name(name, {"status": status})
        logger.info(f"Version constraint '{name}' status {previous_status} -> {status}")
        await self.audit.record(
            STATUS_AUDIT_OPERATIONS[status],
            "VersionConstraint",
            constraint.id,
            entity_label=name,
            changed_fields=["status"],
            user_id=user_id,
            details={"previous_status": previous_status, "status": status, "reason": reason},
        )
        return {"constraint": updated, "previous_status": previous_status}

    async def delete(self, name: str, user_id: Optional[str] = None) -> None:
        constraint = await self.get(name)
        await self.repo.delete_by_name(name)
        logger.info(f"Deleted version constraint '{name}'")
        await self.audit.record(
            "DELETE", "VersionConstraint", constraint.id, entity_label=name, user_id=user_id
        )
