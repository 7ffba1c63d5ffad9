"""
Policy Service

Governance writes and reads for policies:
- creation with severity/scope/status validation and license list checks
- the shared status state machine (see ``catalog.core.constants``)
- the organization license policy, a denylist that ``deny_license`` and
  ``allow_license`` edit one license at a time
"""

import logging
from typing import Any, Dict, List, Optional, Union

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from catalog.core.config import settings
from catalog.core.constants import (
    RULE_TYPE_LICENSE_COMPLIANCE,
    SCOPE_ORGANIZATION,
    SCOPE_TEAM,
    STATUS_ACTIVE,
    STATUS_AUDIT_OPERATIONS,
    STATUS_TRANSITIONS,
    VALID_RULE_TYPES,
    VALID_SCOPES,
    VALID_SEVERITIES,
    VALID_STATUSES,
)
from catalog.core.exceptions import CatalogValidationError, ConflictError, NotFoundError
from catalog.models.policy import Policy
from catalog.models.types import LicenseMode
from catalog.repositories.licenses import LicenseRepository
from catalog.repositories.policies import PolicyRepository
from catalog.repositories.teams import TeamRepository
from catalog.schemas.filters import parse_filters
from catalog.schemas.policy import PolicyCreate, PolicyFilters
from catalog.services.audit_log import AuditLogService

logger = logging.getLogger(__name__)


def validate_choice(value: Optional[str], valid: List[str], field: str) -> None:
    """Raise CatalogValidationError unless ``value`` is None or one of ``valid``."""
    if value is not None and value not in valid:
        raise CatalogValidationError(
            f"Invalid {field} '{value}'. Must be one of: {', '.join(valid)}",
            field=field,
        )


def check_transition(entity_type: str, name: str, current: str, target: str) -> None:
    validate_choice(target, VALID_STATUSES, "status")
    if current == target:
        raise CatalogValidationError(f"{entity_type} '{name}' is already {target}", field="status")
    if target not in STATUS_TRANSITIONS.get(current, []):
        raise CatalogValidationError(
            f"Cannot change {entity_type} '{name}' from {current} to {target}",
            field="status",
        )


class PolicyService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.repo = PolicyRepository(db)
        self.licenses = LicenseRepository(db)
        self.teams = TeamRepository(db)
        self.audit = AuditLogService(db)

    async def find_all(self, filters: Union[PolicyFilters, Dict[str, Any], None] = None) -> List[Policy]:
        filters = parse_filters(PolicyFilters, filters)
        validate_choice(filters.scope, VALID_SCOPES, "scope")
        validate_choice(filters.status, VALID_STATUSES, "status")
        validate_choice(filters.rule_type, VALID_RULE_TYPES, "rule_type")
        return await self.repo.find_all(filters.model_dump(exclude_none=True))

    async def find_by_name(self, name: str) -> Optional[Policy]:
        return await self.repo.get_by_name(name)

    async def get(self, name: str) -> Policy:
        policy = await self.repo.get_by_name(name)
        if policy is None:
            raise NotFoundError("Policy", name)
        return policy

    async def create(self, data: PolicyCreate, user_id: Optional[str] = None) -> Policy:
        validate_choice(data.severity, VALID_SEVERITIES, "severity")
        validate_choice(data.status, VALID_STATUSES, "status")
        validate_choice(data.scope, VALID_SCOPES, "scope")
        validate_choice(data.rule_type, VALID_RULE_TYPES, "rule_type")

        if data.scope == SCOPE_TEAM and not data.subject_teams:
            raise CatalogValidationError("Team-scoped policies require subject_teams", field="subject_teams")

        referenced_teams = list(data.subject_teams) if data.scope == SCOPE_TEAM else []
        if data.enforced_by:
            referenced_teams.append(data.enforced_by)
        missing_teams = await self.teams.find_missing(referenced_teams)
        if missing_teams:
            raise NotFoundError("Team", missing_teams[0])

        if data.rule_type == RULE_TYPE_LICENSE_COMPLIANCE:
            await self._validate_license_lists(data)
        else:
            for field in ("license_mode", "allowed_licenses", "denied_licenses"):
                if getattr(data, field):
                    raise CatalogValidationError(
                        f"{field} only applies to {RULE_TYPE_LICENSE_COMPLIANCE} policies", field=field
                    )

        if await self.repo.exists_by_name(data.name):
            raise ConflictError("Policy", data.name)

        policy = Policy(
            name=data.name,
            description=data.description,
            rule_type=data.rule_type,
            severity=data.severity,
            scope=data.scope,
            subject_teams=data.subject_teams if data.scope == SCOPE_TEAM else [],
            enforced_by=data.enforced_by,
            status=data.status,
            license_mode=data.license_mode,
            allowed_licenses=data.allowed_licenses,
            denied_licenses=data.denied_licenses,
            created_by=user_id,
        )
        try:
            await self.repo.create(policy)
        except DuplicateKeyError:
            raise ConflictError("Policy", data.name) from None

        logger.info(f"Created policy '{policy.name}' ({policy.rule_type}, {policy.status})")
        await self.audit.record(
            "CREATE",
            "Policy",
            policy.id,
            entity_label=policy.name,
            changed_fields=list(data.model_dump(exclude_defaults=True).keys()),
            user_id=user_id,
        )
        return policy

    async def _validate_license_lists(self, data: PolicyCreate) -> None:
        if data.license_mode is None:
            raise CatalogValidationError(
                "License-compliance policies require a license_mode (allowlist or denylist)",
                field="license_mode",
            )

        if data.license_mode == LicenseMode.ALLOWLIST:
            field, licenses, other = "allowed_licenses", data.allowed_licenses, data.denied_licenses
        else:
            field, licenses, other = "denied_licenses", data.denied_licenses, data.allowed_licenses

        if not licenses:
            raise CatalogValidationError(
                f"A {data.license_mode.value} policy requires at least one entry in {field}",
                field=field,
            )
        if other:
            raise CatalogValidationError(
                f"A {data.license_mode.value} policy only reads {field}", field=field
            )

        missing = await self.licenses.find_missing(licenses)
        if missing:
            raise CatalogValidationError(f"Unknown license ids: {', '.join(missing)}", field=field)

    async def update_status(
        self,
        name: str,
        status: str,
        reason: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Move a policy through its lifecycle.

        Returns:
            {"policy": Policy, "previous_status": str}
        """
        policy = await self.get(name)
        previous_status = policy.status
        check_transition("Policy", name, previous_status, status)

        updated = await self.repo.set_status(name, status)
        logger.info(f"Policy '{name}' status {previous_status} -> {status}")

        await self.audit.record(
            STATUS_AUDIT_OPERATIONS[status],
            "Policy",
            policy.id,
            entity_label=name,
            changed_fields=["status"],
            user_id=user_id,
            details={"previous_status": previous_status, "status": status, "reason": reason},
        )
        return {"policy": updated, "previous_status": previous_status}

    async def delete(self, name: str, user_id: Optional[str] = None) -> None:
        policy = await self.get(name)
        await self.repo.delete_by_name(name)
        logger.info(f"Deleted policy '{name}'")
        await self.audit.record("DELETE", "Policy", policy.id, entity_label=name, user_id=user_id)

    # Organization license policy

    async def get_or_create_org_license_policy(self, user_id: Optional[str] = None) -> Policy:
        """The organization-wide denylist policy, created empty on first use."""
        name = settings.ORG_LICENSE_POLICY_NAME
        policy = await self.repo.get_by_name(name)
        if policy is not None:
            return policy

        policy = Policy(
            name=name,
            description="Licenses denied across the organization",
            rule_type=RULE_TYPE_LICENSE_COMPLIANCE,
            severity="error",
            scope=SCOPE_ORGANIZATION,
            status=STATUS_ACTIVE,
            license_mode=LicenseMode.DENYLIST,
            created_by=user_id,
        )
        try:
            await self.repo.create(policy)
        except DuplicateKeyError:
            # Created concurrently
            return await self.repo.get_by_name(name)

        logger.info(f"Created organization license policy '{name}'")
        await self.audit.record("CREATE", "Policy", policy.id, entity_label=name, user_id=user_id)
        return policy

    async def get_denied_license_ids(self) -> List[str]:
        policy = await self.repo.get_by_name(settings.ORG_LICENSE_POLICY_NAME)
        return sorted(policy.denied_licenses) if policy else []

    async def deny_license(self, license_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Add a license to the organization denylist.

        Returns:
            {"added": bool, "policy": Policy}; added is False when the license
            was already denied.
        """
        if not await self.licenses.exists({"_id": license_id}):
            raise NotFoundError("License", license_id)

        policy = await self.get_or_create_org_license_policy(user_id)
        added = await self.repo.add_denied_license(policy.name, license_id)
        if added:
            await self.audit.record(
                "DENY_LICENSE",
                "Policy",
                policy.id,
                entity_label=policy.name,
                changed_fields=["denied_licenses"],
                user_id=user_id,
                details={"license_id": license_id},
            )
        return {"added": added, "policy": await self.repo.get_by_name(policy.name)}

    async def allow_license(self, license_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Remove a license from the organization denylist.

        Returns:
            {"removed": bool, "policy": Policy}
        """
        policy = await self.get_or_create_org_license_policy(user_id)
        removed = await self.repo.remove_denied_license(policy.name, license_id)
        if removed:
            await self.audit.record(
                "ALLOW_LICENSE",
                "Policy",
                policy.id,
                entity_label=policy.name,
                changed_fields=["denied_licenses"],
                user_id=user_id,
                details={"license_id": license_id},
            )
        return {"removed": removed, "policy": await self.repo.get_by_name(policy.name)}
