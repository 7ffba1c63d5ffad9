"""
Registry Service

Teams, systems and the source repositories linked to them. BOM ingestion
requires a repository to be registered here and linked to one system first.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from catalog.core.exceptions import ConflictError, NotFoundError
from catalog.core.urls import normalize_repo_url
from catalog.models.system import SourceRepository, System
from catalog.models.team import Team
from catalog.repositories.source_repositories import SourceRepositoryRepository
from catalog.repositories.systems import SystemRepository
from catalog.repositories.teams import TeamRepository
from catalog.services.audit_log import AuditLogService

logger = logging.getLogger(__name__)


class RegistryService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.teams = TeamRepository(db)
        self.systems = SystemRepository(db)
        self.source_repositories = SourceRepositoryRepository(db)
        self.audit = AuditLogService(db)

    async def create_team(
        self,
        name: str,
        description: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Team:
        if await self.teams.exists_by_name(name):
            raise ConflictError("Team", name)
        team = Team(name=name, description=description)
        try:
            await self.teams.create(team)
        except DuplicateKeyError:
            raise ConflictError("Team", name) from None
        await self.audit.record("CREATE", "Team", team.id, entity_label=name, user_id=user_id)
        return team

    async def create_system(
        self,
        name: str,
        owner_team: Optional[str] = None,
        description: Optional[str] = None,
        business_criticality: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> System:
        if owner_team and not await self.teams.exists_by_name(owner_team):
            raise NotFoundError("Team", owner_team)
        if await self.systems.exists({"name": name}):
            raise ConflictError("System", name)

        system = System(
            name=name,
            owner_team=owner_team,
            description=description,
            business_criticality=business_criticality,
        )
        try:
            await self.systems.create(system)
        except DuplicateKeyError:
            raise ConflictError("System", name) from None
        await self.audit.record("CREATE", "System", system.id, entity_label=name, user_id=user_id)
        return system

    async def register_repository(
        self,
        system_name: str,
        url: str,
        name: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> SourceRepository:
        """Register ``url`` (normalized) and link it to ``system_name``."""
        system = await self.systems.get_by_name(system_name)
        if system is None:
            raise NotFoundError("System", system_name)

        normalized_url = normalize_repo_url(url)
        repository = await self.source_repositories.register(normalized_url, name=name)
        await self.systems.link_repository(system_name, normalized_url)

        logger.info(f"Linked repository {normalized_url} to system '{system_name}'")
        await self.audit.record(
            "LINK_REPOSITORY",
            "System",
            system.id,
            entity_label=system_name,
            changed_fields=["repositories"],
            user_id=user_id,
            details={"repository_url": normalized_url},
        )
        return repository
