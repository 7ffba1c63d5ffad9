"""
Technology Service

Curated technologies and the is-version-of mapping from components.
"""

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from catalog.core.exceptions import ConflictError, NotFoundError
from catalog.models.technology import Technology
from catalog.repositories.components import ComponentRepository
from catalog.repositories.technologies import TechnologyRepository
from catalog.repositories.usage_edges import UsageEdgeRepository
from catalog.schemas.policy import TechnologyCreate
from catalog.services.audit_log import AuditLogService

logger = logging.getLogger(__name__)


class TechnologyService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.repo = TechnologyRepository(db)
        self.components = ComponentRepository(db)
        self.usage_edges = UsageEdgeRepository(db)
        self.audit = AuditLogService(db)

    async def find_all(self) -> List[Technology]:
        return await self.repo.find_all()

    async def create(self, data: TechnologyCreate, user_id: Optional[str] = None) -> Technology:
        if await self.repo.exists_by_name(data.name):
            raise ConflictError("Technology", data.name)

        technology = Technology(**data.model_dump())
        try:
            await self.repo.create(technology)
        except DuplicateKeyError:
            raise ConflictError("Technology", data.name) from None

        await self.audit.record(
            "CREATE", "Technology", technology.id, entity_label=technology.name, user_id=user_id
        )
        return technology

    async def map_component(self, technology: str, component_id: str, user_id: Optional[str] = None) -> None:
        """Record that a component is a version of ``technology``."""
        if not await self.repo.exists_by_name(technology):
            raise NotFoundError("Technology", technology)
        if not await self.components.set_technology(component_id, technology):
            raise NotFoundError("Component", component_id)

        logger.info(f"Mapped component {component_id} to technology '{technology}'")
        await self.audit.record(
            "MAP_COMPONENT",
            "Component",
            component_id,
            changed_fields=["technology"],
            user_id=user_id,
            details={"technology": technology},
        )

    async def unmap_component(self, component_id: str, user_id: Optional[str] = None) -> None:
        if not await self.components.set_technology(component_id, None):
            raise NotFoundError("Component", component_id)
        await self.audit.record(
            "UNMAP_COMPONENT", "Component", component_id, changed_fields=["technology"], user_id=user_id
        )

    async def find_unmapped_components(self, system: Optional[str] = None) -> List[Dict[str, Any]]:
        """Components with no technology, optionally only those a system uses."""
        component_ids = None
        if system:
            edges = await self.usage_edges.find_by_systems_raw([system])
            component_ids = [edge["component_id"] for edge in edges]
        return await self.components.find_unmapped_raw(component_ids)
