"""
System Repository

Centralizes all database operations for systems and their repository links.
"""

from typing import Any, Dict, List, Optional

from catalog.core import utc_now
from catalog.models.system import System
from catalog.repositories.base import BaseRepository


class SystemRepository(BaseRepository[System]):
    """Repository for system database operations."""

    collection_name = "systems"
    model_class = System

    async def get_by_name(self, name: str) -> Optional[System]:
        return await self.find_one({"name": name})

    async def find_all_by_repository_url(self, url: str) -> List[System]:
        """Every system linking the (normalized) repository URL."""
        docs = await self.find_all_raw({"repositories": url}, sort_by="name")
        return self._to_model_list(docs)

    async def find_by_repository_url(self, url: str) -> Optional[System]:
        """The system linking ``url`` when exactly one does."""
        systems = await self.find_all_by_repository_url(url)
        return systems[0] if len(systems) == 1 else None

    async def find_owned_raw(
        self,
        team: Optional[str] = None,
        system: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Systems that have an owning team, optionally narrowed by team/system name."""
        query: Dict[str, Any] = {"owner_team": {"$ne": None}}
        if team:
            query["owner_team"] = team
        if system:
            query["name"] = system
        return await self.find_all_raw(query, {"_id": 0, "name": 1, "owner_team": 1}, sort_by="name")

    async def link_repository(self, system_name: str, url: str) -> bool:
        result = await self.collection.update_one(
            {"name": system_name},
            {"$addToSet": {"repositories": url}, "$set": {"updated_at": utc_now()}},
        )
        return result.matched_count > 0
