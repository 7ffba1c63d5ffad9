"""
Team Repository

Centralizes all database operations for teams.
"""

from typing import List

from catalog.models.team import Team
from catalog.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for team database operations."""

    collection_name = "teams"
    model_class = Team

    async def exists_by_name(self, name: str) -> bool:
        return await self.exists({"name": name})

    async def find_missing(self, names: List[str]) -> List[str]:
        """Team names from ``names`` that do not exist."""
        docs = await self.find_all_raw({"name": {"$in": names}}, {"name": 1})
        known = {doc["name"] for doc in docs}
        return [name for name in names if name not in known]
