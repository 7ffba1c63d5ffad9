"""
Technology Repository
"""

from typing import List

from catalog.models.technology import Technology
from catalog.repositories.base import BaseRepository


class TechnologyRepository(BaseRepository[Technology]):
    """Repository for technology database operations."""

    collection_name = "technologies"
    model_class = Technology

    async def exists_by_name(self, name: str) -> bool:
        return await self.exists({"name": name})

    async def find_all(self) -> List[Technology]:
        return self._to_model_list(await self.find_all_raw(sort_by="name"))
