"""
Version Constraint Repository
"""

from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from catalog.core import utc_now
from catalog.core.constants import STATUS_ACTIVE
from catalog.models.policy import VersionConstraint
from catalog.repositories.base import BaseRepository


class VersionConstraintRepository(BaseRepository[VersionConstraint]):
    """Repository for version constraint database operations."""

    collection_name = "version_constraints"
    model_class = VersionConstraint

    async def get_by_name(self, name: str) -> Optional[VersionConstraint]:
        return await self.find_one({"name": name})

    async def exists_by_name(self, name: str) -> bool:
        return await self.exists({"name": name})

    async def find_all(self, filters: Optional[Dict[str, Any]] = None) -> List[VersionConstraint]:
        query: Dict[str, Any] = {}
        for key in ("scope", "status", "technology"):
            value = (filters or {}).get(key)
            if value is not None:
                query[key] = value
        return self._to_model_list(await self.find_all_raw(query, sort_by="name"))

    async def find_active(self, technology: Optional[str] = None) -> List[VersionConstraint]:
        query: Dict[str, Any] = {"status": STATUS_ACTIVE}
        if technology:
            query["technology"] = technology
        return self._to_model_list(await self.find_all_raw(query, sort_by="name"))

    async def update_by_name(self, name: str, update_data: Dict[str, Any]) -> Optional[VersionConstraint]:
        doc = await self.collection.find_one_and_update(
            {"name": name},
            {"$set": {**update_data, "updated_at": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)

    async def delete_by_name(self, name: str) -> bool:
        result = await self.collection.delete_one({"name": name})
        return result.deleted_count > 0
