"""
License Repository

Canonical license records keyed by license id (``_id``).
"""

import re
from typing import Any, Dict, List, Optional, Set

from catalog.core import utc_now
from catalog.db.mongodb import session_kwargs
from catalog.models.license import License
from catalog.repositories.base import BaseRepository, Session


def build_license_query(filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Mongo query for the license catalog filters (category, osi_approved, deprecated, whitelisted, search)."""
    filters = filters or {}
    query: Dict[str, Any] = {}
    if filters.get("category"):
        query["category"] = filters["category"]
    for flag in ("osi_approved", "deprecated", "whitelisted"):
        if filters.get(flag) is not None:
            # Records created by ingestion carry no flags; absent means False
            query[flag] = True if filters[flag] else {"$ne": True}
    if filters.get("search"):
        pattern = {"$regex": re.escape(filters["search"]), "$options": "i"}
        query["$or"] = [{"_id": pattern}, {"name": pattern}]
    return query


class LicenseRepository(BaseRepository[License]):
    """Repository for license database operations."""

    collection_name = "licenses"
    model_class = License

    async def ensure_license(
        self,
        license_id: str,
        name: Optional[str] = None,
        url: Optional[str] = None,
        session: Session = None,
    ) -> bool:
        """
        Create the license record if missing. Curated fields are never overwritten.

        Returns True when this call created the record.
        """
        result = await self.collection.update_one(
            {"_id": license_id},
            {"$setOnInsert": {"name": name or license_id, "url": url, "created_at": utc_now()}},
            upsert=True,
            **session_kwargs(session),
        )
        return result.upserted_id is not None

    async def get_by_id(self, license_id: str) -> Optional[License]:
        return await self.find_one({"_id": license_id})

    async def find_filtered(
        self,
        filters: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[License]:
        return await self.find_many(build_license_query(filters), skip=skip, limit=limit, sort_by="_id")

    async def find_all_filtered(self, filters: Optional[Dict[str, Any]] = None) -> List[License]:
        return self._to_model_list(await self.find_all_raw(build_license_query(filters), sort_by="_id"))

    async def count_filtered(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return await self.count(build_license_query(filters))

    async def update_fields(self, license_id: str, update_data: Dict[str, Any]) -> Optional[License]:
        await self.collection.update_one(
            {"_id": license_id},
            {"$set": {**update_data, "updated_at": utc_now()}},
        )
        return await self.get_by_id(license_id)

    async def set_whitelisted(self, license_ids: List[str], whitelisted: bool) -> int:
        result = await self.collection.update_many(
            {"_id": {"$in": license_ids}},
            {"$set": {"whitelisted": whitelisted, "updated_at": utc_now()}},
        )
        return result.matched_count

    async def find_by_ids_raw(self, license_ids: List[str]) -> List[Dict[str, Any]]:
        if not license_ids:
            return []
        return await self.find_all_raw({"_id": {"$in": list(license_ids)}})

    async def find_missing(self, license_ids: List[str]) -> List[str]:
        """License ids from ``license_ids`` that have no record."""
        known: Set[str] = {doc["_id"] for doc in await self.find_by_ids_raw(license_ids)}
        return [license_id for license_id in license_ids if license_id not in known]

    async def delete_by_ids(self, license_ids: List[str]) -> int:
        if not license_ids:
            return 0
        result = await self.collection.delete_many({"_id": {"$in": license_ids}})
        return result.deleted_count
