"""
Component Repository

Centralizes all database operations for components. A component document is
keyed by ``identity_key`` (unique index), so an upsert on that key is the
store's atomic create-or-merge primitive.
"""

import uuid
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ReturnDocument

from catalog.core import utc_now
from catalog.db.mongodb import session_kwargs
from catalog.models.component import Component
from catalog.repositories.base import BaseRepository, Session


class ComponentRepository(BaseRepository[Component]):
    """Repository for component database operations."""

    collection_name = "components"
    model_class = Component

    async def upsert_by_identity(
        self,
        identity_key: str,
        fields: Dict[str, Any],
        session: Session = None,
    ) -> Tuple[str, Optional[Dict[str, Any]]]:
        """
        Create the component for ``identity_key`` or overwrite its metadata.

        Returns:
            (component_id, previous) where previous is the document as it
            was before the call, or None when this call created it.

        Raises:
            DuplicateKeyError: a concurrent writer inserted the same identity
                between our match and insert. The caller retries; the retry
                matches the winner's document and updates it.
        """
        now = utc_now()
        proposed_id = str(uuid.uuid4())

        previous = await self.collection.find_one_and_update(
            {"identity_key": identity_key},
            {
                "$setOnInsert": {
                    "_id": proposed_id,
                    "identity_key": identity_key,
                    "created_at": now,
                },
                "$set": {**fields, "updated_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.BEFORE,
            **session_kwargs(session),
        )
        if previous is None:
            return proposed_id, None
        return previous["_id"], previous

    async def restore(self, documents: List[Dict[str, Any]]) -> None:
        """Put back full documents captured before an overwrite."""
        for doc in documents:
            await self.collection.replace_one({"_id": doc["_id"]}, doc)

    async def delete_by_ids(self, component_ids: List[str]) -> int:
        if not component_ids:
            return 0
        result = await self.collection.delete_many({"_id": {"$in": component_ids}})
        return result.deleted_count

    async def find_by_ids_raw(
        self,
        component_ids: List[str],
        projection: Optional[Dict[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        if not component_ids:
            return []
        return await self.find_all_raw({"_id": {"$in": component_ids}}, projection)

    async def find_licensed_raw(self, component_ids: List[str]) -> List[Dict[str, Any]]:
        """Components among ``component_ids`` that carry at least one resolved license."""
        if not component_ids:
            return []
        return await self.find_all_raw(
            {"_id": {"$in": component_ids}, "license_ids": {"$exists": True, "$ne": []}},
            {"_id": 1, "name": 1, "version": 1, "purl": 1, "license_ids": 1},
        )

    async def find_unmapped_raw(self, component_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"technology": None}
        if component_ids is not None:
            query["_id"] = {"$in": component_ids}
        return await self.find_all_raw(
            query,
            {"_id": 1, "name": 1, "version": 1, "purl": 1, "package_manager": 1},
            sort_by="name",
        )

    async def set_technology(self, component_id: str, technology: Optional[str]) -> bool:
        result = await self.collection.update_one(
            {"_id": component_id},
            {"$set": {"technology": technology, "updated_at": utc_now()}},
        )
        return result.matched_count > 0

    async def find_by_license_raw(self, license_id: str, skip: int = 0, limit: int = 50) -> List[Dict[str, Any]]:
        cursor = (
            self.collection.find(
                {"license_ids": license_id},
                {"_id": 1, "name": 1, "version": 1, "purl": 1, "package_manager": 1},
            )
            .sort("name", 1)
            .skip(skip)
            .limit(limit)
        )
        return await cursor.to_list(limit)

    async def count_by_license(self, license_ids: List[str]) -> Dict[str, int]:
        """Number of components carrying each of ``license_ids``."""
        if not license_ids:
            return {}
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"license_ids": {"$in": license_ids}}},
            {"$unwind": "$license_ids"},
            {"$match": {"license_ids": {"$in": license_ids}}},
            {"$group": {"_id": "$license_ids", "count": {"$sum": 1}}},
        ]
        return {row["_id"]: row["count"] for row in await self.aggregate(pipeline)}
