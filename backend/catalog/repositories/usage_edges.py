"""
Usage Edge Repository

System -> Component usage edges, one document per (system, component).
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from catalog.core import utc_now
from catalog.db.mongodb import session_kwargs
from catalog.models.component import UsageEdge
from catalog.repositories.base import BaseRepository, Session


class UsageEdgeRepository(BaseRepository[UsageEdge]):
    """Repository for system -> component usage edges."""

    collection_name = "system_components"
    model_class = UsageEdge

    async def ensure_edge(
        self,
        system_name: str,
        component_id: str,
        session: Session = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Merge the edge for (system, component).

        Returns the edge's previous ``last_seen_at`` projection, or None when
        the edge was created by this call. Concurrent callers are serialized
        by the unique (system_name, component_id) index; the loser sees
        DuplicateKeyError and may retry as an update.
        """
        now = utc_now()
        return await self.collection.find_one_and_update(
            {"system_name": system_name, "component_id": component_id},
            {
                "$setOnInsert": {"_id": str(uuid.uuid4()), "created_at": now},
                "$set": {"last_seen_at": now},
            },
            upsert=True,
            projection={"_id": 1, "last_seen_at": 1},
            return_document=ReturnDocument.BEFORE,
            **session_kwargs(session),
        )

    async def restore_last_seen(self, system_name: str, last_seen: Dict[str, Optional[datetime]]) -> None:
        for component_id, seen_at in last_seen.items():
            await self.collection.update_one(
                {"system_name": system_name, "component_id": component_id},
                {"$set": {"last_seen_at": seen_at}},
            )

    async def delete_edges(self, system_name: str, component_ids: List[str]) -> int:
        if not component_ids:
            return 0
        result = await self.collection.delete_many(
            {"system_name": system_name, "component_id": {"$in": component_ids}}
        )
        return result.deleted_count

    async def find_by_systems_raw(self, system_names: List[str]) -> List[Dict[str, Any]]:
        if not system_names:
            return []
        return await self.find_all_raw(
            {"system_name": {"$in": system_names}},
            {"_id": 0, "system_name": 1, "component_id": 1},
        )
