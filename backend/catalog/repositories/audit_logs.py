"""
Audit Log Repository
"""

from typing import Any, Dict, List, Optional

from catalog.models.audit_log import AuditLog
from catalog.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """Repository for audit log entries (append-only)."""

    collection_name = "audit_logs"
    model_class = AuditLog

    async def find_for_entity(
        self,
        entity_type: str,
        entity_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[AuditLog]:
        query: Dict[str, Any] = {"entity_type": entity_type}
        if entity_id:
            query["entity_id"] = entity_id
        return await self.find_many(query, limit=limit, sort_by="timestamp", sort_order=-1)
