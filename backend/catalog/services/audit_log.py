"""
Audit log sink.

Recording is fire-and-forget for callers: a failed write is logged and
never propagates into the operation being audited.
"""

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from catalog.core.constants import AUDIT_SOURCE_API
from catalog.models.audit_log import AuditLog
from catalog.repositories.audit_logs import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditLogService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.repo = AuditLogRepository(db)

    async def record(
        self,
        operation: str,
        entity_type: str,
        entity_id: str,
        entity_label: Optional[str] = None,
        changed_fields: Optional[List[str]] = None,
        user_id: Optional[str] = None,
        source: str = AUDIT_SOURCE_API,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLog]:
        entry = AuditLog(
            operation=operation,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_label=entity_label,
            changed_fields=changed_fields or [],
            user_id=user_id,
            source=source,
            details=details or {},
        )
        try:
            await self.repo.create(entry)
        except PyMongoError as e:
            logger.warning(f"Failed to write audit log {operation} for {entity_type} {entity_id}: {e}")
            return None
        return entry
