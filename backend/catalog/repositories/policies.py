"""
Policy Repository

Centralizes all database operations for governance policies.
"""

from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from catalog.core import utc_now
from catalog.core.constants import RULE_TYPE_LICENSE_COMPLIANCE, STATUS_ACTIVE
from catalog.models.policy import Policy
from catalog.repositories.base import BaseRepository

# Filter keys accepted by find_all, mapped to document fields
_POLICY_FILTER_FIELDS = {
    "scope": "scope",
    "status": "status",
    "enforced_by": "enforced_by",
    "rule_type": "rule_type",
}


class PolicyRepository(BaseRepository[Policy]):
    """Repository for policy database operations."""

    collection_name = "policies"
    model_class = Policy

    async def get_by_name(self, name: str) -> Optional[Policy]:
        return await self.find_one({"name": name})

    async def exists_by_name(self, name: str) -> bool:
        return await self.exists({"name": name})

    async def find_all(self, filters: Optional[Dict[str, Any]] = None) -> List[Policy]:
        query: Dict[str, Any] = {}
        for key, value in (filters or {}).items():
            if value is not None and key in _POLICY_FILTER_FIELDS:
                query[_POLICY_FILTER_FIELDS[key]] = value
        return self._to_model_list(await self.find_all_raw(query, sort_by="name"))

    async def find_active_license_policies(self) -> List[Policy]:
        """Policies the license evaluator reads: active license-compliance rules only."""
        docs = await self.find_all_raw(
            {"rule_type": RULE_TYPE_LICENSE_COMPLIANCE, "status": STATUS_ACTIVE},
            sort_by="name",
        )
        return self._to_model_list(docs)

    async def set_status(self, name: str, status: str) -> Optional[Policy]:
        doc = await self.collection.find_one_and_update(
            {"name": name},
            {"$set": {"status": status, "updated_at": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)

    async def add_denied_license(self, name: str, license_id: str) -> bool:
        """Returns True when the license was not already denied."""
        result = await self.collection.update_one(
            {"name": name, "denied_licenses": {"$ne": license_id}},
            {"$addToSet": {"denied_licenses": license_id}, "$set": {"updated_at": utc_now()}},
        )
        return result.modified_count > 0

    async def remove_denied_license(self, name: str, license_id: str) -> bool:
        """Returns True when the license was denied before the call."""
        result = await self.collection.update_one(
            {"name": name, "denied_licenses": license_id},
            {"$pull": {"denied_licenses": license_id}, "$set": {"updated_at": utc_now()}},
        )
        return result.modified_count > 0

    async def delete_by_name(self, name: str) -> bool:
        result = await self.collection.delete_one({"name": name})
        return result.deleted_count > 0
