"""
License Service

The curated license catalog. Ingestion only ever creates bare records for
the licenses a BOM mentions; category, OSI approval, deprecation and the
global whitelist are maintained here.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from catalog.core import utc_now
from catalog.core.exceptions import ConflictError, NotFoundError
from catalog.models.license import License
from catalog.repositories.components import ComponentRepository
from catalog.repositories.licenses import LicenseRepository
from catalog.schemas.filters import parse_filters
from catalog.schemas.license import (
    LicenseCreate,
    LicenseEntry,
    LicenseFilters,
    LicensePage,
    LicenseStatistics,
    LicenseUpdate,
)
from catalog.services.audit_log import AuditLogService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def _clamp_page(skip: int, limit: int):
    return max(skip, 0), min(max(limit, 1), MAX_PAGE_SIZE)


class LicenseService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.repo = LicenseRepository(db)
        self.components = ComponentRepository(db)
        self.audit = AuditLogService(db)

    async def _with_counts(self, licenses: List[License]) -> List[LicenseEntry]:
        counts = await self.components.count_by_license([lic.id for lic in licenses])
        return [
            LicenseEntry(**lic.model_dump(by_alias=True), component_count=counts.get(lic.id, 0))
            for lic in licenses
        ]

    async def find_all(
        self,
        filters: Union[LicenseFilters, Dict[str, Any], None] = None,
        skip: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> LicensePage:
        """
        List licenses matching ``filters`` (category, osi_approved, deprecated,
        whitelisted, case-insensitive ``search`` over id and name).

        Raises:
            CatalogValidationError: unknown filter key or invalid value
        """
        filters = parse_filters(LicenseFilters, filters)
        query_filters = filters.model_dump(mode="json")
        skip, limit = _clamp_page(skip, limit)

        licenses = await self.repo.find_filtered(query_filters, skip=skip, limit=limit)
        total = await self.repo.count_filtered(query_filters)
        entries = await self._with_counts(licenses)
        return LicensePage(licenses=entries, count=len(entries), total=total)

    async def find_by_id(self, license_id: str) -> Optional[LicenseEntry]:
        license_ = await self.repo.get_by_id(license_id)
        if license_ is None:
            return None
        return (await self._with_counts([license_]))[0]

    async def get(self, license_id: str) -> LicenseEntry:
        entry = await self.find_by_id(license_id)
        if entry is None:
            raise NotFoundError("License", license_id)
        return entry

    async def create(self, data: LicenseCreate, user_id: Optional[str] = None) -> License:
        if await self.repo.exists({"_id": data.id}):
            raise ConflictError("License", data.id)

        license_ = License(**data.model_dump(), created_at=utc_now())
        try:
            await self.repo.create(license_)
        except DuplicateKeyError:
            raise ConflictError("License", data.id) from None

        logger.info(f"Created license '{license_.id}'")
        await self.audit.record("CREATE", "License", license_.id, entity_label=license_.name, user_id=user_id)
        return license_

    async def update(self, license_id: str, data: LicenseUpdate, user_id: Optional[str] = None) -> License:
        """Set the curated fields present in ``data``; the license id never changes."""
        if not await self.repo.exists({"_id": license_id}):
            raise NotFoundError("License", license_id)

        update_data = data.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return await self.repo.get_by_id(license_id)

        updated = await self.repo.update_fields(license_id, update_data)
        await self.audit.record(
            "UPDATE",
            "License",
            license_id,
            entity_label=updated.name,
            changed_fields=sorted(update_data),
            user_id=user_id,
        )
        return updated

    async def set_whitelisted(
        self,
        license_ids: List[str],
        whitelisted: bool,
        user_id: Optional[str] = None,
    ) -> int:
        """
        Flag licenses as globally approved (or withdraw the flag).

        All or nothing: when any id is unknown nothing is updated.

        Raises:
            NotFoundError: one or more license ids have no record
        """
        license_ids = list(dict.fromkeys(license_ids))
        missing = await self.repo.find_missing(license_ids)
        if missing:
            raise NotFoundError("License", ", ".join(missing))

        updated = await self.repo.set_whitelisted(license_ids, whitelisted)
        logger.info(f"Set whitelisted={whitelisted} on {updated} licenses")
        for license_id in license_ids:
            await self.audit.record(
                "WHITELIST" if whitelisted else "UNWHITELIST",
                "License",
                license_id,
                changed_fields=["whitelisted"],
                user_id=user_id,
            )
        return updated

    async def find_whitelisted(self) -> List[License]:
        return await self.repo.find_all_filtered({"whitelisted": True})

    async def statistics(self) -> LicenseStatistics:
        docs = await self.repo.find_all_raw(
            projection={"category": 1, "osi_approved": 1, "deprecated": 1, "whitelisted": 1}
        )
        stats = LicenseStatistics(total=len(docs))
        for doc in docs:
            category = doc.get("category")
            if category:
                stats.by_category[category] = stats.by_category.get(category, 0) + 1
            stats.osi_approved += doc.get("osi_approved") is True
            stats.deprecated += doc.get("deprecated") is True
            stats.whitelisted += doc.get("whitelisted") is True
        return stats

    async def components_using(
        self,
        license_id: str,
        skip: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """
        Components that carry ``license_id``, ordered by name.

        Returns:
            {"components": [...], "count": int, "total": int}
        """
        if not await self.repo.exists({"_id": license_id}):
            raise NotFoundError("License", license_id)

        skip, limit = _clamp_page(skip, limit)
        components = await self.components.find_by_license_raw(license_id, skip=skip, limit=limit)
        total = await self.components.count({"license_ids": license_id})
        return {"components": components, "count": len(components), "total": total}
