"""
AssetCatalog - the operations the catalog exposes to an outer layer.

Usage:
    catalog = AssetCatalog(db)
    components = catalog.normalize_bom(document, "cyclonedx")
    result = await catalog.ingest(repository_url, components, user_id="ci-bot")
    report = await catalog.evaluate_license_violations({"severity": "critical"})
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from motor.motor_asyncio import AsyncIOMotorDatabase

from catalog.models.component import ExtractedComponent
from catalog.models.types import BOMFormat
from catalog.schemas.ingest import IngestionResult
from catalog.schemas.violations import (
    LicenseViolationFilters,
    VersionViolationFilters,
    ViolationReport,
)
from catalog.services.bom_normalizer import normalize_bom
from catalog.services.compliance.license_evaluator import LicenseViolationEvaluator
from catalog.services.compliance.version_evaluator import VersionViolationEvaluator
from catalog.services.ingestion import IngestionService
from catalog.services.licenses import LicenseService
from catalog.services.policies import PolicyService
from catalog.services.registry import RegistryService
from catalog.services.technologies import TechnologyService
from catalog.services.version_constraints import VersionConstraintService


class AssetCatalog:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.ingestion = IngestionService(db)
        self.license_evaluator = LicenseViolationEvaluator(db)
        self.version_evaluator = VersionViolationEvaluator(db)
        self.licenses = LicenseService(db)
        self.policies = PolicyService(db)
        self.version_constraints = VersionConstraintService(db)
        self.technologies = TechnologyService(db)
        self.registry = RegistryService(db)

    def normalize_bom(
        self,
        document: Any,
        fmt: Union[BOMFormat, str, None] = None,
    ) -> List[ExtractedComponent]:
        return normalize_bom(document, fmt)

    async def ingest(
        self,
        repository_url: str,
        components: Iterable[ExtractedComponent],
        user_id: Optional[str] = None,
    ) -> IngestionResult:
        return await self.ingestion.ingest(repository_url, components, user_id=user_id)

    async def submit_bom(
        self,
        repository_url: str,
        document: Any,
        fmt: Union[BOMFormat, str, None] = None,
        user_id: Optional[str] = None,
    ) -> IngestionResult:
        return await self.ingestion.process_bom(repository_url, document, fmt, user_id=user_id)

    async def evaluate_license_violations(
        self,
        filters: Union[LicenseViolationFilters, Dict[str, Any], None] = None,
    ) -> ViolationReport:
        return await self.license_evaluator.evaluate(filters)

    async def evaluate_version_violations(
        self,
        filters: Union[VersionViolationFilters, Dict[str, Any], None] = None,
    ) -> ViolationReport:
        return await self.version_evaluator.evaluate(filters)
