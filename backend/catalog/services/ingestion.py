"""
Ingestion Service

Merges normalized BOM components into the catalog for the system that owns
the submitting repository:

1. Preconditions (no writes yet): the repository URL must be registered and
   linked to exactly one system.
2. The batch is collapsed to one row per identity key (later rows win).
3. Inside one unit of work, every identity is upserted on the unique
   ``identity_key`` index, its license claims are resolved to License
   records, and the system -> component usage edge is merged.
4. The repository's last scan time is stamped and an ``SBOM_IMPORT`` audit
   entry is recorded.

A store failure during step 3 aborts the batch and surfaces as
IngestionError; counts are only reported for committed batches. With
transactions the batch is aborted by the server. Without them (standalone
servers) the service keeps a BatchUndoLog and compensates the writes the
batch already made: created components, edges and licenses are deleted,
overwritten components and edge timestamps are restored.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from catalog.core.config import settings
from catalog.core.constants import AUDIT_SOURCE_SBOM
from catalog.core.exceptions import (
    IngestionError,
    RepositoryNotLinkedError,
    RepositoryNotRegisteredError,
)
from catalog.core.urls import normalize_repo_url
from catalog.db.mongodb import unit_of_work
from catalog.models.component import ExtractedComponent
from catalog.models.system import System
from catalog.models.types import BOMFormat
from catalog.repositories.base import Session
from catalog.repositories.components import ComponentRepository
from catalog.repositories.licenses import LicenseRepository
from catalog.repositories.source_repositories import SourceRepositoryRepository
from catalog.repositories.systems import SystemRepository
from catalog.repositories.usage_edges import UsageEdgeRepository
from catalog.schemas.ingest import IngestionResult
from catalog.services.audit_log import AuditLogService
from catalog.services.bom_normalizer import normalize_bom
from catalog.services.identity import collapse_by_identity, license_key, license_keys

logger = logging.getLogger(__name__)

TRANSIENT_TRANSACTION_ERROR = "TransientTransactionError"


class IngestionService:
    """
    Usage:
        service = IngestionService(db)
        result = await service.process_bom(repo_url, bom_document, user_id="alice")
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.source_repositories = SourceRepositoryRepository(db)
        self.systems = SystemRepository(db)
        self.components = ComponentRepository(db)
        self.licenses = LicenseRepository(db)
        self.usage_edges = UsageEdgeRepository(db)
        self.audit = AuditLogService(db)

    async def resolve_target_system(self, repository_url: str) -> Tuple[str, System]:
        """
        Check the ingestion preconditions for a repository.

        Returns:
            (normalized_url, system)

        Raises:
            RepositoryNotRegisteredError: the URL was never registered
            RepositoryNotLinkedError: zero or several systems link the URL
        """
        normalized_url = normalize_repo_url(repository_url)

        repository = await self.source_repositories.find_by_url(normalized_url)
        if repository is None:
            logger.warning(f"Rejected BOM for unregistered repository {normalized_url}")
            raise RepositoryNotRegisteredError(normalized_url)

        systems = await self.systems.find_all_by_repository_url(normalized_url)
        if len(systems) != 1:
            logger.warning(
                f"Rejected BOM for {normalized_url}: linked to {len(systems)} systems"
            )
            raise RepositoryNotLinkedError(normalized_url, len(systems))

        return normalized_url, systems[0]

    async def process_bom(
        self,
        repository_url: str,
        document: Any,
        fmt: Union[BOMFormat, str, None] = None,
        user_id: Optional[str] = None,
    ) -> IngestionResult:
        """Normalize a raw BOM document (format detected when omitted) and ingest it."""
        components = normalize_bom(document, fmt)
        return await self.ingest(repository_url, components, user_id=user_id)

    async def ingest(
        self,
        repository_url: str,
        components: Iterable[ExtractedComponent],
        user_id: Optional[str] = None,
    ) -> IngestionResult:
        normalized_url, system = await self.resolve_target_system(repository_url)

        components = list(components)
        batch = collapse_by_identity(components)
        logger.info(
            f"Ingesting {len(batch)} distinct components ({len(components)} rows) "
            f"into system '{system.name}' from {normalized_url}"
        )

        retries = settings.INGEST_UPSERT_RETRIES
        attempt = 0
        while True:
            attempt += 1
            try:
                result = await self._merge_batch(system.name, normalized_url, batch)
                break
            except PyMongoError as e:
                if e.has_error_label(TRANSIENT_TRANSACTION_ERROR) and attempt <= retries:
                    logger.info(f"Retrying ingestion for '{system.name}' after transient error: {e}")
                    continue
                logger.error(f"Ingestion into system '{system.name}' failed: {e}")
                raise IngestionError(
                    f"Failed to merge BOM components into system '{system.name}': {e}",
                    system_name=system.name,
                ) from e

        logger.info(
            f"Ingested into '{system.name}': {result.components_added} added, "
            f"{result.components_updated} updated, {result.relationships_created} new edges"
        )

        await self.audit.record(
            "SBOM_IMPORT",
            "System",
            system.name,
            entity_label=system.name,
            changed_fields=["components"],
            user_id=user_id,
            source=AUDIT_SOURCE_SBOM,
            details={
                "repository_url": normalized_url,
                "components_added": result.components_added,
                "components_updated": result.components_updated,
                "relationships_created": result.relationships_created,
            },
        )
        return result

    async def _merge_batch(
        self,
        system_name: str,
        repository_url: str,
        batch: Dict[str, ExtractedComponent],
    ) -> IngestionResult:
        result = IngestionResult(system_name=system_name, repository_url=repository_url)

        async with unit_of_work(self.db) as session:
            # Without a transaction every write stands alone, so record what
            # this batch changed and take it back if the batch fails.
            undo = BatchUndoLog(system_name) if session is None else None
            try:
                for identity_key, component in batch.items():
                    component_id, created = await self._merge_component(identity_key, component, session, undo)
                    if created:
                        result.components_added += 1
                    else:
                        result.components_updated += 1

                    if await self._merge_edge(system_name, component_id, session, undo):
                        result.relationships_created += 1

                await self.source_repositories.update_last_scan(repository_url, session=session)
            except PyMongoError:
                if undo is not None:
                    await self._roll_back(undo)
                raise

        return result

    async def _merge_component(
        self,
        identity_key: str,
        component: ExtractedComponent,
        session: Session,
        undo: Optional["BatchUndoLog"] = None,
    ) -> Tuple[str, bool]:
        fields = component.model_dump()
        fields["license_ids"] = license_keys(component)

        for claim in component.licenses:
            key = license_key(claim)
            if key:
                created = await self.licenses.ensure_license(key, name=claim.name, url=claim.url, session=session)
                if created and undo is not None:
                    undo.created_licenses.append(key)

        attempt = 0
        while True:
            attempt += 1
            try:
                component_id, previous = await self.components.upsert_by_identity(
                    identity_key, fields, session=session
                )
                break
            except DuplicateKeyError:
                # Inside a transaction the error has already aborted it, so it
                # fails the batch.
                if session is not None or attempt > settings.INGEST_UPSERT_RETRIES:
                    raise
                logger.debug(f"Lost insert race for {identity_key}, retrying as update")

        if undo is not None:
            undo.record_component(component_id, previous)
        return component_id, previous is None

    async def _merge_edge(
        self,
        system_name: str,
        component_id: str,
        session: Session,
        undo: Optional["BatchUndoLog"] = None,
    ) -> bool:
        try:
            previous = await self.usage_edges.ensure_edge(system_name, component_id, session=session)
        except DuplicateKeyError:
            if session is not None:
                raise
            # A concurrent batch created the same edge first
            return False

        if undo is not None:
            undo.record_edge(component_id, previous)
        return previous is None

    async def _roll_back(self, undo: "BatchUndoLog") -> None:
        """Compensate the writes of a failed batch that ran without a transaction."""
        logger.warning(
            f"Rolling back failed batch for '{undo.system_name}': "
            f"{len(undo.created_components)} created and {len(undo.previous_components)} "
            f"updated components, {len(undo.created_edges)} new edges"
        )
        try:
            await self.usage_edges.delete_edges(undo.system_name, undo.created_edges)
            await self.usage_edges.restore_last_seen(undo.system_name, undo.previous_last_seen)
            await self.components.delete_by_ids(undo.created_components)
            await self.components.restore(undo.previous_components)
            await self.licenses.delete_by_ids(undo.created_licenses)
        except PyMongoError as e:
            logger.error(f"Rollback of failed batch for '{undo.system_name}' incomplete: {e}")


@dataclass
class BatchUndoLog:
    """What a non-transactional batch wrote, in enough detail to take it back."""

    system_name: str
    created_components: List[str] = field(default_factory=list)
    previous_components: List[Dict[str, Any]] = field(default_factory=list)
    created_edges: List[str] = field(default_factory=list)
    previous_last_seen: Dict[str, Optional[datetime]] = field(default_factory=dict)
    created_licenses: List[str] = field(default_factory=list)

    def record_component(self, component_id: str, previous: Optional[Dict[str, Any]]) -> None:
        if previous is None:
            self.created_components.append(component_id)
        else:
            self.previous_components.append(previous)

    def record_edge(self, component_id: str, previous: Optional[Dict[str, Any]]) -> None:
        if previous is None:
            self.created_edges.append(component_id)
        else:
            self.previous_last_seen[component_id] = previous.get("last_seen_at")
