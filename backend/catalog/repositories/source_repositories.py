"""
Source Repository Registry

Registered source repositories, keyed by normalized URL.
"""

import uuid
from typing import Optional

from catalog.core import utc_now
from catalog.core.urls import detect_scm_type, extract_repo_name, normalize_repo_url
from catalog.db.mongodb import session_kwargs
from catalog.models.system import SourceRepository
from catalog.repositories.base import BaseRepository, Session


class SourceRepositoryRepository(BaseRepository[SourceRepository]):
    """Repository for source repository database operations."""

    collection_name = "source_repositories"
    model_class = SourceRepository

    async def find_by_url(self, url: str) -> Optional[SourceRepository]:
        """Look up by URL. The URL is normalized before matching."""
        return await self.find_one({"url": normalize_repo_url(url)})

    async def register(self, url: str, name: Optional[str] = None) -> SourceRepository:
        """Register a repository (idempotent on the normalized URL)."""
        normalized = normalize_repo_url(url)
        await self.collection.update_one(
            {"url": normalized},
            {
                "$setOnInsert": {
                    "_id": str(uuid.uuid4()),
                    "name": name or extract_repo_name(normalized),
                    "scm_type": detect_scm_type(normalized),
                    "last_sbom_scan_at": None,
                    "created_at": utc_now(),
                }
            },
            upsert=True,
        )
        return await self.find_one({"url": normalized})

    async def update_last_scan(self, url: str, session: Session = None) -> None:
        await self.collection.update_one(
            {"url": normalize_repo_url(url)},
            {"$set": {"last_sbom_scan_at": utc_now()}},
            **session_kwargs(session),
        )
