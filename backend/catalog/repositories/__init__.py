"""
Repositories, one per MongoDB collection the catalog owns.
"""

from catalog.repositories.base import BaseRepository
from catalog.repositories.audit_logs import AuditLogRepository
from catalog.repositories.components import ComponentRepository
from catalog.repositories.licenses import LicenseRepository
from catalog.repositories.policies import PolicyRepository
from catalog.repositories.source_repositories import SourceRepositoryRepository
from catalog.repositories.systems import SystemRepository
from catalog.repositories.teams import TeamRepository
from catalog.repositories.technologies import TechnologyRepository
from catalog.repositories.usage_edges import UsageEdgeRepository
from catalog.repositories.version_constraints import VersionConstraintRepository

__all__ = [
    "BaseRepository",
    "AuditLogRepository",
    "ComponentRepository",
    "LicenseRepository",
    "PolicyRepository",
    "SourceRepositoryRepository",
    "SystemRepository",
    "TeamRepository",
    "TechnologyRepository",
    "UsageEdgeRepository",
    "VersionConstraintRepository",
]
