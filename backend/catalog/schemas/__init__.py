"""
Schema Exports

Centralized export of the request and result models used by the services.
"""

from catalog.schemas.filters import StrictFilters, parse_filters
from catalog.schemas.ingest import IngestionResult
from catalog.schemas.license import (
    LicenseCreate,
    LicenseEntry,
    LicenseFilters,
    LicensePage,
    LicenseStatistics,
    LicenseUpdate,
)
from catalog.schemas.policy import (
    PolicyCreate,
    PolicyFilters,
    TechnologyCreate,
    VersionConstraintCreate,
    VersionConstraintFilters,
    VersionConstraintUpdate,
)
from catalog.schemas.violations import (
    LicenseViolation,
    LicenseViolationFilters,
    VersionViolation,
    VersionViolationFilters,
    ViolatedConstraint,
    ViolatedLicense,
    ViolatedPolicy,
    ViolatingComponent,
    Violation,
    ViolationReport,
)

__all__ = [
    "StrictFilters",
    "parse_filters",
    "IngestionResult",
    "LicenseCreate",
    "LicenseEntry",
    "LicenseFilters",
    "LicensePage",
    "LicenseStatistics",
    "LicenseUpdate",
    "PolicyCreate",
    "PolicyFilters",
    "TechnologyCreate",
    "VersionConstraintCreate",
    "VersionConstraintFilters",
    "VersionConstraintUpdate",
    "LicenseViolation",
    "LicenseViolationFilters",
    "VersionViolation",
    "VersionViolationFilters",
    "ViolatedConstraint",
    "ViolatedLicense",
    "ViolatedPolicy",
    "ViolatingComponent",
    "Violation",
    "ViolationReport",
]
