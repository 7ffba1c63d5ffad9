"""
Shared enumerations for catalog documents.

String-valued so they round-trip through MongoDB documents unchanged.
"""

from enum import Enum


class Severity(str, Enum):
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class PolicyStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class PolicyScope(str, Enum):
    ORGANIZATION = "organization"
    TEAM = "team"


class LicenseMode(str, Enum):
    """How a license-compliance policy reads its license list."""

    ALLOWLIST = "allowlist"  # only the listed licenses are permitted
    DENYLIST = "denylist"  # every license except the listed ones is permitted


class BOMFormat(str, Enum):
    CYCLONEDX = "cyclonedx"  # component-tree documents
    SPDX = "spdx"  # package-list documents
