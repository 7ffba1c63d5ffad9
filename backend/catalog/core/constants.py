"""
Shared Constants

Centralized constants used across the catalog to ensure consistency.
"""

from typing import Dict, List, Optional

# Severity rank for ordering violations (lower value = more severe)
SEVERITY_RANK: Dict[str, int] = {
    "critical": 1,
    "error": 2,
    "warning": 3,
    "info": 4,
}

VALID_SEVERITIES: List[str] = list(SEVERITY_RANK.keys())

# Unknown severities sort after every known one
_UNRANKED = len(SEVERITY_RANK) + 1


def get_severity_rank(severity: Optional[str]) -> int:
    """Get the sort rank for a severity. Lower = more severe."""
    if not severity:
        return _UNRANKED
    return SEVERITY_RANK.get(severity.lower(), _UNRANKED)


def empty_severity_summary() -> Dict[str, int]:
    return {severity: 0 for severity in VALID_SEVERITIES}


# Policy lifecycle
STATUS_DRAFT = "draft"
STATUS_ACTIVE = "active"
STATUS_ARCHIVED = "archived"

VALID_STATUSES: List[str] = [STATUS_DRAFT, STATUS_ACTIVE, STATUS_ARCHIVED]

# Allowed (from, to) status transitions. archived is terminal for evaluation
# but administrators may still bring a policy back.
STATUS_TRANSITIONS: Dict[str, List[str]] = {
    STATUS_DRAFT: [STATUS_ACTIVE, STATUS_ARCHIVED],
    STATUS_ACTIVE: [STATUS_DRAFT, STATUS_ARCHIVED],
    STATUS_ARCHIVED: [STATUS_DRAFT, STATUS_ACTIVE],
}

# Audit operation recorded for each target status
STATUS_AUDIT_OPERATIONS: Dict[str, str] = {
    STATUS_DRAFT: "DRAFT",
    STATUS_ACTIVE: "ACTIVATE",
    STATUS_ARCHIVED: "ARCHIVE",
}

# Policy scope
SCOPE_ORGANIZATION = "organization"
SCOPE_TEAM = "team"

VALID_SCOPES: List[str] = [SCOPE_ORGANIZATION, SCOPE_TEAM]

# Policy rule types
RULE_TYPE_LICENSE_COMPLIANCE = "license-compliance"
RULE_TYPE_VERSION_CONSTRAINT = "version-constraint"
RULE_TYPE_APPROVAL = "approval"
RULE_TYPE_COMPLIANCE = "compliance"

VALID_RULE_TYPES: List[str] = [
    RULE_TYPE_LICENSE_COMPLIANCE,
    RULE_TYPE_VERSION_CONSTRAINT,
    RULE_TYPE_APPROVAL,
    RULE_TYPE_COMPLIANCE,
]

# SPDX placeholders that carry no license information
SPDX_NO_ASSERTION_VALUES: List[str] = ["NOASSERTION", "NONE", "unspecified"]

# Audit sources
AUDIT_SOURCE_API = "API"
AUDIT_SOURCE_SBOM = "SBOM"
