import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from catalog.models.types import LicenseMode, PolicyScope, PolicyStatus, Severity


class Policy(BaseModel):
    """
    Governance rule.

    License-compliance policies carry a ``license_mode`` and the list that
    mode reads: ``allowed_licenses`` for an allowlist, ``denied_licenses``
    for a denylist.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    name: str
    description: Optional[str] = None
    rule_type: str
    severity: Severity
    scope: PolicyScope = PolicyScope.ORGANIZATION
    subject_teams: List[str] = Field(
        default_factory=list, description="Teams subject to a team-scoped policy"
    )
    enforced_by: Optional[str] = Field(None, description="Team that owns the policy")
    status: PolicyStatus = PolicyStatus.ACTIVE
    license_mode: Optional[LicenseMode] = None
    allowed_licenses: List[str] = Field(default_factory=list)
    denied_licenses: List[str] = Field(default_factory=list)
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True
        use_enum_values = True


class VersionConstraint(BaseModel):
    """Semantic version range that in-use versions of one technology must satisfy."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    name: str
    description: Optional[str] = None
    severity: Severity
    scope: PolicyScope = PolicyScope.ORGANIZATION
    subject_team: Optional[str] = None
    technology: str
    version_range: str
    status: PolicyStatus = PolicyStatus.ACTIVE
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True
        use_enum_values = True
