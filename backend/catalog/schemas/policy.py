from typing import List, Optional

from pydantic import BaseModel, Field

from catalog.models.types import LicenseMode
from catalog.schemas.filters import StrictFilters


class PolicyCreate(BaseModel):
    name: str
    description: Optional[str] = None
    rule_type: str
    severity: str
    scope: str = "organization"
    subject_teams: List[str] = Field(default_factory=list)
    enforced_by: Optional[str] = None
    status: str = "active"
    license_mode: Optional[LicenseMode] = None
    allowed_licenses: List[str] = Field(default_factory=list)
    denied_licenses: List[str] = Field(default_factory=list)


class VersionConstraintCreate(BaseModel):
    name: str
    description: Optional[str] = None
    severity: str
    scope: str = "organization"
    subject_team: Optional[str] = None
    technology: str
    version_range: str
    status: str = "active"


class VersionConstraintUpdate(BaseModel):
    description: Optional[str] = None
    severity: Optional[str] = None
    scope: Optional[str] = None
    subject_team: Optional[str] = None
    version_range: Optional[str] = None


class TechnologyCreate(BaseModel):
    name: str
    category: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None


class PolicyFilters(StrictFilters):
    scope: Optional[str] = None
    status: Optional[str] = None
    enforced_by: Optional[str] = None
    rule_type: Optional[str] = None


class VersionConstraintFilters(StrictFilters):
    scope: Optional[str] = None
    status: Optional[str] = None
    technology: Optional[str] = None
