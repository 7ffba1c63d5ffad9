"""
Violation report shapes.

Violations are computed on every request and never persisted.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from catalog.schemas.filters import StrictFilters


class LicenseViolationFilters(StrictFilters):
    severity: Optional[str] = None
    team: Optional[str] = None
    system: Optional[str] = None
    license: Optional[str] = None


class VersionViolationFilters(StrictFilters):
    severity: Optional[str] = None
    team: Optional[str] = None
    system: Optional[str] = None
    technology: Optional[str] = None


class ViolatingComponent(BaseModel):
    id: str
    name: str
    version: Optional[str] = None
    purl: Optional[str] = None


class ViolatedLicense(BaseModel):
    id: str
    name: Optional[str] = None
    category: Optional[str] = None
    osi_approved: Optional[bool] = None
    deprecated: Optional[bool] = None


class ViolatedPolicy(BaseModel):
    name: str
    description: Optional[str] = None
    severity: str
    rule_type: str
    license_mode: Optional[str] = None
    enforced_by: Optional[str] = None


class ViolatedConstraint(BaseModel):
    name: str
    description: Optional[str] = None
    severity: str
    version_range: str


class LicenseViolation(BaseModel):
    team: str
    system: str
    component: ViolatingComponent
    license: ViolatedLicense
    policy: ViolatedPolicy

    @property
    def severity(self) -> str:
        return self.policy.severity

    @property
    def sort_tail(self) -> tuple:
        return (self.license.id, self.policy.name)


class VersionViolation(BaseModel):
    team: str
    system: str
    component: ViolatingComponent
    technology: str
    technology_type: Optional[str] = None
    constraint: ViolatedConstraint

    @property
    def severity(self) -> str:
        return self.constraint.severity

    @property
    def sort_tail(self) -> tuple:
        return (self.technology, self.constraint.name)


Violation = Union[LicenseViolation, VersionViolation]


class ViolationReport(BaseModel):
    violations: List[Violation] = Field(default_factory=list)
    count: int = 0
    summary: Dict[str, int] = Field(default_factory=dict)
    by_team: Dict[str, int] = Field(default_factory=dict)
