from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from catalog.models.license import License, LicenseCategory
from catalog.schemas.filters import StrictFilters


class LicenseCreate(BaseModel):
    id: str = Field(..., description="SPDX identifier where one exists")
    name: Optional[str] = None
    url: Optional[str] = None
    text: Optional[str] = None
    category: Optional[LicenseCategory] = None
    osi_approved: Optional[bool] = None
    deprecated: bool = False


class LicenseUpdate(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    text: Optional[str] = None
    category: Optional[LicenseCategory] = None
    osi_approved: Optional[bool] = None
    deprecated: Optional[bool] = None


class LicenseFilters(StrictFilters):
    category: Optional[LicenseCategory] = None
    osi_approved: Optional[bool] = None
    deprecated: Optional[bool] = None
    whitelisted: Optional[bool] = None
    search: Optional[str] = None


class LicenseEntry(License):
    component_count: int = 0


class LicensePage(BaseModel):
    licenses: List[LicenseEntry] = Field(default_factory=list)
    count: int = 0
    total: int = 0


class LicenseStatistics(BaseModel):
    total: int = 0
    by_category: Dict[str, int] = Field(default_factory=dict)
    osi_approved: int = 0
    deprecated: int = 0
    whitelisted: int = 0
