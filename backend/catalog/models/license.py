"""
License Models

Canonical license records referenced by components and license policies.
Ingestion creates a bare record for every license a BOM mentions; the
curated fields (category, OSI approval, deprecation, whitelist) are
maintained through the license catalog.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LicenseCategory(str, Enum):
    """License categories based on restrictions."""

    PERMISSIVE = "permissive"
    WEAK_COPYLEFT = "weak_copyleft"
    STRONG_COPYLEFT = "strong_copyleft"
    NETWORK_COPYLEFT = "network_copyleft"
    PUBLIC_DOMAIN = "public_domain"
    PROPRIETARY = "proprietary"
    UNKNOWN = "unknown"


class License(BaseModel):
    # The license key doubles as the document id: SPDX id where available,
    # otherwise the free-text license name from the BOM.
    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    url: Optional[str] = None
    text: Optional[str] = None
    category: Optional[LicenseCategory] = None
    osi_approved: Optional[bool] = None
    deprecated: bool = False
    whitelisted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        use_enum_values = True
