import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


class System(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    name: str
    description: Optional[str] = None
    owner_team: Optional[str] = Field(None, description="Name of the owning team")
    business_criticality: Optional[str] = None
    repositories: List[str] = Field(
        default_factory=list, description="Normalized URLs of linked source repositories"
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True


class SourceRepository(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    url: str = Field(..., description="Normalized repository URL")
    name: Optional[str] = None
    scm_type: str = "git"
    last_sbom_scan_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True
