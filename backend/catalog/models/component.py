import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


class ComponentHash(BaseModel):
    algorithm: str
    value: str


class ComponentLicense(BaseModel):
    """A license claim as written in the BOM. At least one field is set."""

    id: Optional[str] = None
    name: Optional[str] = None
    url: Optional[str] = None
    text: Optional[str] = None


class ExternalReference(BaseModel):
    type: str
    url: str


class ExtractedComponent(BaseModel):
    """
    Canonical component record produced by the BOM normalizer.

    Both supported BOM formats map onto this shape; nothing here has been
    persisted or resolved against the catalog yet.
    """

    name: str
    version: Optional[str] = None
    package_manager: Optional[str] = Field(
        None, description="Ecosystem taken from the purl scheme (npm, maven, pypi, ...)"
    )
    purl: Optional[str] = Field(None, description="Package URL (identity key when present)")
    cpe: Optional[str] = None
    bom_ref: Optional[str] = Field(None, description="Reference id inside the source BOM")
    type: Optional[str] = Field(None, description="library, application, framework, ...")
    group: Optional[str] = Field(None, description="Namespace / group id")
    scope: Optional[str] = Field(None, description="required, optional or excluded")
    hashes: List[ComponentHash] = Field(default_factory=list)
    licenses: List[ComponentLicense] = Field(default_factory=list)
    copyright: Optional[str] = None
    supplier: Optional[str] = None
    author: Optional[str] = None
    publisher: Optional[str] = None
    homepage: Optional[str] = None
    description: Optional[str] = None
    external_references: List[ExternalReference] = Field(default_factory=list)


class Component(ExtractedComponent):
    """A persisted component: one document per identity key."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    identity_key: str = Field(..., description="purl:<purl> or coord:<name>|<version>|<manager>")
    license_ids: List[str] = Field(
        default_factory=list, description="Resolved license keys (hasLicense relation)"
    )
    technology: Optional[str] = Field(
        None, description="Technology this component is a version of; None when unmapped"
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True


class UsageEdge(BaseModel):
    """System -> Component usage. Unique per (system_name, component_id)."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    system_name: str
    component_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_seen_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True
