import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AuditLog(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str = Field(..., description="CREATE, DELETE, ACTIVATE, SBOM_IMPORT, ...")
    entity_type: str
    entity_id: str
    entity_label: Optional[str] = None
    changed_fields: List[str] = Field(default_factory=list)
    user_id: Optional[str] = None
    source: str = "API"
    details: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True
