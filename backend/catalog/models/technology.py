import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class Technology(BaseModel):
    """A curated package family (e.g. "React") that components are versions of."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    name: str
    category: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True
