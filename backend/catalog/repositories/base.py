"""
Base Repository Pattern

Provides a generic, type-safe base class for all repositories.
Write methods accept an optional session so callers can group them into a
unit of work (see ``catalog.db.mongodb.unit_of_work``).
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from motor.motor_asyncio import (
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pydantic import BaseModel

from catalog.db.mongodb import session_kwargs

# Type variable for the model class
T = TypeVar("T", bound=BaseModel)

Session = Optional[AsyncIOMotorClientSession]


class BaseRepository(Generic[T]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        T: The Pydantic model class this repository manages

    Usage:
        class TeamRepository(BaseRepository[Team]):
            collection_name = "teams"
            model_class = Team
    """

    # Subclasses must define these
    collection_name: str
    model_class: Type[T]

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection: AsyncIOMotorCollection = db[self.collection_name]

    def _to_model(self, data: Optional[Dict[str, Any]]) -> Optional[T]:
        """Convert a raw document to a model instance."""
        if data is None:
            return None
        return self.model_class(**data)

    def _to_model_list(self, docs: List[Dict[str, Any]]) -> List[T]:
        """Convert a list of raw documents to model instances."""
        return [self.model_class(**doc) for doc in docs]

    async def find_one(
        self,
        query: Dict[str, Any],
        projection: Optional[Dict[str, int]] = None,
        session: Session = None,
    ) -> Optional[T]:
        """Find one document matching query and return as model instance."""
        data = await self.collection.find_one(query, projection, **session_kwargs(session))
        return self._to_model(data)

    async def find_many(
        self,
        query: Dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort_by: Optional[str] = None,
        sort_order: int = 1,
        projection: Optional[Dict[str, int]] = None,
    ) -> List[T]:
        """Find multiple documents and return as model instances."""
        cursor = self.collection.find(query, projection)
        if sort_by:
            cursor = cursor.sort(sort_by, sort_order)
        cursor = cursor.skip(skip).limit(limit)
        docs = await cursor.to_list(limit)
        return self._to_model_list(docs)

    async def find_all_raw(
        self,
        query: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, int]] = None,
        sort_by: Optional[str] = None,
        sort_order: int = 1,
    ) -> List[Dict[str, Any]]:
        """Find every raw document matching query (no pagination)."""
        cursor = self.collection.find(query or {}, projection)
        if sort_by:
            cursor = cursor.sort(sort_by, sort_order)
        return await cursor.to_list(None)

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching query."""
        return await self.collection.count_documents(query or {})

    async def aggregate(self, pipeline: List[Dict[str, Any]], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Run an aggregation pipeline."""
        return await self.collection.aggregate(pipeline).to_list(limit)

    async def exists(self, query: Dict[str, Any]) -> bool:
        """Check if a document matching the query exists."""
        return await self.collection.find_one(query, {"_id": 1}) is not None

    async def create(self, model: T, session: Session = None) -> T:
        """Create a new document from a model instance."""
        await self.collection.insert_one(model.model_dump(by_alias=True), **session_kwargs(session))
        return model
