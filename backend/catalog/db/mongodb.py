from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)
from catalog.core.config import settings
import logging

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None

db = Database()

async def get_database():
    return db.client[settings.DATABASE_NAME]

async def connect_to_mongo():
    db.client = AsyncIOMotorClient(settings.MONGODB_URL)
    logger.info("Connected to MongoDB")

async def close_mongo_connection():
    if db.client is not None:
        db.client.close()
        logger.info("Closed MongoDB connection")


def session_kwargs(session: Optional[AsyncIOMotorClientSession]) -> Dict[str, Any]:
    """Keyword arguments binding an operation to a session, if there is one."""
    return {"session": session} if session is not None else {}


@asynccontextmanager
async def unit_of_work(
    database: AsyncIOMotorDatabase,
) -> AsyncIterator[Optional[AsyncIOMotorClientSession]]:
    """
    Scope a batch of writes as one atomic unit.

    Yields a session bound to a multi-document transaction that is committed
    when the block exits cleanly and aborted when it raises. When
    transactions are disabled (standalone servers) yields None and the
    caller is responsible for undoing partial writes.
    """
    if not settings.MONGODB_USE_TRANSACTIONS:
        yield None
        return

    async with await database.client.start_session() as session:
        session.start_transaction()
        try:
            yield session
        except BaseException:
            await session.abort_transaction()
            raise
        await session.commit_transaction()
