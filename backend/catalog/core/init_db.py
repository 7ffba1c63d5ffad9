import logging

import pymongo

from catalog.core.config import settings
from catalog.db.mongodb import get_database

logger = logging.getLogger(__name__)


async def create_indexes(db):
    """Creates the indexes the catalog's identity and edge invariants rely on."""
    logger.info("Creating database indexes...")

    # Components: one document per identity key
    await db["components"].create_index("identity_key", unique=True)
    await db["components"].create_index("purl")
    await db["components"].create_index(
        [("name", pymongo.ASCENDING), ("version", pymongo.ASCENDING)]
    )
    await db["components"].create_index("technology")
    await db["components"].create_index("license_ids")

    # Usage edges: never more than one per (system, component)
    await db["system_components"].create_index(
        [("system_name", pymongo.ASCENDING), ("component_id", pymongo.ASCENDING)],
        unique=True,
    )
    await db["system_components"].create_index("component_id")

    # Registry
    await db["teams"].create_index("name", unique=True)
    await db["systems"].create_index("name", unique=True)
    await db["systems"].create_index("repositories")
    await db["systems"].create_index("owner_team")
    await db["source_repositories"].create_index("url", unique=True)

    # Catalog vocabulary
    await db["technologies"].create_index("name", unique=True)
    await db["licenses"].create_index("category")
    await db["licenses"].create_index("whitelisted")

    # Governance
    await db["policies"].create_index("name", unique=True)
    await db["policies"].create_index(
        [("rule_type", pymongo.ASCENDING), ("status", pymongo.ASCENDING)]
    )
    await db["version_constraints"].create_index("name", unique=True)
    await db["version_constraints"].create_index(
        [("technology", pymongo.ASCENDING), ("status", pymongo.ASCENDING)]
    )

    # Audit log
    await db["audit_logs"].create_index([("timestamp", pymongo.DESCENDING)])
    await db["audit_logs"].create_index(
        [("entity_type", pymongo.ASCENDING), ("entity_id", pymongo.ASCENDING)]
    )

    logger.info("Database indexes created successfully.")


async def init_db(db=None):
    if db is None:
        db = await get_database()

    await create_indexes(db)
    logger.info(f"Database '{settings.DATABASE_NAME}' initialized")
