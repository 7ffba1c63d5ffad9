#!/usr/bin/env python3
"""
Ingest a BOM file into the asset catalog.

The repository must already be registered and linked to a system. With
--system the script registers and links it first.

Usage:
    python scripts/ingest_bom.py --repository URL --file bom.json [--format cyclonedx|spdx]
                                 [--system NAME] [--user USER]
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from motor.motor_asyncio import AsyncIOMotorClient

from catalog.core.config import settings
from catalog.core.exceptions import CatalogError
from catalog.core.init_db import init_db
from catalog.services.catalog import AssetCatalog

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def ingest_file(
    repository: str,
    path: Path,
    fmt: str = None,
    system: str = None,
    user: str = None,
) -> bool:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Cannot read BOM {path}: {e}")
        return False

    client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[settings.DATABASE_NAME]
    try:
        await init_db(db)
        catalog = AssetCatalog(db)

        if system:
            await catalog.registry.register_repository(system, repository, user_id=user)

        result = await catalog.submit_bom(repository, document, fmt, user_id=user)
    except CatalogError as e:
        logger.error(f"Ingestion failed: {e}")
        return False
    finally:
        client.close()

    logger.info(
        f"System '{result.system_name}': {result.components_added} added, "
        f"{result.components_updated} updated, {result.relationships_created} new edges"
    )
    return True


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Ingest a CycloneDX or SPDX BOM")
    parser.add_argument("--repository", required=True, help="Source repository URL the BOM belongs to")
    parser.add_argument("--file", required=True, type=Path, help="Path to the BOM JSON file")
    parser.add_argument("--format", choices=["cyclonedx", "spdx"], help="BOM format (detected when omitted)")
    parser.add_argument("--system", help="Register and link the repository to this system first")
    parser.add_argument("--user", help="User id recorded in the audit log")

    args = parser.parse_args()

    success = asyncio.run(ingest_file(
        args.repository,
        args.file,
        fmt=args.format,
        system=args.system,
        user=args.user,
    ))
    sys.exit(0 if success else 1)
