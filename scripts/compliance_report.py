#!/usr/bin/env python3
"""
Print a license or version violation report as JSON.

Usage:
    python scripts/compliance_report.py [--kind license|version] [--severity S]
                                        [--team T] [--system S] [--license L] [--technology T]
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
from catalog.services.catalog import AssetCatalog

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def report(kind: str, filters: dict) -> bool:
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[settings.DATABASE_NAME]
    catalog = AssetCatalog(db)
    try:
        if kind == "license":
            result = await catalog.evaluate_license_violations(filters)
        else:
            result = await catalog.evaluate_version_violations(filters)
    except CatalogError as e:
        logger.error(f"Report failed: {e}")
        return False
    finally:
        client.close()

    logger.info(f"{result.count} {kind} violations: {result.summary}")
    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return True


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Evaluate compliance violations")
    parser.add_argument("--kind", choices=["license", "version"], default="license")
    parser.add_argument("--severity", choices=["critical", "error", "warning", "info"])
    parser.add_argument("--team")
    parser.add_argument("--system")
    parser.add_argument("--license", help="License id (license reports only)")
    parser.add_argument("--technology", help="Technology name (version reports only)")

    args = parser.parse_args()

    filters = {"severity": args.severity, "team": args.team, "system": args.system}
    if args.kind == "license":
        filters["license"] = args.license
    else:
        filters["technology"] = args.technology

    success = asyncio.run(report(args.kind, filters))
    sys.exit(0 if success else 1)
