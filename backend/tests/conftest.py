"""
Shared test fixtures and configuration.

Environment variables are set BEFORE any catalog imports so the settings
singleton never points at a real database. Transactions are disabled
because the in-memory store is a standalone server.
"""

import asyncio
import os
import sys

# Ensure the backend packages are importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Override settings before any catalog code imports the settings singleton
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["DATABASE_NAME"] = "test_asset_catalog"
os.environ["MONGODB_USE_TRANSACTIONS"] = "false"

import pytest  # noqa: E402
from mongomock_motor import AsyncMongoMockClient  # noqa: E402

from catalog.core.init_db import create_indexes  # noqa: E402


@pytest.fixture
def db():
    """In-memory database with the catalog's unique indexes in place."""
    database = AsyncMongoMockClient()["test_asset_catalog"]
    asyncio.run(create_indexes(database))
    return database


@pytest.fixture
def sample_purls():
    """Common PURL strings for testing."""
    return {
        "pypi": "pkg:pypi/requests@2.31.0",
        "npm": "pkg:npm/react@18.2.0",
        "npm_scoped": "pkg:npm/%40angular/core@16.0.0",
        "maven": "pkg:maven/org.apache.commons/commons-lang3@3.12.0",
        "with_qualifiers": "pkg:pypi/requests@2.31.0?repository_url=https://pypi.org",
        "with_subpath": "pkg:npm/lodash@4.17.21#dist/lodash.min.js",
    }


@pytest.fixture
def cyclonedx_bom():
    """CycloneDX BOM with a main component and one nested component."""
    return {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "metadata": {
            "component": {
                "type": "application",
                "name": "shop-frontend",
                "version": "1.0.0",
                "bom-ref": "root",
            },
        },
        "components": [
            {
                "type": "library",
                "name": "react",
                "version": "18.2.0",
                "purl": "pkg:npm/react@18.2.0",
                "bom-ref": "react-ref",
                "licenses": [{"license": {"id": "MIT"}}],
                "hashes": [{"alg": "SHA-256", "content": "abc123"}],
                "components": [
                    {
                        "type": "library",
                        "name": "loose-envify",
                        "version": "1.4.0",
                        "purl": "pkg:npm/loose-envify@1.4.0",
                        "licenses": [{"license": {"id": "MIT"}}],
                    }
                ],
            },
            {
                "type": "library",
                "name": "readline-sync",
                "version": "1.4.10",
                "purl": "pkg:npm/readline-sync@1.4.10",
                "licenses": [{"license": {"id": "GPL-3.0"}}],
            },
        ],
    }


@pytest.fixture
def spdx_bom():
    """SPDX document describing the same third-party packages."""
    return {
        "spdxVersion": "SPDX-2.3",
        "SPDXID": "SPDXRef-DOCUMENT",
        "name": "shop-frontend",
        "packages": [
            {
                "SPDXID": "SPDXRef-Package-react",
                "name": "react",
                "versionInfo": "18.2.0",
                "primaryPackagePurpose": "LIBRARY",
                "supplier": "Organization: Meta",
                "externalRefs": [
                    {
                        "referenceCategory": "PACKAGE-MANAGER",
                        "referenceType": "purl",
                        "referenceLocator": "pkg:npm/react@18.2.0",
                    }
                ],
                "licenseConcluded": "MIT",
                "licenseDeclared": "MIT",
            },
            {
                "SPDXID": "SPDXRef-Package-readline-sync",
                "name": "readline-sync",
                "versionInfo": "1.4.10",
                "externalRefs": [
                    {
                        "referenceCategory": "PACKAGE-MANAGER",
                        "referenceType": "purl",
                        "referenceLocator": "pkg:npm/readline-sync@1.4.10",
                    }
                ],
                "licenseConcluded": "GPL-3.0",
                "licenseDeclared": "NOASSERTION",
            },
        ],
    }
