"""Factory functions for seeding catalog state in tests."""

from catalog.models.component import ComponentLicense, ExtractedComponent
from catalog.schemas.license import LicenseCreate
from catalog.schemas.policy import PolicyCreate, TechnologyCreate, VersionConstraintCreate
from catalog.services.licenses import LicenseService
from catalog.services.policies import PolicyService
from catalog.services.registry import RegistryService
from catalog.services.technologies import TechnologyService
from catalog.services.version_constraints import VersionConstraintService

FRONTEND_REPO = "https://github.com/acme/shop-frontend"


def make_component(name="react", version="18.2.0", purl="", package_manager="npm", licenses=(), **kwargs):
    """Create an ExtractedComponent with sensible defaults for testing.

    The purl defaults to ``pkg:npm/<name>@<version>``; pass None for a
    component identified by its coordinates only.
    """
    if purl == "":
        purl = f"pkg:npm/{name}@{version}" if version else None
    return ExtractedComponent(
        name=name,
        version=version,
        purl=purl,
        package_manager=package_manager,
        licenses=[ComponentLicense(id=lic) for lic in licenses],
        **kwargs,
    )


async def seed_system(db, team="payments", system="shop-frontend", url=FRONTEND_REPO):
    """Create a team owning a system linked to one registered repository."""
    registry = RegistryService(db)
    if not await registry.teams.exists_by_name(team):
        await registry.create_team(team)
    await registry.create_system(system, owner_team=team)
    await registry.register_repository(system, url)
    return registry


async def seed_license_policy(
    db,
    name="No GPL",
    mode="denylist",
    licenses=("GPL-3.0",),
    severity="critical",
    **kwargs,
):
    """Create a license-compliance policy. License records must exist first."""
    field = "denied_licenses" if mode == "denylist" else "allowed_licenses"
    data = PolicyCreate(
        name=name,
        rule_type="license-compliance",
        severity=severity,
        license_mode=mode,
        **{field: list(licenses)},
        **kwargs,
    )
    return await PolicyService(db).create(data, user_id="governance")


async def seed_version_constraint(
    db,
    name="React 18",
    technology="React",
    version_range=">=18.0.0 <19.0.0",
    severity="warning",
    **kwargs,
):
    """Create a technology (if needed) and a version constraint on it."""
    technologies = TechnologyService(db)
    if not await technologies.repo.exists_by_name(technology):
        await technologies.create(TechnologyCreate(name=technology, type="framework"))
    data = VersionConstraintCreate(
        name=name,
        technology=technology,
        version_range=version_range,
        severity=severity,
        **kwargs,
    )
    return await VersionConstraintService(db).create(data, user_id="governance")


async def seed_licenses(db, *license_ids, **fields):
    """Create curated license records through the license catalog."""
    service = LicenseService(db)
    for license_id in license_ids:
        data = {"name": license_id, **fields}
        await service.create(LicenseCreate(id=license_id, **data))
