"""
Component identity.

A component is identified by its purl when it has one, otherwise by the
(name, version, package manager) coordinate. The key string is what the
unique index on ``components.identity_key`` enforces.
"""

from typing import Dict, Iterable, List

from catalog.models.component import ComponentLicense, ExtractedComponent


def component_identity_key(component: ExtractedComponent) -> str:
    if component.purl:
        return f"purl:{component.purl}"
    return f"coord:{component.name}|{component.version or ''}|{component.package_manager or ''}"


def collapse_by_identity(components: Iterable[ExtractedComponent]) -> Dict[str, ExtractedComponent]:
    """
    Collapse a batch to one record per identity key.

    Later rows win, but each key keeps the position of its first occurrence,
    so the merge order stays deterministic for identical input.
    """
    collapsed: Dict[str, ExtractedComponent] = {}
    for component in components:
        collapsed[component_identity_key(component)] = component
    return collapsed


def license_key(claim: ComponentLicense) -> str:
    """Key of the License record a claim resolves to: its id, else its name."""
    return claim.id or claim.name or ""


def license_keys(component: ExtractedComponent) -> List[str]:
    keys: List[str] = []
    for claim in component.licenses:
        key = license_key(claim)
        if key and key not in keys:
            keys.append(key)
    return keys
