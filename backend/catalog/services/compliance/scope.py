"""
Policy scope resolution, shared by both evaluators.

Scope is resolved when evaluating, so an organization-scope rule also
covers teams created after it was written.
"""

from typing import Dict, List, Optional

from catalog.core.constants import SCOPE_ORGANIZATION, SCOPE_TEAM


def applies_to_team(scope: str, team: str, subject_teams: Optional[List[str]] = None) -> bool:
    if scope == SCOPE_ORGANIZATION:
        return True
    if scope == SCOPE_TEAM:
        return team in (subject_teams or [])
    return False


def group_components_by_system(edges: List[Dict[str, str]]) -> Dict[str, List[str]]:
    """system_name -> component ids, in edge order and without repeats."""
    grouped: Dict[str, List[str]] = {}
    for edge in edges:
        component_ids = grouped.setdefault(edge["system_name"], [])
        if edge["component_id"] not in component_ids:
            component_ids.append(edge["component_id"])
    return grouped
