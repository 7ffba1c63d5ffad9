"""
Violation Summarizer

Shared ordering and aggregation for license and version violations.
"""

from collections import Counter
from typing import Dict, List, Sequence

from catalog.core.constants import empty_severity_summary, get_severity_rank
from catalog.schemas.violations import Violation, ViolationReport


def violation_sort_key(violation: Violation) -> tuple:
    return (
        get_severity_rank(violation.severity),
        violation.team,
        violation.system,
        violation.component.name,
        violation.component.version or "",
        *violation.sort_tail,
    )


def sort_violations(violations: Sequence[Violation]) -> List[Violation]:
    """Most severe first, then team, system and component name ascending."""
    return sorted(violations, key=violation_sort_key)


def summarize_by_severity(violations: Sequence[Violation]) -> Dict[str, int]:
    """Counts per severity. All four levels are always present."""
    summary = empty_severity_summary()
    for violation in violations:
        if violation.severity in summary:
            summary[violation.severity] += 1
    return summary


def summarize_by_team(violations: Sequence[Violation]) -> Dict[str, int]:
    counts = Counter(violation.team for violation in violations)
    return dict(sorted(counts.items()))


def build_report(violations: Sequence[Violation]) -> ViolationReport:
    ordered = sort_violations(violations)
    return ViolationReport(
        violations=ordered,
        count=len(ordered),
        summary=summarize_by_severity(ordered),
        by_team=summarize_by_team(ordered),
    )
