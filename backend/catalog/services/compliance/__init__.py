"""
Compliance evaluation: license and version violations plus the shared
summarizer.
"""

from catalog.services.compliance.license_evaluator import (
    LicenseViolationEvaluator,
    license_breaches_policy,
)
from catalog.services.compliance.summary import (
    build_report,
    sort_violations,
    summarize_by_severity,
    summarize_by_team,
)
from catalog.services.compliance.version_evaluator import VersionViolationEvaluator

__all__ = [
    "LicenseViolationEvaluator",
    "VersionViolationEvaluator",
    "build_report",
    "license_breaches_policy",
    "sort_violations",
    "summarize_by_severity",
    "summarize_by_team",
]
