"""
Semantic Version Ranges

npm-style range expressions evaluated over ``semver.Version``:

- comparator sets joined by ``||``, comparators inside a set joined by spaces
- primitive operators ``<``, ``<=``, ``>``, ``>=``, ``=``
- hyphen ranges ``1.2.3 - 2.3.4``
- caret ``^1.2.3`` and tilde ``~1.2.3``
- x-ranges ``1.x``, ``1.2.*``, ``*`` (a bare ``1`` or ``1.2`` is an x-range)

Every sugar form desugars to plain comparators at parse time, so matching is
a conjunction of simple comparisons per set.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

import semver

from catalog.core.exceptions import InvalidVersionRangeError


_PARTIAL_RE = re.compile(
    r"^v?(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)
_HYPHEN_RE = re.compile(r"^(?P<low>\S+)\s+-\s+(?P<high>\S+)$")
_OPERATOR_SPACING_RE = re.compile(r"(<=|>=|<|>|=|~|\^)\s+")
_COMPARATOR_RE = re.compile(r"^(?P<op><=|>=|<|>|=|~|\^)?(?P<partial>.*)$")
_COERCE_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")

_OPERATORS = ("<", "<=", ">", ">=", "=")

# Partial version: (major, minor, patch, prerelease); None marks a wildcard
Partial = Tuple[Optional[int], Optional[int], Optional[int], Optional[str]]


def _version(major: int, minor: int = 0, patch: int = 0, prerelease: Optional[str] = None) -> semver.Version:
    return semver.Version(major, minor, patch, prerelease=prerelease)


def _floor(major: int, minor: int = 0, patch: int = 0) -> semver.Version:
    """Lowest version with this release tuple (excludes its prereleases as an upper bound)."""
    return _version(major, minor, patch, prerelease="0")


@dataclass(frozen=True)
class Comparator:
    operator: str
    version: semver.Version

    def test(self, version: semver.Version) -> bool:
        if self.operator == "<":
            return version < self.version
        if self.operator == "<=":
            return version <= self.version
        if self.operator == ">":
            return version > self.version
        if self.operator == ">=":
            return version >= self.version
        return version == self.version

    def __str__(self) -> str:
        return f"{self.operator}{self.version}"


# Matches every release version
_ANY = (Comparator(">=", _version(0)),)
# Matches nothing
_NONE = (Comparator("<", _floor(0)),)


class VersionRange:
    """A parsed range expression: a union of comparator sets."""

    def __init__(self, expression: str, comparator_sets: List[Tuple[Comparator, ...]]):
        self.expression = expression
        self.comparator_sets = comparator_sets

    def satisfied_by(self, version: semver.Version) -> bool:
        return any(_test_set(comparators, version) for comparators in self.comparator_sets)

    def __contains__(self, version: semver.Version) -> bool:
        return self.satisfied_by(version)

    def __str__(self) -> str:
        return " || ".join(" ".join(str(c) for c in cs) for cs in self.comparator_sets)

    def __repr__(self) -> str:
        return f"VersionRange({self.expression!r})"


def _test_set(comparators: Tuple[Comparator, ...], version: semver.Version) -> bool:
    if not all(c.test(version) for c in comparators):
        return False

    if not version.prerelease:
        return True

    # A prerelease only matches when the set names a prerelease of the same release
    release = (version.major, version.minor, version.patch)
    return any(
        c.version.prerelease and (c.version.major, c.version.minor, c.version.patch) == release
        for c in comparators
    )


def _parse_partial(text: str, expression: str) -> Partial:
    match = _PARTIAL_RE.match(text)
    if not match:
        raise InvalidVersionRangeError(expression, f"cannot parse version '{text}'")

    parts: List[Optional[int]] = []
    wildcard = False
    for key in ("major", "minor", "patch"):
        value = match.group(key)
        if value is None or value in ("x", "X", "*") or wildcard:
            wildcard = True
            parts.append(None)
        else:
            parts.append(int(value))

    prerelease = match.group("prerelease") if parts[2] is not None else None
    return parts[0], parts[1], parts[2], prerelease


def _x_range(partial: Partial) -> Tuple[Comparator, ...]:
    major, minor, patch, prerelease = partial
    if major is None:
        return _ANY
    if minor is None:
        return (Comparator(">=", _version(major)), Comparator("<", _floor(major + 1)))
    if patch is None:
        return (
            Comparator(">=", _version(major, minor)),
            Comparator("<", _floor(major, minor + 1)),
        )
    return (Comparator("=", _version(major, minor, patch, prerelease)),)


def _primitive(operator: str, partial: Partial) -> Tuple[Comparator, ...]:
    major, minor, patch, prerelease = partial

    if operator == "=":
        return _x_range(partial)

    if major is None:
        # ">*" and "<*" match nothing, ">=*" and "<=*" match everything
        return _ANY if operator in (">=", "<=") else _NONE

    if patch is not None:
        return (Comparator(operator, _version(major, minor, patch, prerelease)),)

    if operator == ">":
        bumped = _version(major + 1) if minor is None else _version(major, minor + 1)
        return (Comparator(">=", bumped),)
    if operator == ">=":
        return (Comparator(">=", _version(major, minor or 0)),)
    if operator == "<":
        return (Comparator("<", _floor(major, minor or 0)),)
    # "<="
    upper = _floor(major + 1) if minor is None else _floor(major, minor + 1)
    return (Comparator("<", upper),)


def _tilde(partial: Partial) -> Tuple[Comparator, ...]:
    major, minor, patch, prerelease = partial
    if major is None:
        return _ANY
    if minor is None:
        return _x_range(partial)
    lower = _version(major, minor, patch or 0, prerelease)
    return (Comparator(">=", lower), Comparator("<", _floor(major, minor + 1)))


def _caret(partial: Partial) -> Tuple[Comparator, ...]:
    major, minor, patch, prerelease = partial
    if major is None:
        return _ANY
    if minor is None:
        return _x_range(partial)

    lower = Comparator(">=", _version(major, minor, patch or 0, prerelease))
    if major > 0:
        upper = _floor(major + 1)
    elif patch is None or minor > 0:
        upper = _floor(0, minor + 1)
    else:
        upper = _floor(0, 0, patch + 1)
    return (lower, Comparator("<", upper))


def _hyphen(low: Partial, high: Partial) -> Tuple[Comparator, ...]:
    comparators: List[Comparator] = []

    if low[0] is not None:
        comparators.append(Comparator(">=", _version(low[0], low[1] or 0, low[2] or 0, low[3])))

    major, minor, patch, prerelease = high
    if major is not None:
        if minor is None:
            comparators.append(Comparator("<", _floor(major + 1)))
        elif patch is None:
            comparators.append(Comparator("<", _floor(major, minor + 1)))
        else:
            comparators.append(Comparator("<=", _version(major, minor, patch, prerelease)))

    return tuple(comparators) or _ANY


def _parse_set(text: str, expression: str) -> Tuple[Comparator, ...]:
    text = text.strip()
    if not text:
        return _ANY

    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        return _hyphen(
            _parse_partial(hyphen.group("low"), expression),
            _parse_partial(hyphen.group("high"), expression),
        )

    comparators: List[Comparator] = []
    for token in _OPERATOR_SPACING_RE.sub(r"\1", text).split():
        match = _COMPARATOR_RE.match(token)
        operator = match.group("op")
        partial = _parse_partial(match.group("partial"), expression)

        if operator == "^":
            comparators.extend(_caret(partial))
        elif operator == "~":
            comparators.extend(_tilde(partial))
        elif operator in _OPERATORS:
            comparators.extend(_primitive(operator, partial))
        else:
            comparators.extend(_x_range(partial))

    return tuple(comparators)


@lru_cache(maxsize=1024)
def parse_range(expression: str) -> VersionRange:
    """
    Parse a range expression.

    Raises:
        InvalidVersionRangeError: if any part of the expression is malformed
    """
    if expression is None:
        raise InvalidVersionRangeError("None", "range is required")

    sets = [_parse_set(part, expression) for part in expression.split("||")]
    return VersionRange(expression, sets)


def is_valid_range(expression: str) -> bool:
    try:
        parse_range(expression)
    except InvalidVersionRangeError:
        return False
    return True


def coerce_version(text: Optional[str]) -> Optional[semver.Version]:
    """
    Coerce a free-form version string to the nearest semantic version.

    Takes the first ``major[.minor[.patch]]`` run and fills missing parts with
    zero, so ``"v2"`` becomes ``2.0.0`` and ``"1.2.3.4-final"`` becomes
    ``1.2.3``. Returns None when the string contains no digits.
    """
    if not text or not isinstance(text, str):
        return None

    match = _COERCE_RE.search(text)
    if not match:
        return None

    major, minor, patch = (int(g) if g is not None else 0 for g in match.groups())
    return _version(major, minor, patch)


def satisfies(version: semver.Version, expression: str) -> bool:
    return parse_range(expression).satisfied_by(version)
