"""RubyGems requirement parsing and matching.

Requirements are comma separated clauses such as ``>= 1.2, < 2`` or the
pessimistic ``~> 2.2``. Comparisons go through ``packaging.version``; gem
versions it cannot parse only match through exact equality.
"""

import re
from typing import List, Tuple

from packaging import version

from common.errors import ManifestError

ANY_REQUIREMENT = ">= 0"

_CLAUSE = re.compile(r"^\s*(~>|!=|>=|<=|=|>|<)?\s*([0-9A-Za-z][0-9A-Za-z.\-_+]*)\s*$")

Clause = Tuple[str, str]


def parse_requirement(requirement: str) -> List[Clause]:
    """Return (operator, version) clauses; a bare version means ``=``."""
    if requirement is None or not str(requirement).strip():
        return [(">=", "0")]
    clauses = []
    for part in str(requirement).split(","):
        match = _CLAUSE.match(part)
        if not match:
            raise ManifestError(f"Illegal requirement {requirement!r}")
        clauses.append((match.group(1) or "=", match.group(2)))
    return clauses


def normalize_requirement(requirement: str) -> str:
    """Canonical text form, used to compare manifest and lock entries."""
    return ", ".join(f"{op} {ver}" for op, ver in parse_requirement(requirement))


def is_exact(requirement: str) -> bool:
    """True when the requirement pins a single version with ``=``."""
    clauses = parse_requirement(requirement)
    return len(clauses) == 1 and clauses[0][0] == "="


def _pessimistic_upper(target: version.Version) -> version.Version:
    release = target.release
    if len(release) > 1:
        release = release[:-1]
    bumped = release[:-1] + (release[-1] + 1,)
    return version.Version(".".join(str(part) for part in bumped))


def _matches(candidate: str, op: str, target: str) -> bool:
    if op == "=" and candidate == target:
        return True
    try:
        have = version.Version(candidate)
        want = version.Version(target)
    except version.InvalidVersion:
        if op == "!=":
            return candidate != target
        return False
    if op == "=":
        return have == want
    if op == "!=":
        return have != want
    if op == ">":
        return have > want
    if op == "<":
        return have < want
    if op == ">=":
        return have >= want
    if op == "<=":
        return have <= want
    # ~>
    return want <= have < _pessimistic_upper(want)


def satisfies(candidate: str, requirement: str) -> bool:
    """Return True when version string ``candidate`` meets every clause."""
    return all(_matches(candidate, op, target) for op, target in parse_requirement(requirement))
