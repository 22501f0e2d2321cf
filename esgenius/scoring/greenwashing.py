"""Greenwashing score calculation and Major/Minor classification.

The score is a weighted count of model-flagged statements:

    score = min(BASE_SCORE + MAJOR_WEIGHT * majors + MINOR_WEIGHT * minors, MAX_SCORE)

with an empty statement list scoring exactly 0. The classification is a
fixed threshold on that score and is never taken from a model label.

Everything here is pure: no I/O, no logging, no exceptions.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Optional


BASE_SCORE = 10  # Any flagged statement at all
MAJOR_WEIGHT = 15
MINOR_WEIGHT = 5
MAX_SCORE = 100
MAJOR_THRESHOLD = 55  # Strictly greater than this is Major


class RiskLevel(str, Enum):
    """Risk level an upstream classifier assigns to a flagged statement."""

    MAJOR = "Major"
    MINOR = "Minor"


class Classification(str, Enum):
    """Report-level cross-checking classification derived from the score."""

    MAJOR = "Major"
    MINOR = "Minor"


def _risk_level_of(statement: Any) -> Optional[RiskLevel]:
    """Read the risk level of a statement model or raw mapping, if recognizable."""
    if isinstance(statement, Mapping):
        value = statement.get("risk_level", statement.get("riskLevel"))
    else:
        value = getattr(statement, "risk_level", None)

    if isinstance(value, RiskLevel):
        return value
    if isinstance(value, str):
        try:
            return RiskLevel(value)
        except ValueError:
            return None
    return None


def compute_score(statements: Iterable[Any]) -> int:
    """
    Compute the greenwashing score for a set of flagged statements.

    Entries whose risk level is missing or unrecognized are counted as
    neither Major nor Minor. They still make the set non-empty, so a set
    holding only such entries scores BASE_SCORE.

    Args:
        statements: FlaggedStatement models or raw mappings with a
            ``risk_level`` (or ``riskLevel``) key. Order is irrelevant.

    Returns:
        Integer score in [0, MAX_SCORE]
    """
    items = list(statements or [])
    if not items:
        return 0

    major_count = 0
    minor_count = 0
    for item in items:
        level = _risk_level_of(item)
        if level is RiskLevel.MAJOR:
            major_count += 1
        elif level is RiskLevel.MINOR:
            minor_count += 1

    raw = BASE_SCORE + MAJOR_WEIGHT * major_count + MINOR_WEIGHT * minor_count
    return min(raw, MAX_SCORE)


def classify_score(score: int) -> Classification:
    """Map a score to its classification: Major iff score > MAJOR_THRESHOLD."""
    if score > MAJOR_THRESHOLD:
        return Classification.MAJOR
    return Classification.MINOR
