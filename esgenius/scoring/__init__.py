"""Greenwashing scoring: weighted flag counts and threshold classification."""

from esgenius.scoring.greenwashing import (
    BASE_SCORE,
    MAJOR_THRESHOLD,
    MAJOR_WEIGHT,
    MAX_SCORE,
    MINOR_WEIGHT,
    Classification,
    RiskLevel,
    classify_score,
    compute_score,
)

__all__ = [
    "BASE_SCORE",
    "MAJOR_THRESHOLD",
    "MAJOR_WEIGHT",
    "MAX_SCORE",
    "MINOR_WEIGHT",
    "Classification",
    "RiskLevel",
    "classify_score",
    "compute_score",
]
