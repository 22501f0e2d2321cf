"""Tests for greenwashing score calculation and classification.

Tests cover:
- Concrete scoring scenarios (empty, mixed, capped)
- Range, order-independence, monotonicity and purity of compute_score
- Unrecognized or missing risk levels
- Threshold boundary of classify_score
"""

import itertools

import pytest

from esgenius.data_management.schemas import FlaggedStatement
from esgenius.scoring import (
    MAJOR_THRESHOLD,
    Classification,
    RiskLevel,
    classify_score,
    compute_score,
)


def _flags(*levels):
    return [{"risk_level": level} for level in levels]


class TestComputeScore:
    """Scenario tests for compute_score."""

    def test_empty_scores_zero(self):
        assert compute_score([]) == 0
        assert classify_score(0) is Classification.MINOR

    def test_single_minor(self):
        score = compute_score(_flags("Minor"))
        assert score == 15
        assert classify_score(score) is Classification.MINOR

    def test_two_major_one_minor_stays_minor(self):
        score = compute_score(_flags("Major", "Major", "Minor"))
        assert score == 45
        assert classify_score(score) is Classification.MINOR

    def test_five_major_is_major(self):
        score = compute_score(_flags(*["Major"] * 5))
        assert score == 85
        assert classify_score(score) is Classification.MAJOR

    def test_ten_major_is_capped(self):
        score = compute_score(_flags(*["Major"] * 10))
        assert score == 100
        assert classify_score(score) is Classification.MAJOR

    def test_accepts_models_and_enums(self):
        statements = [
            FlaggedStatement(statement="a", risk_level=RiskLevel.MAJOR),
            {"riskLevel": RiskLevel.MINOR},
        ]
        assert compute_score(statements) == 30

    def test_accepts_generator(self):
        assert compute_score(s for s in _flags("Minor", "Minor")) == 20


class TestUnrecognizedRiskLevels:
    """Entries without a usable risk level."""

    def test_unrecognized_entries_do_not_count(self):
        assert compute_score(_flags("Minor", "Critical", None)) == 15

    def test_only_unrecognized_scores_base(self):
        assert compute_score(_flags("critical", "")) == 10

    def test_missing_key_scores_base(self):
        assert compute_score([{"statement": "no level"}]) == 10

    def test_risk_level_matching_is_exact(self):
        # Lenient matching happens at intake, not here
        assert compute_score(_flags("major")) == 10


class TestScoreProperties:
    """Properties that hold for every input."""

    LEVELS = ["Major", "Minor", "Other"]

    def test_range(self):
        for n in range(0, 12):
            for combo in itertools.combinations_with_replacement(self.LEVELS, n):
                assert 0 <= compute_score(_flags(*combo)) <= 100

    def test_order_independent(self):
        levels = ["Major", "Minor", "Minor", "Other", "Major"]
        expected = compute_score(_flags(*levels))
        for perm in itertools.permutations(levels):
            assert compute_score(_flags(*perm)) == expected

    @pytest.mark.parametrize("extra", ["Major", "Minor"])
    def test_monotonic(self, extra):
        for n in range(0, 12):
            base = _flags(*["Major"] * n)
            assert compute_score(base + _flags(extra)) >= compute_score(base)

    def test_pure(self):
        statements = _flags("Major", "Minor")
        assert compute_score(statements) == compute_score(statements)
        assert statements == _flags("Major", "Minor")


class TestClassifyScore:
    """Threshold classification."""

    def test_threshold_is_exclusive(self):
        assert classify_score(MAJOR_THRESHOLD) is Classification.MINOR
        assert classify_score(MAJOR_THRESHOLD + 1) is Classification.MAJOR

    def test_classification_values(self):
        assert Classification.MAJOR.value == "Major"
        assert Classification.MINOR.value == "Minor"
