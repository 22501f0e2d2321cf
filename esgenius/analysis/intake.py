"""Intake of upstream ESG-analysis model output.

Turns a raw model response into a validated GreenwashingAnalysis:
1. Pull the JSON object out of the response (code fences, stray prose)
2. Normalize each flagged statement (risk level, ESG category, text fields)
3. Discard the model's own confidence_score / classification; both are
   recomputed from the statements' risk levels

Malformed statements are never an error. Non-object entries are dropped;
entries with an unrecognized risk level are kept for display with
risk_level=None and therefore do not count towards the score.
"""

import json
import re
from collections.abc import Mapping
from typing import Any, Optional

from loguru import logger

from esgenius.data_management.schemas import (
    EsgCategory,
    FlaggedStatement,
    GreenwashingAnalysis,
    ReportProfile,
    RiskLevel,
)


_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

log = logger.bind(component="AnalysisIntake")


class MalformedModelOutputError(ValueError):
    """The model response did not contain a parseable JSON object."""


def extract_json_object(response_text: str) -> dict:
    """
    Extract the JSON object from an LLM response.

    Handles:
    - Raw JSON object
    - JSON in a markdown code block (```json ... ```)
    - JSON with surrounding commentary

    Args:
        response_text: Raw response text from the model

    Returns:
        Parsed JSON object

    Raises:
        MalformedModelOutputError: If no JSON object can be parsed
    """
    text = (response_text or "").strip()

    fence_match = _FENCE_PATTERN.search(text)
    if fence_match:
        text = fence_match.group(1).strip()

    object_match = _OBJECT_PATTERN.search(text)
    if object_match:
        text = object_match.group(0)

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        log.warning(f"Failed to parse model JSON: {e}", preview=text[:200])
        raise MalformedModelOutputError(
            "Failed to get a valid JSON response from the AI. The output was malformed."
        ) from e

    if not isinstance(parsed, dict):
        raise MalformedModelOutputError(
            f"Expected a JSON object from the AI, got {type(parsed).__name__}"
        )
    return parsed


def normalize_risk_level(value: Any) -> Optional[RiskLevel]:
    """Match 'Major'/'Minor' case- and whitespace-insensitively; else None."""
    if isinstance(value, RiskLevel):
        return value
    if not isinstance(value, str):
        return None
    cleaned = value.strip().lower()
    for level in RiskLevel:
        if cleaned == level.value.lower():
            return level
    return None


def normalize_category(value: Any) -> EsgCategory:
    """Match an ESG pillar name; anything unrecognized becomes OTHER."""
    if isinstance(value, EsgCategory):
        return value
    if isinstance(value, str):
        cleaned = value.strip().lower()
        for category in EsgCategory:
            if cleaned == category.value.lower():
                return category
    return EsgCategory.OTHER


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [_text(v).strip() for v in value if _text(v).strip()]


def normalize_statements(raw_statements: Any) -> list[FlaggedStatement]:
    """
    Normalize the model's flagged_statements list.

    Args:
        raw_statements: Value of ``flagged_statements`` from the model

    Returns:
        FlaggedStatement list in the original order
    """
    if not isinstance(raw_statements, list):
        return []

    statements: list[FlaggedStatement] = []
    for i, raw in enumerate(raw_statements):
        if not isinstance(raw, Mapping):
            log.debug("Dropping non-object flagged statement", index=i)
            continue

        risk_level = normalize_risk_level(raw.get("risk_level", raw.get("riskLevel")))
        if risk_level is None:
            log.debug(
                "Flagged statement has unrecognized risk level, ignored for scoring",
                index=i,
                risk_level=repr(raw.get("risk_level"))[:40],
            )

        statements.append(
            FlaggedStatement(
                statement=_text(raw.get("statement")),
                esg_category=normalize_category(raw.get("esg_category", raw.get("esgCategory"))),
                reason=_text(raw.get("reason")),
                risk_level=risk_level,
            )
        )

    return statements


def build_analysis(raw: Mapping[str, Any]) -> GreenwashingAnalysis:
    """
    Build a GreenwashingAnalysis from the parsed model output.

    The upstream confidence_score and classification are ignored.

    Args:
        raw: Parsed JSON object from the model

    Returns:
        Validated analysis with locally computed score and classification
    """
    raw_profile = raw.get("report_metadata")
    if not isinstance(raw_profile, Mapping):
        raw_profile = {}

    profile = ReportProfile(
        **{
            name: _text(raw_profile.get(name)).strip()
            for name in ReportProfile.model_fields
        }
    )

    analysis = GreenwashingAnalysis(
        report_metadata=profile,
        frameworks_claimed=_string_list(raw.get("frameworks_claimed")),
        other_frameworks=_string_list(raw.get("other_frameworks")),
        flagged_statements=normalize_statements(raw.get("flagged_statements")),
    )

    upstream_score = raw.get("confidence_score")
    if upstream_score is not None and upstream_score != analysis.confidence_score:
        log.debug(
            "Replaced model-suggested score",
            model_score=upstream_score,
            computed_score=analysis.confidence_score,
        )

    return analysis


def parse_model_response(response_text: str) -> GreenwashingAnalysis:
    """Extract, normalize and score a raw model response in one step."""
    return build_analysis(extract_json_object(response_text))
