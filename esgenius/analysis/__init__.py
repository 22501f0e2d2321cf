"""Analysis components: model-output intake, auditing, translation and chat."""

from esgenius.analysis.assistant import ESGAssistant
from esgenius.analysis.auditor import ESGAuditor
from esgenius.analysis.intake import (
    MalformedModelOutputError,
    build_analysis,
    extract_json_object,
    normalize_statements,
    parse_model_response,
)
from esgenius.analysis.translator import AnalysisTranslator

__all__ = [
    "AnalysisTranslator",
    "ESGAssistant",
    "ESGAuditor",
    "MalformedModelOutputError",
    "build_analysis",
    "extract_json_object",
    "normalize_statements",
    "parse_model_response",
]
