"""Translation of analysis results into another display language."""

import json
from typing import Any, Dict, Optional

from loguru import logger

from esgenius.analysis.intake import extract_json_object
from esgenius.config.prompts import TRANSLATION_SYSTEM_PROMPT, TRANSLATION_USER_PROMPT
from esgenius.data_management.schemas import GreenwashingAnalysis


class AnalysisTranslator:
    """
    Translates the text values of a GreenwashingAnalysis via Gemini.

    The result is a plain dict for display. Its confidence_score,
    classification and per-statement risk levels are copied from the source
    analysis, so a translation can never change how a report is scored.
    """

    TEMPERATURE = 0.1
    TOP_P = 0.9
    TOP_K = 40
    MAX_OUTPUT_TOKENS = 8192

    def __init__(self, gemini_client: Optional[Any] = None):
        self._gemini_client = gemini_client
        self.logger = logger.bind(component="AnalysisTranslator")

    @property
    def gemini_client(self):
        if self._gemini_client is None:
            from esgenius.llm.gemini_client import GeminiClient
            self._gemini_client = GeminiClient()
        return self._gemini_client

    def translate(
        self,
        analysis: GreenwashingAnalysis,
        language: str = "Chinese",
    ) -> Dict[str, Any]:
        """
        Translate an analysis.

        Args:
            analysis: Source analysis
            language: Target language name

        Returns:
            Translated analysis dict with the source's numeric fields

        Raises:
            MalformedModelOutputError: If the model response is not valid JSON
        """
        source = analysis.model_dump(mode="json")
        response = self.gemini_client.generate_content(
            TRANSLATION_USER_PROMPT.format(analysis_json=json.dumps(source, indent=2, ensure_ascii=False)),
            system_instruction=TRANSLATION_SYSTEM_PROMPT.format(language=language),
            temperature=self.TEMPERATURE,
            top_p=self.TOP_P,
            top_k=self.TOP_K,
            max_output_tokens=self.MAX_OUTPUT_TOKENS,
        )
        translated = extract_json_object(response)

        translated["confidence_score"] = source["confidence_score"]
        translated["classification"] = source["classification"]

        statements = translated.get("flagged_statements")
        if isinstance(statements, list) and len(statements) == len(source["flagged_statements"]):
            for target, original in zip(statements, source["flagged_statements"]):
                if isinstance(target, dict):
                    target["risk_level"] = original["risk_level"]
        else:
            self.logger.warning(
                "Translated statements do not line up with source, keeping source statements",
                language=language,
            )
            translated["flagged_statements"] = source["flagged_statements"]

        self.logger.info("Analysis translated", language=language)
        return translated
