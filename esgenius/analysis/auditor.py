"""ESG auditor: runs report text through Gemini and scores the result."""

from typing import Any, Optional

from loguru import logger

from esgenius.analysis.intake import parse_model_response
from esgenius.config.prompts import ESG_AUDIT_SYSTEM_PROMPT, ESG_AUDIT_USER_PROMPT
from esgenius.config.settings import settings
from esgenius.data_management.schemas import GreenwashingAnalysis


class ESGAuditor:
    """
    Greenwashing auditor backed by a Gemini model.

    The model flags statements and tags each Major or Minor; the score and
    report classification are computed locally from those tags.

    Usage:
        auditor = ESGAuditor()
        analysis = auditor.analyze(report_text)
        analysis.confidence_score, analysis.classification

    Attributes:
        max_chars: Report text beyond this length is truncated
    """

    TEMPERATURE = 0.2
    TOP_P = 0.8
    TOP_K = 40
    MAX_OUTPUT_TOKENS = 8192

    def __init__(
        self,
        gemini_client: Optional[Any] = None,
        max_chars: Optional[int] = None,
    ):
        """
        Initialize auditor.

        Args:
            gemini_client: Pre-configured client exposing generate_content().
                If None, a GeminiClient is created on first use.
            max_chars: Truncation limit (defaults to settings.max_report_chars)
        """
        self._gemini_client = gemini_client
        self.max_chars = max_chars or settings.max_report_chars
        self.logger = logger.bind(component="ESGAuditor")

    @property
    def gemini_client(self):
        """Lazy-load Gemini client on first access."""
        if self._gemini_client is None:
            from esgenius.llm.gemini_client import GeminiClient
            self._gemini_client = GeminiClient()
        return self._gemini_client

    def analyze(self, report_text: str) -> GreenwashingAnalysis:
        """
        Analyze ESG report text for potential greenwashing.

        Args:
            report_text: Plain text extracted from the report

        Returns:
            GreenwashingAnalysis with locally computed score and classification

        Raises:
            ValueError: If report_text is empty
            MalformedModelOutputError: If the model response is not valid JSON
        """
        if not report_text or not report_text.strip():
            raise ValueError("PDF text is empty or null.")

        truncated = report_text[: self.max_chars]
        if len(report_text) > self.max_chars:
            self.logger.info(
                "Report text truncated for analysis",
                original_length=len(report_text),
                max_chars=self.max_chars,
            )

        response = self.gemini_client.generate_content(
            ESG_AUDIT_USER_PROMPT.format(report_text=truncated),
            system_instruction=ESG_AUDIT_SYSTEM_PROMPT,
            temperature=self.TEMPERATURE,
            top_p=self.TOP_P,
            top_k=self.TOP_K,
            max_output_tokens=self.MAX_OUTPUT_TOKENS,
        )

        analysis = parse_model_response(response)
        self.logger.info(
            "Report analyzed",
            flagged=len(analysis.flagged_statements),
            major=analysis.major_count,
            minor=analysis.minor_count,
            confidence_score=analysis.confidence_score,
        )
        return analysis
