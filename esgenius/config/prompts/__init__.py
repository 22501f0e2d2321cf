"""Prompt templates for the LLM-backed analysis components.

Modules:
    analysis_prompts: ESG audit and translation prompts (Gemini)
    chat_prompts: Report assistant prompts (OpenRouter)
"""

from esgenius.config.prompts.analysis_prompts import (
    ESG_AUDIT_SYSTEM_PROMPT,
    ESG_AUDIT_USER_PROMPT,
    TRANSLATION_SYSTEM_PROMPT,
    TRANSLATION_USER_PROMPT,
)
from esgenius.config.prompts.chat_prompts import (
    ASSISTANT_CONTEXT_PROMPT,
    ASSISTANT_SYSTEM_PROMPT,
)

__all__ = [
    "ESG_AUDIT_SYSTEM_PROMPT",
    "ESG_AUDIT_USER_PROMPT",
    "TRANSLATION_SYSTEM_PROMPT",
    "TRANSLATION_USER_PROMPT",
    "ASSISTANT_CONTEXT_PROMPT",
    "ASSISTANT_SYSTEM_PROMPT",
]
