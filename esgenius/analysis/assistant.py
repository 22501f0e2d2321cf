"""Report assistant: multi-turn ESG chat with optional report context."""

from typing import Any, Dict, List, Optional

from loguru import logger

from esgenius.config.prompts import ASSISTANT_CONTEXT_PROMPT, ASSISTANT_SYSTEM_PROMPT


class ESGAssistant:
    """
    Chat assistant over an ESG report, backed by OpenRouter.

    History is kept per instance; the system message (with the report
    text, when given) is prepended to every request and never stored.

    Usage:
        async with OpenRouterClient() as client:
            assistant = ESGAssistant(client, report_text=text)
            answer = await assistant.ask("Which Scope 3 categories are covered?")
    """

    def __init__(
        self,
        client: Any,
        report_text: Optional[str] = None,
        max_context_chars: int = 100_000,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ):
        """
        Args:
            client: Object exposing async chat_completion(messages, temperature, max_tokens)
            report_text: Report text used as reference context
            max_context_chars: Report text beyond this length is truncated
            temperature: Sampling temperature
            max_tokens: Response token limit
        """
        self.client = client
        self.report_text = report_text
        self.max_context_chars = max_context_chars
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.history: List[Dict[str, str]] = []
        self.logger = logger.bind(component="ESGAssistant")

    def system_message(self) -> Dict[str, str]:
        content = ASSISTANT_SYSTEM_PROMPT
        if self.report_text:
            content += ASSISTANT_CONTEXT_PROMPT.format(
                report_text=self.report_text[: self.max_context_chars]
            )
        return {"role": "system", "content": content}

    async def ask(self, question: str) -> str:
        """
        Ask a question and record the exchange in history.

        A failed request leaves history unchanged.

        Raises:
            ValueError: If question is blank
            LLMServiceError: If the provider request fails
        """
        if not question or not question.strip():
            raise ValueError("Question must not be empty")

        user_message = {"role": "user", "content": question.strip()}
        messages = [self.system_message(), *self.history, user_message]

        answer = await self.client.chat_completion(
            messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        self.history.extend([user_message, {"role": "assistant", "content": answer}])
        self.logger.debug("Assistant answered", turns=len(self.history) // 2)
        return answer

    def reset(self) -> None:
        self.history.clear()
