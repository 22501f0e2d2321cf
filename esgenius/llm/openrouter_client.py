"""Async OpenRouter chat-completions client.

OpenRouter exposes an OpenAI-compatible ``/chat/completions`` endpoint in
front of many hosted models. The report assistant uses it to reach a
DeepSeek chat model.
"""

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from esgenius.config.settings import settings


class LLMServiceError(RuntimeError):
    """The LLM provider rejected the request or returned an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, LLMServiceError) and exc.status_code is not None:
        return exc.status_code == 429 or exc.status_code >= 500
    return False


class OpenRouterClient:
    """
    Async client for the OpenRouter chat-completions API.

    Usage:
        async with OpenRouterClient() as client:
            reply = await client.chat_completion([
                {"role": "system", "content": "..."},
                {"role": "user", "content": "What is Scope 3?"},
            ])

    Attributes:
        model: Model identifier on OpenRouter
        base_url: API base URL
        http_client: httpx AsyncClient (created on enter or first use)
    """

    APP_TITLE = "ESGenius Dashboard"
    APP_REFERER = "https://esgenius.local"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
    ):
        """
        Initialize OpenRouter client.

        Args:
            api_key: API key override (defaults to settings.openrouter_api_key)
            model: Model override (defaults to settings.openrouter_model)
            base_url: Base URL override
            http_client: Pre-configured httpx client (mainly for tests)
            timeout: Request timeout in seconds

        Raises:
            ValueError: If no API key is configured
        """
        self.api_key = api_key or settings.openrouter_api_key
        if not self.api_key:
            raise ValueError("OPENROUTER_API_KEY not configured in environment")

        self.model = model or settings.openrouter_model
        self.base_url = (base_url or settings.openrouter_base_url).rstrip("/")
        self.timeout = timeout
        self.http_client = http_client
        self._owns_client = http_client is None

        self.logger = logger.bind(component="OpenRouterClient")
        self.logger.info("OpenRouterClient initialized", model=self.model)

    async def __aenter__(self):
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self.http_client

    async def aclose(self) -> None:
        if self.http_client is not None and self._owns_client:
            await self.http_client.aclose()
            self.http_client = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": self.APP_REFERER,
            "X-Title": self.APP_TITLE,
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.reason_phrase or f"HTTP {response.status_code}"
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return response.reason_phrase or f"HTTP {response.status_code}"

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """
        Request a chat completion.

        Retries transport errors, 429 and 5xx responses.

        Args:
            messages: Chat messages ({"role": ..., "content": ...})
            temperature: Sampling temperature
            max_tokens: Response token limit

        Returns:
            Assistant message content

        Raises:
            LLMServiceError: On API errors or malformed responses
        """
        client = self._ensure_client()
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        response = await client.post(
            f"{self.base_url}/chat/completions",
            headers=self._headers(),
            json=payload,
        )
        self.logger.debug("OpenRouter response", status_code=response.status_code)

        if response.status_code >= 400:
            message = self._error_message(response)
            self.logger.error(f"OpenRouter API error: {message}", status_code=response.status_code)
            raise LLMServiceError(
                f"OpenRouter API error: {message}", status_code=response.status_code
            )

        try:
            data = response.json()
            return data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMServiceError(f"Unexpected OpenRouter response: {e}") from e
