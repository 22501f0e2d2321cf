"""Gemini API client with exponential backoff."""

import time
import random
import functools
from typing import Callable, Any, Dict, Optional

import google.generativeai as genai
from google.generativeai.types.generation_types import BlockedPromptException
from loguru import logger

from esgenius.config.settings import settings


def _exponential_backoff(func: Callable) -> Callable:
    """
    Decorator implementing exponential backoff with jitter for API calls.

    Retries failed requests up to 5 times with exponentially increasing delays.
    Base delay: 1.0s, exponential factor: 2, jitter: 0-10% of delay.
    Blocked prompts are not retried.

    Args:
        func: Function to wrap with retry logic

    Returns:
        Wrapped function with exponential backoff
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        max_retries = 5
        base_delay = 1.0

        for retry in range(max_retries):
            try:
                return func(*args, **kwargs)
            except BlockedPromptException:
                raise
            except Exception as e:
                if retry == max_retries - 1:
                    logger.error(f"Max retries exceeded for {func.__name__}: {e}")
                    raise

                delay = base_delay * (2 ** retry)
                jitter = random.uniform(0, delay * 0.1)
                total_delay = delay + jitter

                logger.warning(
                    f"Retry {retry + 1}/{max_retries} for {func.__name__} "
                    f"after {total_delay:.2f}s: {e}"
                )
                time.sleep(total_delay)

        # Should never reach here due to the raise in the loop
        raise RuntimeError(f"Unexpected retry loop exit in {func.__name__}")

    return wrapper


class GeminiClient:
    """
    Google Gemini API client with retry and error handling.

    Attributes:
        model_name: Gemini model identifier
    """

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        """
        Initialize Gemini client.

        Args:
            api_key: API key override (defaults to settings.gemini_api_key)
            model_name: Model override (defaults to settings.gemini_model)

        Raises:
            ValueError: If no API key is configured
        """
        api_key = api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GEMINI_API_KEY not configured in environment")

        genai.configure(api_key=api_key)
        self.model_name = model_name or settings.gemini_model
        self._models: Dict[Optional[str], Any] = {}

        logger.info(f"Gemini client initialized with model {self.model_name}")

    def _model_for(self, system_instruction: Optional[str]):
        if system_instruction not in self._models:
            self._models[system_instruction] = genai.GenerativeModel(
                self.model_name,
                system_instruction=system_instruction,
            )
        return self._models[system_instruction]

    @_exponential_backoff
    def generate_content(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
        top_p: Optional[float] = None,
        top_k: Optional[int] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate content from Gemini API with exponential backoff.

        Args:
            prompt: Input prompt for content generation
            system_instruction: Optional system prompt for the model
            temperature: Sampling temperature (0.0-1.0). Lower = more deterministic
            top_p: Nucleus sampling probability
            top_k: Top-k sampling size
            max_output_tokens: Response token limit

        Returns:
            Generated text content

        Raises:
            BlockedPromptException: If prompt violates safety policies
            ValueError: If the model returned no text
            Exception: For other API errors after retries exhausted
        """
        try:
            response = self._model_for(system_instruction).generate_content(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    temperature=temperature,
                    top_p=top_p,
                    top_k=top_k,
                    max_output_tokens=max_output_tokens,
                ),
            )
        except BlockedPromptException as e:
            logger.error(f"Prompt blocked by safety filters: {e}")
            raise

        text = response.text
        if not text:
            raise ValueError("No text was generated by the model.")
        return text

    def count_tokens(self, text: str) -> int:
        """
        Count tokens in text for cost estimation.

        Args:
            text: Text to count tokens in

        Returns:
            Total token count
        """
        result = self._model_for(None).count_tokens(text)
        return result.total_tokens
