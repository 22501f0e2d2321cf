"""Application settings using Pydantic BaseSettings for environment variable management."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Attributes:
        gemini_api_key: Google Gemini API key used for report analysis and translation
        gemini_model: Gemini model identifier
        openrouter_api_key: OpenRouter API key used by the report assistant
        openrouter_model: Chat model routed through OpenRouter
        openrouter_base_url: OpenRouter API base URL
        data_dir: Root directory for uploads, report metadata and cached analyses
        max_report_chars: Maximum report characters sent to the model
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
        log_file: Optional path of a rotating JSON log file
    """

    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key"
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Default Gemini model identifier"
    )
    openrouter_api_key: str = Field(
        default="",
        description="OpenRouter API key for the report assistant"
    )
    openrouter_model: str = Field(
        default="deepseek/deepseek-r1-0528:free",
        description="Chat model identifier on OpenRouter"
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter API base URL"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding uploads, report metadata and analysis cache"
    )
    max_report_chars: int = Field(
        default=100_000,
        description="Report text beyond this length is truncated before analysis"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: json or console"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Optional rotating JSON log file"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def uploads_dir(self) -> Path:
        """Directory where uploaded PDF files are stored."""
        return self.data_dir / "uploads"

    @property
    def db_dir(self) -> Path:
        """Directory holding the flat-file JSON stores."""
        return self.data_dir / "db"


# Singleton instance - import this throughout the application
settings = Settings()
