"""
Configuration settings for the UI Generation Layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development. List-valued settings (API keys, models)
are given as JSON arrays, e.g. GEMINI_API_KEYS='["key-a", "key-b"]'.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "UI Generation Layer"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # === Gemini ===
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_API_KEYS: list[str] = []
    GEMINI_MODELS: list[str] = ["gemini-1.5-flash", "gemini-1.5-pro"]

    # === OpenAI-compatible chat completions ===
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_API_KEYS: list[str] = []
    OPENAI_MODELS: list[str] = ["gpt-4o-mini"]

    # === Hugging Face inference endpoints ===
    HUGGINGFACE_BASE_URL: str = "https://api-inference.huggingface.co"
    HUGGINGFACE_API_TOKENS: list[str] = []
    HUGGINGFACE_MODELS: list[str] = ["bigcode/starcoder2-15b"]

    # === Provider selection ===
    PRIMARY_PROVIDER: str = "gemini"
    SECONDARY_PROVIDER: Optional[str] = "openai"  # None disables dual generation
    PROVIDER_TIMEOUT: int = 120  # seconds, per HTTP call

    # === LLM Generation Parameters ===
    LLM_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 8192

    # === Retry policy ===
    RATE_LIMIT_BASE_DELAY: float = 2.0  # seconds, multiplied by attempt number
    SERVER_ERROR_DELAY: float = 1.0  # seconds, fixed

    # === Structured output recovery ===
    RECOVERY_MAX_ATTEMPTS: int = 3

    # === Evaluation ===
    EVALUATION_ENABLED: bool = True
    EVALUATOR_WEIGHTS: list[float] = [0.4, 0.3, 0.2, 0.1]  # llm primary, llm secondary, static, best practices
    RATER_TIMEOUT: float = 90.0  # seconds

    # === Pipeline ===
    DEFAULT_OUTPUT_MODE: str = "file_map"  # file_map | single_blob
    MAX_UPLOAD_IMAGES: int = 10
    MAX_IMAGE_BYTES: int = 10 * 1024 * 1024

    # === Project store ===
    PROJECTS_DIR: str = "generated-projects"

    # === Figma ===
    FIGMA_API_BASE_URL: str = "https://api.figma.com/v1"
    FIGMA_ACCESS_TOKEN: Optional[str] = None
    FIGMA_MAX_FRAMES: int = 10

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True

    # === CORS ===
    CORS_ALLOW_ORIGINS: list[str] = ["*"]


# Global settings instance
settings = Settings()
