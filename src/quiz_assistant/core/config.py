"""
Configuration management for Knowledge Quiz Assistant.
Settings are read from the environment and an optional .env file.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings and configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application
    app_name: str = Field("Knowledge Quiz Assistant", description="Application name")
    app_version: str = Field("1.0.0", description="Application version")
    debug: bool = Field(False, description="Debug mode")
    log_level: str = Field("INFO", description="Logging level")

    # API
    api_host: str = Field("0.0.0.0", description="API host")
    api_port: int = Field(8000, description="API port")
    cors_origins: list[str] = Field(["*"], description="CORS allowed origins")

    # Rate Limiting
    rate_limit_per_minute: int = Field(60, description="Rate limit per minute per IP")

    # Completion backend
    llm_provider: Literal["ollama", "gemini"] = Field(
        "ollama", description="Completion backend used by the flows"
    )
    llm_temperature: float = Field(0.2, description="Sampling temperature")
    llm_max_tokens: int = Field(1024, description="Maximum output tokens per completion")
    llm_timeout_seconds: float = Field(60.0, description="HTTP timeout for completion calls")

    # Ollama
    ollama_host: str = Field("localhost", description="Ollama host")
    ollama_port: int = Field(11434, description="Ollama port")
    ollama_model: str = Field("llama3.1:8b", description="Ollama model name")
    document_max_chars: int = Field(
        20000, description="Maximum characters of extracted PDF text sent to Ollama"
    )

    # Gemini
    gemini_api_key: Optional[str] = Field(None, description="Google AI Studio API key")
    gemini_model: str = Field("gemini-2.0-flash", description="Gemini model name")

    # Monitoring
    enable_metrics: bool = Field(
        True, description="Serve /metrics and record per-request HTTP metrics"
    )

    # Security
    csp_strict: bool = Field(False, description="Enable strict Content Security Policy")
    docs_csp_relaxed: bool = Field(False, description="Use relaxed CSP for documentation endpoints")


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()


def validate_settings(settings: Settings) -> list[str]:
    """
    Validate settings and return list of issues.

    Returns:
        List of validation issues (empty if all valid)
    """
    issues = []

    if settings.rate_limit_per_minute <= 0:
        issues.append("Rate limit must be positive")

    if settings.llm_temperature < 0 or settings.llm_temperature > 2:
        issues.append("LLM temperature must be between 0 and 2")

    if settings.llm_max_tokens <= 0:
        issues.append("LLM max tokens must be positive")

    if settings.llm_timeout_seconds <= 0:
        issues.append("LLM timeout must be positive")

    if settings.ollama_port <= 0 or settings.ollama_port > 65535:
        issues.append("Ollama port must be between 1 and 65535")

    if settings.llm_provider == "ollama" and not settings.ollama_model.strip():
        issues.append("Ollama model name cannot be empty")

    if settings.llm_provider == "gemini":
        if not settings.gemini_api_key:
            issues.append("GEMINI_API_KEY is required when llm_provider is 'gemini'")
        if not settings.gemini_model.strip():
            issues.append("Gemini model name cannot be empty")

    if settings.document_max_chars <= 0:
        issues.append("Document max chars must be positive")

    return issues
