"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Generation backend
    llm_provider: str = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    google_ai_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    llm_max_output_tokens: int = 4096
    llm_timeout_seconds: float = 60.0

    # Admission
    rate_limit_requests: int = 10
    rate_limit_window_seconds: float = 60.0
    rate_limit_sweep_seconds: float = 60.0
    trust_proxy_headers: bool = False

    # Input bounds
    min_resume_length: int = 100
    max_resume_length: int = 15_000
    max_upload_size: int = 5 * 1024 * 1024

    # Tracing
    langfuse_secret_key: str = ""
    langfuse_public_key: str = ""
    langfuse_host: str = "https://cloud.langfuse.com"

    allowed_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


_settings: Settings | None = None


def load_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
