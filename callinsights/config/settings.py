from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenAIConfig(BaseSettings):
    """OpenAI-compatible provider configuration."""

    api_key: Optional[SecretStr] = None
    base_url: str = "https://api.openai.com/v1"
    transcription_model: str = "whisper-1"
    chat_model: str = "gpt-3.5-turbo"
    timeout_seconds: float = Field(default=120.0, gt=0)
    structured_output: bool = Field(
        default=True,
        description="Request JSON response mode on the first analysis attempt.",
    )

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class PipelineConfig(BaseSettings):
    """Limits applied around the analysis pipeline."""

    max_upload_bytes: int = Field(default=25 * 1024 * 1024, ge=1)
    max_custom_metrics: int = Field(default=20, ge=0)
    log_prompts: bool = False

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Call Insights Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/analysis_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # OpenAI
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)

    # Pipeline
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
