from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    location: str = Field(
        default="./data.db",
        validation_alias="DATABASE_URL",
        description="Path to the SQLite file or a full SQLAlchemy URL.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        if "://" in self.location:
            return self.location
        return f"sqlite+aiosqlite:///{self.location}"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class OpenAIConfig(BaseSettings):
    """OpenAI configuration (Whisper transcription and the summarizer)."""

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias="OPENAI_BASE_URL",
    )
    summarizer_model: str = Field(
        default="gpt-4o-mini",
        validation_alias="SUMMARIZER_MODEL",
    )
    summarizer_temperature: float = Field(
        default=0.3,
        validation_alias="SUMMARIZER_TEMPERATURE",
        ge=0.0,
        le=2.0,
    )
    whisper_model: str = Field(
        default="whisper-1",
        validation_alias="WHISPER_MODEL",
    )
    whisper_language: str = Field(
        default="en",
        validation_alias="WHISPER_LANGUAGE",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class ElevenLabsConfig(BaseSettings):
    """ElevenLabs speech-to-text configuration."""

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="ELEVEN_API_KEY",
    )
    base_url: str = Field(
        default="https://api.elevenlabs.io/v1",
        validation_alias="ELEVEN_BASE_URL",
    )
    model_id: str = Field(
        default="scribe_v1",
        validation_alias="ELEVEN_MODEL_ID",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class StorageConfig(BaseSettings):
    """Audio artifact storage configuration"""

    backend: Literal["local", "s3"] = Field(
        default="local",
        validation_alias="STORAGE_BACKEND",
    )
    uploads_dir: str = Field(default="./uploads", validation_alias="UPLOADS_DIR")
    public_path: str = Field(default="/uploads", validation_alias="UPLOADS_PUBLIC_PATH")
    discard_audio_on_failure: bool = Field(
        default=True,
        validation_alias="DISCARD_AUDIO_ON_FAILURE",
        description="Delete the stored recording when transcription or classification fails.",
    )

    bucket_name: Optional[str] = Field(default=None, validation_alias="S3_BUCKET_NAME")
    region: str = Field(default="us-east-1", validation_alias="S3_REGION")
    access_key: Optional[str] = Field(default=None, validation_alias="S3_ACCESS_KEY")
    secret_key: Optional[str] = Field(default=None, validation_alias="S3_SECRET_KEY")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class IntakeConfig(BaseSettings):
    """Limits applied to incoming feedback submissions."""

    max_audio_bytes: int = Field(
        default=5 * 1024 * 1024,
        validation_alias="MAX_AUDIO_FILE_SIZE",
        ge=1,
    )

    @property
    def max_audio_megabytes(self) -> int:
        return self.max_audio_bytes // (1024 * 1024)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class WebhookConfig(BaseSettings):
    """Outbound webhook delivery configuration."""

    user_agent: str = Field(default="EchoFeedback/1.0", validation_alias="WEBHOOK_USER_AGENT")
    signature_header: str = Field(
        default="X-Echo-Signature",
        validation_alias="WEBHOOK_SIGNATURE_HEADER",
    )
    timestamp_header: str = Field(
        default="X-Echo-Timestamp",
        validation_alias="WEBHOOK_TIMESTAMP_HEADER",
    )
    error_body_limit: int = Field(
        default=200,
        validation_alias="WEBHOOK_ERROR_BODY_LIMIT",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Echo Feedback API"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3001
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/feedback_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"
    webhook_log_file: str = "logs/webhooks.log"

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Speech-to-text and summarizer providers
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    elevenlabs: ElevenLabsConfig = Field(default_factory=ElevenLabsConfig)

    # Audio storage
    storage: StorageConfig = Field(default_factory=StorageConfig)

    # Intake limits
    intake: IntakeConfig = Field(default_factory=IntakeConfig)

    # Webhooks
    webhooks: WebhookConfig = Field(default_factory=WebhookConfig)

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

    @property
    def use_elevenlabs(self) -> bool:
        """ElevenLabs wins whenever its key is configured."""

        return self.elevenlabs.api_key is not None


# Global settings instance
settings = Settings()
