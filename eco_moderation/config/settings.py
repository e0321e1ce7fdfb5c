from typing import Literal, Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "postgres"
    dsn: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL; overrides the discrete connection fields.",
    )
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        if self.dsn:
            return self.dsn
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class AwsConfig(BaseSettings):
    """Shared AWS credentials and region."""

    access_key: Optional[str] = Field(default=None, validation_alias="AWS_ACCESS_KEY_ID")
    secret_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias="AWS_SECRET_ACCESS_KEY",
    )
    region: str = Field(default="us-east-1", validation_alias="AWS_REGION")

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )

    def has_credentials(self) -> bool:
        return bool(self.access_key and self.secret_key)


class TranscribeConfig(BaseSettings):
    """Amazon Transcribe streaming configuration."""

    region: Optional[str] = None
    language_code: str = "es-US"
    sample_rate_hz: int = Field(default=16000, ge=8000, le=48000)

    model_config = SettingsConfigDict(
        env_prefix="TRANSCRIBE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    region: str = Field(
        default="us-east-1",
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="meta.llama3-1-8b-instruct-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    max_tokens: int = Field(
        default=300,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=4096,
    )
    temperature: float = Field(
        default=0.0,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    top_p: float = Field(
        default=0.9,
        validation_alias="BEDROCK_TOP_P",
        ge=0.0,
        le=1.0,
    )
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="BEDROCK_API_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class MailConfig(BaseSettings):
    """SMTP relay used for admin notifications (Resend by default)."""

    host: str = "smtp.resend.com"
    port: int = 465
    username: Optional[str] = "resend"
    password: Optional[SecretStr] = None
    sender: str = "Eco Admin <onboarding@resend.dev>"
    use_ssl: bool = True
    use_tls: bool = False
    timeout_seconds: float = Field(default=15.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="MAIL_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )

    def is_configured(self) -> bool:
        return bool(self.host and self.sender and self.password)


class ModerationConfig(BaseSettings):
    """Moderation pipeline knobs and secrets."""

    token_secret: Optional[SecretStr] = None
    admin_email: str = "ecoaudioenterprise@gmail.com"
    public_base_url: str = "http://localhost:8000"
    link_max_age_seconds: Optional[int] = Field(
        default=None,
        ge=60,
        description="When set, admin links carry an issue timestamp and expire.",
    )
    fallback_policy: Literal["review", "allow"] = Field(
        default="review",
        description="Outcome when classification fails for reasons other than quota.",
    )
    fetch_timeout_seconds: float = Field(default=20.0, gt=0)
    max_audio_bytes: int = Field(default=25 * 1024 * 1024, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="MODERATION_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Eco Moderation Service"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/moderation_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # AWS
    aws: AwsConfig = Field(default_factory=AwsConfig)

    # Transcribe
    transcribe: TranscribeConfig = Field(default_factory=TranscribeConfig)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Mail
    mail: MailConfig = Field(default_factory=MailConfig)

    # Moderation
    moderation: ModerationConfig = Field(default_factory=ModerationConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = [
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    def missing_moderation_secrets(self) -> list[str]:
        """Names of the secrets the webhook cannot run without."""

        missing: list[str] = []
        if self.moderation.token_secret is None:
            missing.append("MODERATION_TOKEN_SECRET")
        if self.mail.password is None:
            missing.append("MAIL_PASSWORD")
        if self.bedrock.api_key is None and not self.aws.has_credentials():
            missing.append("BEDROCK_API_KEY or AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY")
        return missing


# Global settings instance
settings = Settings()
