
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Property Ops API"
    app_env: str = "development"
    frontend_url: str = "http://localhost:5173"

    # Database (Postgres via asyncpg in production or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./property_ops_dev.db",
        alias="DATABASE_URL",
    )

    # Multi-tenancy default (machine callers such as the voice platform act here)
    default_workspace_id: str = Field(default="default", alias="DEFAULT_WORKSPACE_ID")

    audit_enabled: bool = Field(default=True, alias="AUDIT_ENABLED")

    # Email delivery (Resend)
    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")
    resend_api_url: str = Field(
        default="https://api.resend.com/emails", alias="RESEND_API_URL",
    )
    email_from: str = Field(
        default="Property Ops <notifications@resend.dev>", alias="EMAIL_FROM",
    )
    email_timeout: int = Field(default=15, alias="EMAIL_TIMEOUT")
    dashboard_url: str = Field(default="http://localhost:5173", alias="DASHBOARD_URL")

    # OpenAI
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4.1-mini", alias="OPENAI_MODEL")
    openai_max_tokens: int = Field(default=2000, alias="OPENAI_MAX_TOKENS")
    openai_timeout: int = Field(default=60, alias="OPENAI_TIMEOUT")

    # Used when no voice-agent config row exists yet
    default_emergency_keywords: list[str] = Field(
        default=[
            "flood",
            "fire",
            "gas leak",
            "no heat",
            "no water",
            "broken window",
            "security",
        ],
        alias="DEFAULT_EMERGENCY_KEYWORDS",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def ai_enabled(self) -> bool:
        """AI features are available only when an OpenAI key is configured."""
        return bool(self.openai_api_key)

    @property
    def email_enabled(self) -> bool:
        return bool(self.resend_api_key)

settings = Settings()
