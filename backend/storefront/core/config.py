"""
Store configuration, read from the environment and an optional .env file.

Everything is validated once at import; a bad SECRET_KEY or DATABASE_URL
stops the process before it starts serving.
"""

from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json

# Accepted URL schemes and the async driver each one runs on
DATABASE_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "sqlite+aiosqlite": "sqlite+aiosqlite",
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+asyncpg": "postgresql+asyncpg",
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Secrets should never be committed to code - use .env file (gitignored).

    Provider credentials (Razorpay, Resend, SMTP, Supabase storage) default
    to empty strings. Features backed by an unconfigured provider answer 503,
    except OTP delivery which logs the code instead.
    """

    # API Configuration
    api_prefix: str = Field(
        default="/api",
        description="Prefix for all store endpoints"
    )
    project_name: str = Field(
        default="Big Dawgs RC Store API",
        description="Project name displayed in API docs"
    )
    store_name: str = Field(
        default="Big Dawgs RC Store",
        description="Store name used in outgoing emails"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/store.db",
        description="Database connection URL (SQLite for development, PostgreSQL in production)"
    )
    db_create_all: bool = Field(
        default=False,
        description="Create missing tables at startup (development only, migrations are external)"
    )

    # Security Configuration
    secret_key: str = Field(
        ...,
        description="Secret key for JWT token signing (generate with: openssl rand -hex 32)"
    )
    customer_token_expire_minutes: int = Field(
        default=7 * 24 * 60,
        description="Customer JWT lifetime in minutes (default: 7 days)"
    )
    admin_token_expire_minutes: int = Field(
        default=8 * 60,
        description="Admin JWT lifetime in minutes (default: 8 hours)"
    )
    otp_ttl_minutes: int = Field(
        default=10,
        ge=1,
        description="Minutes before a one-time password expires"
    )
    otp_log_fallback: bool = Field(
        default=False,
        description="Write one-time codes to the log when no email/SMS provider is configured (development only)"
    )

    # Razorpay payment gateway
    razorpay_key_id: str = Field(
        default="",
        description="Razorpay API key id"
    )
    razorpay_key_secret: str = Field(
        default="",
        description="Razorpay API key secret (also signs payment callbacks)"
    )
    razorpay_base_url: str = Field(
        default="https://api.razorpay.com/v1",
        description="Razorpay REST API base URL"
    )
    payment_currency: str = Field(
        default="INR",
        description="Currency used for gateway orders"
    )
    max_order_amount: float = Field(
        default=10_000_000,
        gt=0,
        description="Largest amount, in major units, accepted for a gateway order"
    )

    # Customer email (Resend)
    resend_api_key: str = Field(
        default="",
        description="Resend API key for customer OTP emails"
    )
    resend_api_url: str = Field(
        default="https://api.resend.com/emails",
        description="Resend send-email endpoint"
    )
    email_from: str = Field(
        default="onboarding@resend.dev",
        description="Sender address for customer emails"
    )

    # Admin email (SMTP)
    smtp_host: str = Field(default="", description="SMTP host for admin OTP emails")
    smtp_port: int = Field(default=587, description="SMTP port (465 = implicit TLS)")
    smtp_user: str = Field(default="", description="SMTP username, also used as sender")
    smtp_pass: str = Field(default="", description="SMTP password")

    # Object storage (Supabase Storage)
    supabase_url: str = Field(
        default="",
        description="Supabase project URL hosting the image bucket"
    )
    supabase_service_key: str = Field(
        default="",
        description="Supabase service role key"
    )
    storage_bucket: str = Field(
        default="product-images",
        description="Bucket receiving product image uploads"
    )
    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum accepted image upload size in bytes"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=True, description="Emit JSON log lines")

    # Rate limiting
    disable_rate_limit: bool = Field(
        default=False,
        description="Turn the per-IP rate limiter off (tests, trusted networks)"
    )
    auth_rate_limit: int = Field(
        default=10,
        description="Requests per minute per IP on /auth endpoints"
    )
    default_rate_limit: int = Field(
        default=60,
        description="Requests per minute per IP on other endpoints"
    )

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins (frontend URLs)"
    )
    trusted_proxies: List[str] = Field(
        default=[],
        description=(
            "Peer addresses whose X-Forwarded-For header is believed "
            "(\"*\" trusts any peer, for platforms that always front the app with their own proxy)"
        )
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    @field_validator("cors_origins", "trusted_proxies", mode="before")
    @classmethod
    def parse_origin_lists(cls, v: str | List[str]) -> List[str]:
        """
        Parse cors_origins and trusted_proxies from a JSON string or list.

        Supports comma-separated values for easier .env configuration.
        """
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """
        Validate that secret_key is properly configured.

        Raises ValueError if still using placeholder value or too short.
        JWT signing keys must be at least 32 characters.
        """
        if not v or v.strip() == "":
            raise ValueError(
                "SECRET_KEY is required and cannot be empty. "
                "Generate one with: openssl rand -hex 32"
            )
        if v in ["generate-with-openssl-rand-hex-32", "CHANGE_ME_32_CHARS_MIN", "your-secret-key-here", "secret"]:
            raise ValueError(
                "SECRET_KEY must be set to a secure random value (not placeholder). "
                "Generate one with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError(
                f"SECRET_KEY must be at least 32 characters long for security. "
                f"Current length: {len(v)}. Generate with: openssl rand -hex 32"
            )
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """
        Validate the database URL and pin it to an async driver.

        SQLite (development) and PostgreSQL (production) are supported.
        Hosted Postgres providers hand out ``postgres://`` or plain
        ``postgresql://`` URLs; those are rewritten to asyncpg, and plain
        ``sqlite://`` to aiosqlite.
        """
        if not v or v.strip() == "":
            raise ValueError("DATABASE_URL is required and cannot be empty")

        scheme, sep, rest = v.strip().partition("://")
        if not sep or scheme not in DATABASE_DRIVERS:
            raise ValueError(
                f"DATABASE_URL must start with one of: {', '.join(sorted(DATABASE_DRIVERS))}. "
                f"Got: {v[:20]}..."
            )
        return f"{DATABASE_DRIVERS[scheme]}://{rest}"

    @property
    def razorpay_configured(self) -> bool:
        return bool(self.razorpay_key_id and self.razorpay_key_secret)

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user)

    @property
    def storage_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)


# Global settings instance
# Import this instance throughout the application
settings = Settings()
