from functools import lru_cache
from urllib.parse import urlparse

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "FlowFix"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Security
    log_user_emails: bool = False  # GDPR: keep off in production
    allowed_app_url_domains: list[str] = ["localhost", "127.0.0.1"]

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_ssl_mode: str = "prefer"  # disable, prefer, require, verify-ca, verify-full

    # Session tokens issued by the identity provider
    session_token_secret: str
    session_token_algorithm: str = "HS256"
    session_token_audience: str | None = None

    @field_validator("session_token_secret")
    @classmethod
    def validate_session_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "SESSION_TOKEN_SECRET must be changed from default value. "
                "Use the signing secret shared with the identity provider."
            )
        if len(v) < 32:
            raise ValueError("SESSION_TOKEN_SECRET must be at least 32 characters")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Reject wildcards since credentials are allowed."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @field_validator("app_url")
    @classmethod
    def validate_app_url(cls, v: str, info: ValidationInfo) -> str:
        """APP_URL is embedded in e-mails, so it must belong to an allowed domain."""
        allowed = info.data.get("allowed_app_url_domains", ["localhost", "127.0.0.1"])
        hostname = urlparse(v).hostname or ""
        if not any(hostname == domain or hostname.endswith(f".{domain}") for domain in allowed):
            raise ValueError(
                f"APP_URL domain '{hostname}' not in allowed list. "
                f"Add it to ALLOWED_APP_URL_DOMAINS or use: {allowed}"
            )
        return v

    # Payments (Stripe). No secret key means payment processing is unavailable.
    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = None
    stripe_currency: str = "usd"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    # Email (Resend)
    resend_api_key: str | None = None  # If not set, emails are logged but not sent
    email_from: str = "noreply@flowfix.dev"
    app_url: str = "http://localhost:5173"  # Frontend URL for links in emails
    notification_workers: int = 4

    # Admin invites
    admin_invite_expire_days: int = 7

    @property
    def payments_configured(self) -> bool:
        return bool(self.stripe_secret_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
