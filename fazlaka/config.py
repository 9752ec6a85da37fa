"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = "sqlite:///./fazlaka.db"

    # Session tokens
    jwt_secret_key: str = "change-me-in-production"  # Generate with: openssl rand -hex 32
    jwt_algorithm: str = "HS256"
    session_token_expire_days: int = 30

    # Password hashing
    bcrypt_rounds: int = 10

    # Proof lifetimes
    email_verification_ttl_hours: int = 24
    password_reset_ttl_hours: int = 24
    magic_link_ttl_hours: int = 24
    otp_ttl_minutes: int = 10
    email_change_ttl_minutes: int = 10
    otp_verified_ttl_minutes: int = 10

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:8000/api/auth/google/callback"

    # Email (SendGrid)
    sendgrid_api_key: str = ""
    email_from_address: str = "no-reply@fazlaka.com"
    email_from_name: str = "Fazlaka"
    contact_receiver_email: str = "contact@fazlaka.com"
    frontend_url: str = "http://localhost:3000"

    # Application
    log_level: str = "INFO"
    debug: bool = False

    # CORS
    allowed_origins: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


settings = Settings()
