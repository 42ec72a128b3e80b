"""Application configuration via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Studio RSVP"
    environment: str = "development"  # development | production | testing
    debug: bool = False
    log_dir: str = "~/.logs/studio"

    # Server
    allowed_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    frontend_url: str = "http://localhost:3000"

    # Database
    database_url: str = "sqlite:///./studio.db"

    # Tokens. Access and refresh tokens are signed with independent secrets.
    jwt_secret: str = "change-me-access-secret"
    jwt_refresh_secret: str = "change-me-refresh-secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 30

    # One-time codes
    otp_expire_minutes: int = 10

    # Google OAuth (admin login)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:3000/auth/google/callback"
    admin_email: str = ""  # The only email allowed to log in with Google

    # Session dates and times are wall-clock values in this zone
    studio_timezone: str = "Asia/Jerusalem"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def share_url(self, session_id: str) -> str:
        """Link participants open to answer for a session."""
        return f"{self.frontend_url.rstrip('/')}/session/{session_id}"

    @property
    def origins(self) -> list[str]:
        if self.allowed_origins == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
