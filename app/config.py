"""
sub2api Configuration

Loads settings from environment variables with validation.
"""

from functools import lru_cache

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class TokenRefreshConfig(BaseModel):
    """Settings shared by the background token and quota refreshers."""

    enabled: bool = True
    check_interval_minutes: int = 5
    refresh_before_expiry_hours: float = 1.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # Application
    # ==========================================================================
    app_name: str = "sub2api"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # Database
    # ==========================================================================
    database_url: str = "sqlite:///./sub2api.db"

    # ==========================================================================
    # Token / quota refresh
    # ==========================================================================
    token_refresh_enabled: bool = True
    token_refresh_check_interval_minutes: int = 5
    token_refresh_before_expiry_hours: float = 1.0

    # ==========================================================================
    # Subscriptions
    # ==========================================================================
    subscription_expiry_check_minutes: int = 10

    # ==========================================================================
    # Upstream: Antigravity
    # ==========================================================================
    antigravity_base_url: str = "https://cloudcode-pa.googleapis.com/v1internal"
    antigravity_oauth_token_url: str = "https://oauth2.googleapis.com/token"
    antigravity_oauth_client_id: str = ""
    antigravity_oauth_client_secret: str = ""

    # ==========================================================================
    # Upstream: Anthropic
    # ==========================================================================
    anthropic_usage_url: str = "https://api.anthropic.com/api/oauth/usage"

    upstream_timeout_seconds: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def token_refresh(self) -> TokenRefreshConfig:
        """Refresher settings grouped the way the schedulers consume them."""
        return TokenRefreshConfig(
            enabled=self.token_refresh_enabled,
            check_interval_minutes=self.token_refresh_check_interval_minutes,
            refresh_before_expiry_hours=self.token_refresh_before_expiry_hours,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience access
settings = get_settings()
