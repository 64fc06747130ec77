"""Configuration settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost/patriot_thanks"

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_lock_ttl_seconds: int = 5

    # Google Maps Platform
    google_maps_api_key: str = ""
    places_base_url: str = "https://places.googleapis.com/v1"
    geocode_base_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    places_search_radius_m: float = 40234.0  # 25 miles

    # Timeouts (seconds)
    external_timeout_seconds: float = 10.0
    store_timeout_seconds: float = 10.0

    # Batch geocoding
    geocode_batch_limit: int = 10

    # Auth provider (HS256 tokens shared with the web frontend)
    auth_jwt_secret: str = ""
    auth_jwt_algorithm: str = "HS256"

    # Admin console bot
    bot_token: str = ""
    admin_telegram_ids: str = ""

    # Rate Limiting
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: int = 60

    # Logging
    log_level: str = "INFO"

    # Application
    app_name: str = "patriot-thanks"
    environment: str = "development"

    # HTTP API
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    @property
    def admin_user_ids(self) -> list[int]:
        """Parse admin Telegram user IDs from comma-separated string."""
        if not self.admin_telegram_ids:
            return []
        return [int(uid.strip()) for uid in self.admin_telegram_ids.split(",") if uid.strip()]


def load_settings() -> Settings:
    """Load and validate settings from environment."""
    return Settings()
