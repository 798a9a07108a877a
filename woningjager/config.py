"""Configuration settings for the crawler."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    data_dir: Path = Path("data")
    database_url: str | None = None

    # Run selection
    filter_platform: str | None = None
    environment: str = "production"
    interval_minutes: int = 30

    # Interest criteria
    areas_file: Path | None = None
    default_city: str = "Amsterdam"
    min_meters: int = 59

    # Notifications
    telegram_token: str | None = None
    telegram_chat_id: str | None = None

    # Enrichment providers
    google_maps_api_key: str | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"

    # Fetching
    request_timeout: float = 30.0
    browser_max_concurrency: int = 2
    browser_timeout: float = 15.0

    # User agent
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "WONINGJAGER_"}

    @property
    def development(self) -> bool:
        """Development mode forces AI enrichment for every new listing."""
        return self.environment.lower() == "development"

    def get_database_url(self) -> str:
        """Database URL, defaulting to a SQLite file inside the data dir."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'properties.db'}"


settings = Settings()
