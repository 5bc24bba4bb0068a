"""
Application settings.

Values come from environment variables or a local .env file.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Base de datos
    DATABASE_URL: str = "sqlite:///./travelmap.db"

    # Mapbox
    MAPBOX_ACCESS_TOKEN: str = ""
    MAPBOX_BASE_URL: str = "https://api.mapbox.com"
    MAPBOX_MONTHLY_REQUEST_LIMIT: int = 10000
    MAPBOX_TIMEOUT_SECONDS: float = 15.0

    # Matrix API accepts at most 25 coordinates per request
    MAX_SORT_MARKERS: int = 25

    # Logs
    LOG_PATH: str = ""
    LOG_LEVEL: str = "INFO"


settings = Settings()
