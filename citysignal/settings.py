from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Application
    APP_NAME: str = "City Signal Traffic Service"
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Simulation
    TICK_INTERVAL_SECONDS: float = 1.0
    SIMULATION_SEED: Optional[int] = None
    SIGNALS_FILE: Optional[str] = None  # packaged fixture when unset

    # Routing provider
    OSRM_BASE_URL: str = "https://router.project-osrm.org"
    ROUTING_TIMEOUT_SECONDS: float = 10.0

    # Incidents
    INCIDENTS_FILE: Optional[str] = None  # JSON incident feed; none reported when unset
    INCIDENT_WINDOW_HOURS: float = 24.0

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
