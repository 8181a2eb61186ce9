"""
Application settings and configuration.

Loads environment variables for source endpoints, credentials, timeouts,
caching and logging.
"""
from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Minimum log level")
    LOG_JSON: bool = Field(default=False, description="Render logs as JSON lines")

    # Resolution
    ADAPTER_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0, description="Per-adapter deadline within one resolution")
    COMPARABLES_LIMIT: int = Field(default=10, ge=0, description="Maximum comparable sales returned")
    ACTIVE_LISTINGS_LIMIT: int = Field(default=50, description="Active listings scanned for the subject address")

    # HTTP
    HTTP_TIMEOUT_SECONDS: float = Field(default=10.0, description="aiohttp total timeout per request")
    USER_AGENT: str = Field(default="propdata/1.0 (+property-data-resolver)")

    # Listing feed (REALTOR.ca DDF style)
    DDF_BASE_URL: str = Field(default="https://ddf.realtor.ca/api/v1")
    DDF_USERNAME: Optional[str] = Field(default=None)
    DDF_PASSWORD: Optional[str] = Field(default=None)

    # Government assessment search (address -> PID -> assessment detail)
    ASSESSMENT_SEARCH_URL: Optional[str] = Field(default=None, description="Base URL of the assessment search API")
    ASSESSMENT_SEARCH_API_KEY: Optional[str] = Field(default=None)

    # Geocoding / GIS
    BC_GEOCODER_URL: str = Field(default="https://geocoder.api.gov.bc.ca/addresses.json")
    GEOCODER_MIN_SCORE: int = Field(default=90, description="Reject geocoder matches scoring below this")
    DATABC_WFS_URL: str = Field(default="https://openmaps.gov.bc.ca/geo/pub/wfs")

    # Cache
    CACHE_ENABLED: bool = Field(default=True)
    CACHE_TTL_SECONDS: int = Field(default=900)
    CACHE_MAX_ENTRIES: int = Field(default=256)

    # City portal configuration
    CITY_CONFIG_DIR: Path = Field(default=Path(__file__).parent / "cities")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
