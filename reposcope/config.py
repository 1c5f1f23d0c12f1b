import os
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from reposcope.domain.exceptions import ConfigurationException


class Settings(BaseModel):
    """Runtime settings, read from the environment (and a `.env` file if present)."""
    model_config = ConfigDict(frozen=True)

    github_token: Optional[str] = Field(None, description="Token sent as a Bearer credential to the GitHub API")
    cache_ttl_hours: float = Field(24.0, gt=0, description="Lifetime of a cached analysis")
    log_level: str = "INFO"
    environment: str = "development"

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(hours=self.cache_ttl_hours)


def load_settings() -> Settings:
    """
    Builds Settings from GITHUB_TOKEN, CACHE_TTL_HOURS, LOG_LEVEL and ENVIRONMENT.

    Raises:
        ConfigurationException: if a value is present but invalid.
    """
    load_dotenv()

    values = {
        "github_token": os.getenv("GITHUB_TOKEN") or None,
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "environment": os.getenv("ENVIRONMENT", "development").lower(),
    }
    ttl = os.getenv("CACHE_TTL_HOURS")
    if ttl:
        values["cache_ttl_hours"] = ttl

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationException(f"Invalid configuration: {e}") from e
