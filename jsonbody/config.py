"""All settings, loaded from the environment or a .env file."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="JSONBODY_", env_file=".env", extra="ignore")

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Request checks
    # A request without any Content-Type header is let through to the JSON
    # decoder unless this is set, in which case it is rejected like a wrong one.
    require_content_type: bool = False

    # Response codes
    error_status: int = 400
    server_error_status: int = 500


@lru_cache
def get_settings() -> Settings:
    return Settings()
