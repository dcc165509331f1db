"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here. No scattered magic strings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_accounts() -> dict[str, str]:
    return {"admin": "admin", "user": "user", "john": "john"}


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        database_url: SQLAlchemy URL of the entity store.
        database_echo: Log every SQL statement.
        password_min_length: Minimum length of a user password.
        password_hash_iterations: PBKDF2 iteration count for stored passwords.
        auth_enabled: Require HTTP Basic credentials on the API routes.
        auth_users: Username to password map of accounts allowed to call the API.
        rate_limit_enabled: Apply the default rate limit to every route.
        rate_limit_default: Default rate limit for all endpoints.
        max_request_size_bytes: Maximum allowed request body size.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "Taskboard"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite:///./taskboard.db"
    database_echo: bool = False

    password_min_length: int = 8
    password_hash_iterations: int = 260_000

    auth_enabled: bool = True
    auth_users: dict[str, str] = Field(default_factory=_default_accounts)

    rate_limit_enabled: bool = True
    rate_limit_default: str = "120/minute"
    max_request_size_bytes: int = 1_048_576  # 1 MB


settings = Settings()
