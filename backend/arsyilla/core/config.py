"""Runtime settings, read from the environment and an optional ``.env`` file.

``get_settings()`` builds the object once per process. The app factory takes
it as an argument, so tests construct their own ``Settings(...)`` instead of
patching globals.
"""

from enum import Enum
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Settings are unusable for the selected environment."""


class Settings(BaseSettings):
    """Every knob the service reads. Variable names are the upper-cased field names."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Environment.DEVELOPMENT

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of browser origins; '*' is rejected",
    )

    # Placement registry
    database_url: str = "sqlite:///./arsyilla.db"

    # GitHub account that holds every backup repository
    github_token: str = Field(default="", description="Token with repo scope")
    github_owner: str = Field(default="", description="Login used in contents and raw URLs")
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    github_branch: str = "main"
    github_timeout: float = Field(default=30.0, gt=0, description="Seconds per GitHub request")
    # 0 keeps last-write-wins: a write rejected for a stale sha is reported, not retried.
    github_conflict_retries: int = Field(default=0, ge=0)

    # Repository naming
    shared_repo_name: str = Field(
        default="Arsyilla-Database-Public",
        description="Single repository holding every /api/db/save database",
    )
    dedicated_repo_suffix: bool = Field(
        default=True,
        description="Append a random hex tag to repositories made by /api/folder",
    )
    commit_message: str = "Backup Update by Arsyilla AI"

    # Logging
    log_level: str = "INFO"
    log_format: str = Field(default="json", description="'json' or 'text'")

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @field_validator("github_api_url", "github_raw_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def get_cors_origins(self) -> List[str]:
        """Split ``CORS_ALLOWED_ORIGINS``. Raises ValueError on a wildcard."""
        origins = [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]
        if "*" in origins:
            raise ValueError("CORS_ALLOWED_ORIGINS may not contain '*'; list origins explicitly")
        return origins

    def configuration_problems(self) -> List[str]:
        """Findings that block a production start and are only warned about in development."""
        problems = []
        if not self.github_token:
            problems.append("GITHUB_TOKEN is not set; repository creation and uploads will fail")
        if not self.github_owner:
            problems.append("GITHUB_OWNER is not set; share links cannot name a repository")

        local = [o for o in self.get_cors_origins() if "localhost" in o or "127.0.0.1" in o]
        if local:
            problems.append(f"CORS_ALLOWED_ORIGINS includes local origins {local}")
        return problems

    def validate_production_config(self) -> None:
        """Raise ConfigurationError in production if ``configuration_problems()`` finds anything."""
        if self.environment != Environment.PRODUCTION:
            return
        problems = self.configuration_problems()
        if problems:
            raise ConfigurationError(
                "Refusing to start in production:\n  - " + "\n  - ".join(problems)
            )


@lru_cache
def get_settings() -> Settings:
    return Settings()
