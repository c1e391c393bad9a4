"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

from pydantic import model_validator
from pydantic_settings import BaseSettings

VALID_ENVS = frozenset({"development", "staging", "production"})


class Settings(BaseSettings):
    """Peloton application configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Database
    database_url: str = "sqlite+aiosqlite:///peloton.db"

    # Environment
    peloton_env: str = "development"

    # Team
    peloton_team_name: str = "Peloton"

    # Logging
    peloton_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_environment(self) -> Settings:
        """Reject unknown environments and in-memory databases in production."""
        if self.peloton_env not in VALID_ENVS:
            msg = f"PELOTON_ENV must be one of {sorted(VALID_ENVS)}, got {self.peloton_env!r}"
            raise ValueError(msg)
        if self.peloton_env == "production" and ":memory:" in self.database_url:
            msg = "DATABASE_URL must point at a persistent database in production."
            raise ValueError(msg)
        return self
