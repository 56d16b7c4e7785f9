"""Client configuration loading.

config can come from a yaml file or from EXECFORGE_* environment variables
(EXECFORGE_DOMAIN, EXECFORGE_USERNAME, EXECFORGE_PASSWORD, EXECFORGE_PROJECT_ID,
...). the yaml file looks like:

    domain: https://secure.gooddata.com
    username: me@example.com
    password: hunter2
    project_id: GoodSalesDemo
"""

from pathlib import Path

import yaml
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientConfig(BaseSettings):
    """Connection settings for the platform.

    plain construction reads EXECFORGE_* env vars for anything not passed in.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXECFORGE_", env_ignore_empty=True, extra="ignore"
    )

    domain: str = "https://secure.gooddata.com"
    username: str | None = None
    password: SecretStr | None = None  # never shows up in reprs or logs
    project_id: str | None = None
    timeout: float = Field(default=30.0, gt=0)
    poll_interval: float = Field(default=1.0, ge=0)
    max_poll_attempts: int = Field(default=60, ge=1)

    @field_validator("domain")
    @classmethod
    def normalize_domain(cls, value: str) -> str:
        value = value.rstrip("/")
        if not value.startswith(("http://", "https://")):
            value = f"https://{value}"
        return value

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ClientConfig":
        """Load config from a yaml file.

        anything the file leaves out still comes from EXECFORGE_* env vars,
        handy for keeping the password out of the file.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls(**data)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load config from EXECFORGE_* environment variables."""
        return cls()
