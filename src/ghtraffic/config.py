"""Configuration management for ghtraffic."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ghtraffic.dates import LOCAL_OFFSET_DAYS, SCHEDULED_OFFSET_DAYS


class ConfigurationError(Exception):
    """Raised when required settings are missing."""


class RepoFilter(BaseModel):
    """Repository filter loaded from repos.yaml.

    An empty ``include`` list keeps every enumerated repository.
    """

    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)

    def apply(self, names: list[str]) -> list[str]:
        """Filter repository names, keeping enumeration order.

        Args:
            names: Enumerated repository names.

        Returns:
            Names passing the include and exclude lists.
        """
        kept = [n for n in names if not self.include or n in self.include]
        return [n for n in kept if n not in self.exclude]


class Settings(BaseSettings):
    """Application settings from environment variables and config files."""

    model_config = SettingsConfigDict(
        env_prefix="GHTRAFFIC_",
        env_file=".env",
        extra="ignore",
    )

    github_token: str = ""
    account: str = ""
    data_path: Path = Path("data/traffic.csv")
    config_dir: Path = Path("config")
    mode: Literal["local", "scheduled"] = "local"
    offset_days: int | None = None
    request_delay: float = 0.1
    timeout: float = 30.0

    def effective_offset(self) -> int:
        """Offset of the incremental target date for the configured mode."""
        if self.offset_days is not None:
            return self.offset_days
        if self.mode == "scheduled":
            return SCHEDULED_OFFSET_DAYS
        return LOCAL_OFFSET_DAYS

    def backfill_on_first_run(self) -> bool:
        return self.mode == "local"

    def validate_for_collection(self) -> None:
        """Check that a collection run can start.

        Raises:
            ConfigurationError: If the token or the account is missing.
        """
        if not self.github_token:
            raise ConfigurationError("GHTRAFFIC_GITHUB_TOKEN not set")
        if not self.account:
            raise ConfigurationError("GHTRAFFIC_ACCOUNT not set")

    def load_filter(self) -> RepoFilter:
        """Load the repository filter from repos.yaml.

        Returns:
            Configured filter, or a pass-through filter when the file is absent.
        """
        repos_file = self.config_dir / "repos.yaml"
        if not repos_file.exists():
            return RepoFilter()

        with open(repos_file) as f:
            data = yaml.safe_load(f) or {}

        return RepoFilter(**data)


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings loaded from environment and config files.
    """
    return Settings()
