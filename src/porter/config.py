"""Application configuration contract."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from porter.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="PORTER_ENV", default="dev")
    log_level: str = Field(alias="PORTER_LOG_LEVEL", default="WARNING")

    # Export
    output_dir: str = Field(alias="PORTER_OUTPUT_DIR", default="dist")

    # Remote fetch
    github_base_url: str = Field(alias="PORTER_GITHUB_BASE_URL", default="https://github.com")
    fetch_timeout_seconds: int = Field(alias="PORTER_FETCH_TIMEOUT_SECONDS", default=60)
    git_binary: str = Field(alias="PORTER_GIT_BINARY", default="git")


def validate_settings(settings: Settings) -> None:
    problems: list[str] = []
    if settings.fetch_timeout_seconds <= 0:
        problems.append("PORTER_FETCH_TIMEOUT_SECONDS(must be > 0)")
    if not settings.output_dir.strip():
        problems.append("PORTER_OUTPUT_DIR(must be non-empty)")
    if not settings.github_base_url.startswith(("http://", "https://")):
        problems.append("PORTER_GITHUB_BASE_URL(http or https url required)")
    if not settings.git_binary.strip():
        problems.append("PORTER_GIT_BINARY(must be non-empty)")
    if problems:
        raise ConfigError(f"invalid configuration: {', '.join(problems)}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
