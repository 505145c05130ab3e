"""Pydantic Settings model for application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # Deployment instance, used for the Connect app key and name
    INSTANCE_NAME: str | None = None

    # Installation and subscription store
    STORE_PATH: Path = Path("store.yaml")

    # Jira API settings
    JIRA_TIMEOUT: float = 30.0

    # GitHub API settings
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TOKEN: str | None = None


settings = Settings()
