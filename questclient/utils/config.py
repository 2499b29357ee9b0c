# questclient/utils/config.py
"""
Configuration Management

Loads client settings from environment variables or a .env file.

Version: 1.0.0
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from questclient.models.client_config import ClientConfig

# Application version - single source of truth
__version__ = "1.0.0"


class Settings(BaseSettings):
    """
    Application settings from environment variables.

    AZURE_DEVOPS_TOKEN is a personal access token; it is held as a
    SecretStr so it never appears in reprs or validation errors.
    """

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    # Azure DevOps Configuration
    AZURE_DEVOPS_TOKEN: SecretStr = Field(..., description="Personal access token")
    AZURE_DEVOPS_ORG: str = Field(
        ..., min_length=1, max_length=255, description="Azure DevOps organization"
    )
    AZURE_DEVOPS_PROJECT: str = Field(
        ..., min_length=1, max_length=255, description="Azure DevOps project"
    )

    # Client Behaviour
    QUEST_CHECK_STATUS: bool = Field(
        default=False,
        description="Raise on HTTP error status instead of parsing the body",
    )
    QUEST_REQUEST_TIMEOUT: Optional[float] = Field(
        default=None, gt=0, le=600, description="Total request timeout in seconds"
    )

    # Application Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    @field_validator("AZURE_DEVOPS_TOKEN")
    @classmethod
    def validate_token(cls, v: SecretStr) -> SecretStr:
        """Reject empty tokens."""
        if not v.get_secret_value().strip():
            raise ValueError("AZURE_DEVOPS_TOKEN cannot be empty")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(valid_levels)}")
        return v.upper()

    def to_client_config(self) -> ClientConfig:
        """Build the immutable client config from these settings."""
        return ClientConfig(
            token=self.AZURE_DEVOPS_TOKEN.get_secret_value(),
            organization=self.AZURE_DEVOPS_ORG,
            project=self.AZURE_DEVOPS_PROJECT,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process.

    Returns:
        Settings object with all configuration
    """
    return Settings()
