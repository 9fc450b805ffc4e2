"""
Accountwork Settings - Configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .models import ToolPaths

# Find project root (where .env file is located)
PROJECT_ROOT = Path(__file__).parent.parent


class AccountworkSettings(BaseSettings):
    """
    Accountwork configuration settings.

    Settings are loaded from:
    1. Environment variables (highest priority)
    2. .env file in current directory
    3. Default values (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="AW_",  # All Accountwork env vars must start with AW_
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR) (env: AW_LOG_LEVEL)",
    )

    # Account tool locations
    useradd_path: str = Field(
        default="useradd",
        description="Executable used to add accounts (env: AW_USERADD_PATH)",
    )

    usermod_path: str = Field(
        default="usermod",
        description="Executable used to modify accounts (env: AW_USERMOD_PATH)",
    )

    userdel_path: str = Field(
        default="userdel",
        description="Executable used to delete accounts (env: AW_USERDEL_PATH)",
    )

    chage_path: str = Field(
        default="chage",
        description="Executable used to manage password aging (env: AW_CHAGE_PATH)",
    )

    # Platform detection
    os_family: str | None = Field(
        default=None,
        description="Override the detected operating system family (env: AW_OS_FAMILY)",
    )

    detect_timeout: float = Field(
        default=5.0,
        description="Seconds to wait for tool probes during detection (env: AW_DETECT_TIMEOUT)",
    )

    @field_validator("useradd_path", "usermod_path", "userdel_path", "chage_path")
    @classmethod
    def _non_empty_path(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("tool path must not be empty")
        return value

    def tool_paths(self) -> ToolPaths:
        """
        Build the executable placeholders for the four account tools.

        Returns:
            ToolPaths instance
        """
        return ToolPaths(
            add=self.useradd_path,
            modify=self.usermod_path,
            delete=self.userdel_path,
            password=self.chage_path,
        )


# Global settings instance
_settings: AccountworkSettings | None = None


def _load() -> AccountworkSettings:
    try:
        return AccountworkSettings()
    except ValueError as e:
        raise ConfigurationError(f"Invalid Accountwork settings: {e}") from e


def get_settings() -> AccountworkSettings:
    """
    Get the global settings instance.

    Creates the settings instance on first call, then returns cached instance.

    Returns:
        AccountworkSettings instance
    """
    global _settings
    if _settings is None:
        _settings = _load()
    return _settings


def reload_settings() -> AccountworkSettings:
    """
    Reload settings from environment/files.

    Useful for testing or when .env file changes.

    Returns:
        Fresh AccountworkSettings instance
    """
    global _settings
    _settings = _load()
    return _settings
