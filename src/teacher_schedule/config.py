"""Client configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class ScheduleConfig(BaseSettings):
    """Configuration for the schedule client, loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Backend API
    api_url: str = Field(
        default="http://localhost:8000/api",
        description="Base URL of the school admin REST API",
    )
    api_email: str = Field(
        default="",
        description="Admin account email used for /auth/login",
    )
    api_password: str = Field(
        default="",
        description="Admin account password used for /auth/login",
    )
    api_token: str = Field(
        default="",
        description="Pre-issued access token (skips login when set)",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Per-request HTTP timeout in seconds",
    )

    # Calendar grid
    grid_start: str = Field(
        default="08:00",
        description="First row of the weekly calendar grid (HH:MM)",
    )
    grid_end: str = Field(
        default="22:00",
        description="Last row of the weekly calendar grid, inclusive (HH:MM)",
    )
    slot_minutes: int = Field(
        default=30,
        description="Grid granularity in minutes",
    )

    # Trial intake
    trial_minutes: int = Field(
        default=60,
        description="Default trial length used to prefill the end time",
    )
    search_debounce_seconds: float = Field(
        default=0.3,
        description="Delay before a student search query is sent",
    )
    search_page_size: int = Field(
        default=10,
        description="Number of students returned per search",
    )
    course_page_size: int = Field(
        default=100,
        description="Number of courses loaded for the course select",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "SCHEDULE_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: ScheduleConfig | None = None


def get_config() -> ScheduleConfig:
    """Get the schedule client configuration singleton.

    Returns:
        ScheduleConfig: Configuration instance
    """
    global _config
    if _config is None:
        _config = ScheduleConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the env."""
    global _config
    _config = None
