"""Schedule client configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class ScheduleConfig(BaseSettings):
    """Schedule client configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Team-management backend
    api_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the team-management web app serving /api/schedule",
    )
    api_token: str = Field(
        default="",
        description="Bearer token sent with every API request (empty = no auth header)",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout for API calls",
    )

    # Board settings
    max_week_offset: int = Field(
        default=2,
        description="How many weeks ahead of the current week can be displayed",
    )
    user_timezone: str = Field(
        default="UTC+1",
        description="Display timezone (UTC+0, UTC+1, UTC+2 or UTC+3)",
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
    """Get the schedule configuration singleton.

    Returns:
        ScheduleConfig: Schedule configuration instance
    """
    global _config
    if _config is None:
        _config = ScheduleConfig()
    return _config
