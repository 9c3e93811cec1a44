"""Root application settings for Lianxin."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lianxin.config.models.enums import Environment

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


class Settings(BaseSettings):
    """Application-level settings.

    Loaded in this order:
    1. Pydantic model defaults (in code)
    2. LIANXIN_* environment variables (runtime overrides)

    Database connection parameters are not part of this model. They are
    resolved separately from the DB_* variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="LIANXIN_",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="lianxin", description="Application name for logging")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment tier (development, test, production)",
    )
    log_level: LogLevel = Field(default="INFO", description="Logging level")
    log_format: LogFormat = Field(default="json", description="Log renderer")
    redact_secrets: bool = Field(default=True, description="Redact secrets in logs")
    env_file: str = Field(default=".env", description="Dotenv file holding DB_* variables")
