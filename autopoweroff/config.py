"""
Configuration management for autopoweroff.

This module uses Pydantic's BaseSettings to manage configuration
through environment variables. Every field can be overridden with an
``AUTOPOWEROFF_`` prefixed variable or a ``.env`` file next to the service.
"""
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Watchdog settings.

    These settings are loaded from environment variables.
    """

    # Grace period and tick cadence
    GRACE_PERIOD_SECONDS: float = Field(60, gt=0)
    TICK_INTERVAL_SECONDS: float = Field(1.0, gt=0)

    # PiSugar status service
    STATUS_HOST: str = "127.0.0.1"
    STATUS_PORT: int = Field(8423, ge=1, le=65535)
    PROBE_TIMEOUT: float = Field(0.5, gt=0)  # seconds, must stay below the tick interval

    # Report the status service as lost after this long without a valid reply
    STATUS_LOST_AFTER_SECONDS: float = Field(30, gt=0)

    # Terminal action
    SHUTDOWN_COMMAND: str = "poweroff"
    SHUTDOWN_TIMEOUT: float = Field(30, gt=0)
    DRY_RUN: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        env_prefix="AUTOPOWEROFF_",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_timing(self) -> "Settings":
        if self.PROBE_TIMEOUT >= self.TICK_INTERVAL_SECONDS:
            raise ValueError(
                f"PROBE_TIMEOUT ({self.PROBE_TIMEOUT}s) must be shorter than "
                f"TICK_INTERVAL_SECONDS ({self.TICK_INTERVAL_SECONDS}s)"
            )
        if self.GRACE_PERIOD_SECONDS < self.TICK_INTERVAL_SECONDS:
            raise ValueError(
                f"GRACE_PERIOD_SECONDS ({self.GRACE_PERIOD_SECONDS}s) must be at least "
                f"one tick ({self.TICK_INTERVAL_SECONDS}s)"
            )
        return self


def get_settings(**overrides) -> Settings:
    """
    Build settings from the environment, applying explicit overrides.

    Overrides whose value is None are ignored so CLI options that were not
    given fall back to the environment or the defaults.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**values)


def field_default(name: str):
    """
    Return the declared default of a settings field.

    Used for constructor defaults so importing the package never reads or
    validates the environment; only get_settings() does.
    """
    return Settings.model_fields[name].default
