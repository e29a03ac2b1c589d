import logging
from pathlib import Path
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from stt.common.logger import log
from stt.common.setup import PATHS

_DEFAULT_TICK_MS = 500
_DEFAULT_LOG_LEVEL = logging.INFO


# Everything the app needs to know at startup, resolved once from STT_* environment variables and passed
# down explicitly. Malformed values are dropped with a warning and the default is used instead.
class AppConfig(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="STT_",
        extra="ignore",
        frozen=True,
    )

    database_path: Path = Field(default_factory=lambda: PATHS.database)
    tick_interval_ms: int = Field(
        default=_DEFAULT_TICK_MS,
        validation_alias=AliasChoices("STT_TICK_MS", "tick_interval_ms"),
    )
    default_dark_mode: bool = True
    window_size: tuple[int, int] = (700, 400)
    log_level: int = _DEFAULT_LOG_LEVEL

    @field_validator("tick_interval_ms", mode="before")
    @classmethod
    def _positive_tick(cls, v):
        try:
            value = int(v)
        except (TypeError, ValueError):
            value = 0
        if value <= 0:
            log.warning(f"Ignoring invalid STT_TICK_MS '{v}', using {_DEFAULT_TICK_MS} ms")
            return _DEFAULT_TICK_MS
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_level(cls, v):
        if isinstance(v, int):
            return v
        level = logging.getLevelName(str(v).strip().upper())
        if not isinstance(level, int):
            log.warning(f"Ignoring unknown STT_LOG_LEVEL '{v}', using {logging.getLevelName(_DEFAULT_LOG_LEVEL)}")
            return _DEFAULT_LOG_LEVEL
        return level


def load_config():
    config = AppConfig()
    log.info(f"Loaded config: database '{config.database_path}', tick {config.tick_interval_ms} ms")
    return config
