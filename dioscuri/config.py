from typing import Annotated, Literal, get_args

from pydantic import BeforeValidator, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_URL = "gemini://geminiprotocol.net/"
DEFAULT_PORT = 1965

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)


def _upper(value: object) -> object:
    return value.upper() if isinstance(value, str) else value


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    default_url: str = Field(DEFAULT_URL, validation_alias="DIOSCURI_DEFAULT_URL")
    default_port: int = Field(DEFAULT_PORT, ge=1, le=65535, validation_alias="DIOSCURI_DEFAULT_PORT")

    # Bounds the wait for the next terminal event, never an in-flight request.
    tick_rate_ms: int = Field(300, gt=0, validation_alias="DIOSCURI_TICK_RATE_MS")

    connect_timeout_seconds: float = Field(5.0, gt=0, validation_alias="DIOSCURI_CONNECT_TIMEOUT_SECONDS")
    read_timeout_seconds: float = Field(15.0, gt=0, validation_alias="DIOSCURI_READ_TIMEOUT_SECONDS")

    log_file: str = Field("dioscuri.log", validation_alias="DIOSCURI_LOG_FILE")
    log_level: Annotated[LogLevel, BeforeValidator(_upper)] = Field("INFO", validation_alias="DIOSCURI_LOG_LEVEL")

    @property
    def tick_rate_seconds(self) -> float:
        return self.tick_rate_ms / 1000
