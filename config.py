"""
Centralized configuration for the PCD codec.
Compatible with pydantic-settings 2.x
"""
import io
import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _resolve_env_path() -> Path:
    """Resolve .env from the repo root (cwd-proof)."""
    return Path(__file__).resolve().parent / ".env"


_env_path = _resolve_env_path()


class Settings(BaseSettings):
    """Codec settings, overridable from the environment or .env"""

    model_config = SettingsConfigDict(
        env_file=str(_env_path) if _env_path.exists() else None,
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== ENVIRONMENT ====================
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # ==================== WRITER ====================
    # DATA kind used when a writer is built without an explicit one.
    PCD_DATA_KIND: str = Field(default="ascii")
    # Buffer size for files opened by SeqWriter.create().
    PCD_WRITE_BUFFER_SIZE: int = Field(default=io.DEFAULT_BUFFER_SIZE)

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v):
        s = str(v or "INFO").strip().upper()
        if s not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return s

    @field_validator("PCD_DATA_KIND", mode="before")
    @classmethod
    def validate_data_kind(cls, v):
        s = str(v or "ascii").strip().lower()
        if s not in ("ascii", "binary"):
            raise ValueError("PCD_DATA_KIND must be 'ascii' or 'binary' (binary_compressed is not supported)")
        return s

    @field_validator("PCD_WRITE_BUFFER_SIZE")
    @classmethod
    def validate_buffer_size(cls, v):
        if v <= 0:
            raise ValueError("PCD_WRITE_BUFFER_SIZE must be > 0")
        return v


def configure_logging(level: Optional[str] = None) -> None:
    """Install the root handler. DEBUG wins over LOG_LEVEL."""
    if level is None:
        level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    logging.basicConfig(level=getattr(logging, level.upper()), format=_LOG_FORMAT)


# Global settings instance (fail-fast on invalid configuration).
try:
    settings = Settings()
except ValidationError as e:
    raise RuntimeError(
        "Invalid PCD codec configuration. Check PCD_DATA_KIND, PCD_WRITE_BUFFER_SIZE and LOG_LEVEL."
    ) from e

logger.debug(f"Env: {settings.ENVIRONMENT}")
logger.debug(f"PCD defaults: data={settings.PCD_DATA_KIND} buffer={settings.PCD_WRITE_BUFFER_SIZE}")
