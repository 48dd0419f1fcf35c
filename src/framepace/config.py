"""
FramePace Configuration
=======================

This module handles configuration loading for the frame streaming service.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    FRAMEPACE_HOST           -> server.host
    FRAMEPACE_PORT           -> server.port
    PORT                     -> server.port (container platforms)
    FRAMEPACE_WS_PATH        -> server.websocket_path
    FRAMEPACE_DEFAULT_WIDTH  -> stream.default_width
    FRAMEPACE_DEFAULT_HEIGHT -> stream.default_height
    FRAMEPACE_DEFAULT_FPS    -> stream.default_fps
    FRAMEPACE_POOL_SIZE      -> stream.pool_size
    FRAMEPACE_MAX_DIMENSION  -> stream.max_dimension
    FRAMEPACE_LOG_LEVEL      -> logging.level
    FRAMEPACE_LOG_FORMAT     -> logging.format

Example:
    from framepace.config import settings

    print(settings.server.port)
    print(settings.stream.default_fps)
"""

import os
import logging
import math
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from framepace.models.control import MICROSECONDS_PER_SECOND


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="framepace", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")
    websocket_path: str = Field(
        default="/",
        description="Path of the frame streaming WebSocket endpoint",
    )


class StreamConfig(BaseModel):
    """Per-connection streaming defaults."""

    default_width: int = Field(default=1024, ge=1, description="Initial frame width")
    default_height: int = Field(default=1024, ge=1, description="Initial frame height")
    default_fps: float = Field(default=60.0, gt=0, description="Initial target frame rate")
    pool_size: int = Field(
        default=5,
        ge=1,
        description="Number of pre-rendered frames cycled during playback",
    )
    max_dimension: int = Field(
        default=8192,
        ge=1,
        description="Largest width or height a Resize may request",
    )
    max_idle_wait_seconds: float = Field(
        default=0.5,
        gt=0,
        description="Upper bound on how long the sender sleeps between checks",
    )

    @field_validator("default_fps")
    @classmethod
    def default_fps_gives_finite_interval(cls, value: float) -> float:
        if not math.isfinite(MICROSECONDS_PER_SECOND / value):
            raise ValueError(f"default_fps {value!r} is too small to pace")
        return value


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for FramePace.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Server settings (container platforms use PORT)
    if env_host := os.environ.get("FRAMEPACE_HOST"):
        config_data.setdefault("server", {})["host"] = env_host
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("FRAMEPACE_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    if env_path := os.environ.get("FRAMEPACE_WS_PATH"):
        config_data.setdefault("server", {})["websocket_path"] = env_path

    # Stream defaults
    if env_width := os.environ.get("FRAMEPACE_DEFAULT_WIDTH"):
        config_data.setdefault("stream", {})["default_width"] = int(env_width)
    if env_height := os.environ.get("FRAMEPACE_DEFAULT_HEIGHT"):
        config_data.setdefault("stream", {})["default_height"] = int(env_height)
    if env_fps := os.environ.get("FRAMEPACE_DEFAULT_FPS"):
        config_data.setdefault("stream", {})["default_fps"] = float(env_fps)
    if env_pool := os.environ.get("FRAMEPACE_POOL_SIZE"):
        config_data.setdefault("stream", {})["pool_size"] = int(env_pool)
    if env_max := os.environ.get("FRAMEPACE_MAX_DIMENSION"):
        config_data.setdefault("stream", {})["max_dimension"] = int(env_max)

    # Logging settings
    if env_log := os.environ.get("FRAMEPACE_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_fmt := os.environ.get("FRAMEPACE_LOG_FORMAT"):
        config_data.setdefault("logging", {})["format"] = env_fmt


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
