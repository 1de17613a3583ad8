import logging
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from iconsmith.app.config.logging_config import LoggingConfigModel

logger = logging.getLogger(__name__)


class RenderingConfig(BaseModel):
    """Configuration for plane rendering and container output.

    Controls the density vector sources are assumed to have at natural size, the
    clamp applied to computed densities, which artifact extensions are packed as
    multi-resolution containers, and the size of the render worker pool.
    """

    default_svg_density: float = Field(default=72.0, gt=0, description="Density assumed for vector sources")
    max_svg_density: float = Field(default=100000.0, gt=0, description="Upper clamp for computed vector densities")
    container_extensions: List[str] = Field(
        default_factory=lambda: [".ico"], description="Artifact extensions always written as ICO containers"
    )
    max_workers: int = Field(default=4, ge=1, description="Worker threads used for image engine calls")

    @field_validator("container_extensions")
    @classmethod
    def _normalize_extensions(cls, value: List[str]) -> List[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in value]


class SchedulingConfig(BaseModel):
    """Fan-out scheduling policy.

    "auto" runs tasks sequentially on Windows, where the native image engine is
    not safely reentrant, and concurrently everywhere else.
    """

    policy: Literal["auto", "concurrent", "sequential"] = "auto"


class GlobalIconConfig(BaseModel):
    """Top-level configuration container for the icon generator."""

    logging: LoggingConfigModel = LoggingConfigModel()
    rendering: RenderingConfig = RenderingConfig()
    scheduling: SchedulingConfig = SchedulingConfig()


def load_app_config(config_path: Optional[str] = None) -> GlobalIconConfig:
    """Load configuration from a YAML file with fallback to defaults.

    Returns the default GlobalIconConfig if no path is given, or if the file is
    missing, empty, or lacks the required 'app' root key. YAML parsing errors
    and validation errors are logged and re-raised.

    Args:
        config_path: Optional path to the YAML configuration file.

    Returns:
        Loaded GlobalIconConfig instance with overrides applied, or defaults.
    """
    if not config_path:
        return GlobalIconConfig()

    logger.debug(f"Loading icon configuration from: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
        if not config_data or "app" not in config_data:
            logger.warning(f"Configuration file {config_path} is empty or missing 'app' root. Using default GlobalIconConfig.")
            return GlobalIconConfig()
        return GlobalIconConfig(**(config_data.get("app") or {}))
    except FileNotFoundError:
        logger.warning(f"Configuration file not found at {config_path}. Using default GlobalIconConfig.")
        return GlobalIconConfig()
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML configuration file {config_path}: {e}")
        raise
    except Exception as e:
        logger.error(f"Failed to load configuration from {config_path}: {e}")
        raise
