"""Performance engine configuration with environment variable loading."""

import os
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from src.models.browser_models import BrowserType

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = "WEBPERF_"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class PerformanceConfig(BaseModel):
    """Configuration for browser-driven performance analysis."""

    # Browser
    browser_type: BrowserType = Field(
        default_factory=lambda: BrowserType(os.getenv("WEBPERF_BROWSER", "chromium")),
        description="Browser engine (network throttling requires chromium)",
    )
    headless: bool = Field(
        default_factory=lambda: _env_bool("WEBPERF_HEADLESS", "true"),
        description="Run the browser headless",
    )

    # Timeouts
    navigation_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("WEBPERF_NAVIGATION_TIMEOUT_MS", "30000")),
        gt=0,
        description="page.goto timeout (ms)",
    )
    idle_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("WEBPERF_IDLE_TIMEOUT_MS", "30000")),
        gt=0,
        description="Network idle wait timeout (ms)",
    )
    metrics_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("WEBPERF_METRICS_TIMEOUT_MS", "5000")),
        gt=0,
        description="Ceiling for timing-entry observation (ms)",
    )

    # Load test defaults
    default_concurrent: int = Field(
        default_factory=lambda: int(os.getenv("WEBPERF_DEFAULT_CONCURRENT", "2")),
        ge=1,
        description="Default concurrent page loads per batch",
    )
    default_iterations: int = Field(
        default_factory=lambda: int(os.getenv("WEBPERF_DEFAULT_ITERATIONS", "3")),
        ge=1,
        description="Default number of batches",
    )
    default_delay_ms: int = Field(
        default_factory=lambda: int(os.getenv("WEBPERF_DEFAULT_DELAY_MS", "1000")),
        ge=0,
        description="Default pause between batches (ms)",
    )

    class Config:
        """Pydantic config."""

        extra = "ignore"


def get_config_paths() -> List[Path]:
    """
    Get configuration file paths in priority order.

    Returns:
        List of paths, highest priority last
    """
    return [
        Path.home() / ".webperf" / "config.yaml",
        Path.cwd() / ".webperf" / "config.yaml",
    ]


def load_config(config_path: Optional[str] = None) -> PerformanceConfig:
    """
    Load configuration from files and environment.

    Configuration is merged in this order (later overrides earlier):
    1. Default values (including WEBPERF_* variables from .env)
    2. Global config (~/.webperf/config.yaml)
    3. Project config (./.webperf/config.yaml)
    4. Explicit config_path if provided
    5. Environment variables (WEBPERF_*)

    A ``performance`` section is used if the file has one, otherwise the
    whole file.

    Args:
        config_path: Optional explicit config file path

    Returns:
        Merged PerformanceConfig instance
    """
    merged: Dict[str, Any] = {}

    config_paths = get_config_paths()
    if config_path:
        config_paths.append(Path(config_path))

    for path in config_paths:
        if not path.exists():
            continue
        try:
            with open(path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            continue
        if not isinstance(file_config, dict):
            logger.warning(f"Ignoring config {path}: top level is not a mapping")
            continue
        section = file_config.get("performance", file_config)
        if not isinstance(section, dict):
            if section is not None:
                logger.warning(f"Ignoring config {path}: 'performance' is not a mapping")
            continue
        merged.update(section)
        logger.debug(f"Loaded config from {path}")

    merged.update(_get_env_overrides())

    return PerformanceConfig(**merged)


# Env variables whose names do not follow WEBPERF_<FIELD>
_ENV_ALIASES = {"browser": "browser_type"}


def _get_env_overrides() -> Dict[str, Any]:
    """
    Get configuration overrides from WEBPERF_* environment variables.

    WEBPERF_METRICS_TIMEOUT_MS -> metrics_timeout_ms. Only known fields are
    returned; values are validated by the model.
    """
    overrides: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        config_key = key[len(ENV_PREFIX):].lower()
        config_key = _ENV_ALIASES.get(config_key, config_key)
        if config_key not in PerformanceConfig.model_fields:
            continue

        if value.lower() in ("true", "yes"):
            overrides[config_key] = True
        elif value.lower() in ("false", "no"):
            overrides[config_key] = False
        else:
            overrides[config_key] = value

    return overrides
