"""
Engine Configuration

Scoring weights, thresholds and lifecycle switches for the GTD engine.

Configuration sources (first match wins):
1. An explicit path passed to load_config()
2. The GTD_ENGINE_CONFIG environment variable
3. Built-in defaults

The YAML file mirrors the model layout:

    scoring:
      weights:
        overdue: 100
      thresholds:
        quick_win_minutes: 15
    lifecycle:
      hold_described_waiting: false
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger("engine_config")

# -----------------------------------------------------------------------------
# Environment
# -----------------------------------------------------------------------------
CONFIG_ENV_VAR = "GTD_ENGINE_CONFIG"
LOG_LEVEL_ENV_VAR = "GTD_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_MAX_SUGGESTIONS = 10


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------
class ScoringWeights(BaseModel):
    """Point adjustments applied by the recommendation scorer."""
    model_config = ConfigDict(extra="forbid")

    overdue: int = 100
    due_today: int = 75
    due_soon: int = 50
    context_match: int = 60
    energy_match: int = 40
    fits_time: int = 35
    too_long_penalty: int = -30
    quick_task: int = 20
    next_action: int = 25
    active_project: int = 10
    waiting_penalty: int = -20
    has_description: int = 5


class ScoringThresholds(BaseModel):
    """Time windows used by the scorer."""
    model_config = ConfigDict(extra="forbid")

    due_soon_days: int = Field(default=3, ge=1)
    quick_win_minutes: int = Field(default=15, ge=0)
    default_max_suggestions: int = Field(default=DEFAULT_MAX_SUGGESTIONS, ge=1)


class ScoringConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    thresholds: ScoringThresholds = Field(default_factory=ScoringThresholds)


class LifecycleConfig(BaseModel):
    """Switches for the lifecycle scans."""
    model_config = ConfigDict(extra="forbid")

    # Keep generic-waiting tasks parked when they carry a free-text reason
    hold_described_waiting: bool = False
    ledger_limit: int = Field(default=1000, ge=1)


class EngineConfig(BaseModel):
    """Top-level engine configuration."""
    model_config = ConfigDict(extra="forbid")

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------
def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Load engine configuration from YAML.

    Falls back to GTD_ENGINE_CONFIG, then to defaults. Raises ConfigError
    when the file is missing, unparsable or fails validation.
    """
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if not env_path:
            return EngineConfig()
        path = env_path

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(str(config_path), [f"File not found: {config_path}"])

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(str(config_path), [f"YAML parse error: {e}"]) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(str(config_path), ["Top-level YAML value must be a mapping"])

    try:
        config = EngineConfig.model_validate(data)
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ConfigError(str(config_path), errors) from e

    logger.info(f"Loaded engine configuration from {config_path}")
    return config


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for hosts embedding the engine."""
    level_name = (level or os.getenv(LOG_LEVEL_ENV_VAR, "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT
    )
