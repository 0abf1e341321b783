from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .paths import ENV_DATA_DIR, AppPaths
from .persistence.scheduler import DEFAULT_DEBOUNCE_SECONDS
from .undo import MAX_UNDO_DEPTH

logger = logging.getLogger(__name__)

ENV_LOG_LEVEL = "TAPSCORE_LOG_LEVEL"

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class TallyConfig(BaseModel):
    """Runtime settings, read from ``config.yaml`` in the user config dir.

    Example::

        debounce_seconds: 0.4
        undo_depth: 10
        state_file_name: tapscore_state.json
        data_dir: ~/scores
        log_level: INFO
    """

    debounce_seconds: float = Field(DEFAULT_DEBOUNCE_SECONDS, gt=0, description="Quiet interval before a save")
    undo_depth: int = Field(MAX_UNDO_DEPTH, ge=1, description="Undo entries kept per contest")
    state_file_name: str = Field("tapscore_state.json", min_length=1, description="State file name")
    data_dir: Optional[Path] = Field(default=None, description="Directory for the state file")
    log_level: str = Field("INFO", description="Root log level")

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in _LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LEVELS)}")
        return level

    @field_validator("state_file_name")
    @classmethod
    def plain_file_name(cls, v: str) -> str:
        if Path(v).name != v:
            raise ValueError("state_file_name must be a bare file name")
        return v

    def state_file(self, paths: Optional[AppPaths] = None) -> Path:
        """Where the state lives: env override, then ``data_dir``, then the platform data dir."""
        paths = paths or AppPaths()
        if AppPaths.data_dir_overridden() or self.data_dir is None:
            base = paths.data_dir
        else:
            base = self.data_dir.expanduser()
        return base / self.state_file_name


def load_config(path: Optional[Union[str, Path]] = None, paths: Optional[AppPaths] = None) -> TallyConfig:
    """Load configuration from YAML.

    A missing file yields defaults. ``TAPSCORE_LOG_LEVEL`` overrides the
    file's ``log_level``.
    """
    cfg_path = Path(path) if path is not None else (paths or AppPaths()).config_file
    raw = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not read config {cfg_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config {cfg_path} must be a mapping")
        logger.debug("Loaded config from %s", cfg_path)
    else:
        logger.debug("No config at %s; using defaults", cfg_path)

    env_level = os.getenv(ENV_LOG_LEVEL)
    if env_level:
        raw = {**raw, "log_level": env_level}

    try:
        return TallyConfig(**raw)
    except (TypeError, ValidationError) as e:
        raise ConfigError(f"Invalid config {cfg_path}: {e}") from e


__all__ = ["TallyConfig", "load_config", "ENV_LOG_LEVEL", "ENV_DATA_DIR"]
