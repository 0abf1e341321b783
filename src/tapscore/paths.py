from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "tapscore"

# Environment variable overrides (useful for tests and power users)
ENV_CONFIG_DIR = "TAPSCORE_CONFIG_DIR"
ENV_DATA_DIR = "TAPSCORE_DATA_DIR"


class AppPaths:
    """Resolve platform-appropriate directories for the app.

    Provides:
    - config_dir: holds ``config.yaml``
    - data_dir: holds the state file and its backup

    Environment variables override the platformdirs defaults.
    """

    def __init__(self, app_name: str = APP_NAME) -> None:
        self._dirs = PlatformDirs(appname=app_name, appauthor=False)
        self._config_dir = self._compute_dir(ENV_CONFIG_DIR, Path(self._dirs.user_config_dir))
        self._data_dir = self._compute_dir(ENV_DATA_DIR, Path(self._dirs.user_data_dir))

    @staticmethod
    def _compute_dir(env_var: str, default: Path) -> Path:
        override = os.getenv(env_var)
        if override:
            return Path(override).expanduser().resolve()
        return Path(default).expanduser().resolve()

    @staticmethod
    def data_dir_overridden() -> bool:
        return bool(os.getenv(ENV_DATA_DIR))

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def config_file(self) -> Path:
        return self._config_dir / "config.yaml"
