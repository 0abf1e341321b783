from __future__ import annotations

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Turn ``"debug"``/``"INFO"``/``10`` into a logging level number."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(level: Union[int, str] = logging.INFO) -> int:
    """Send tapscore's log records to stderr at exactly ``level``.

    The caller decides the level (CLI flag, then config); nothing here reads
    the environment. Safe to call more than once.
    """
    resolved = resolve_level(level)
    root = logging.getLogger()
    logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(resolved)
    return resolved
