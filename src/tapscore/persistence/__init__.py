"""Persistence subsystem for tapscore.

This package provides:
- Data models for contests, entrants and the persisted application state
- Encoding/decoding to a versioned JSON document validated by JSON Schema
- A DurableStore that owns disk I/O: atomic replace, one backup generation,
  corruption recovery
- A DebouncedSaveScheduler that coalesces rapid mutations into one write
"""

from .models import (
    SCHEMA_VERSION,
    MIN_SCHEMA_VERSION,
    DEFAULT_ACCENT_HEX,
    Entrant,
    Contest,
    ApplicationState,
)
from .codec import encode_state, decode_state, state_from_dict
from .store import DurableStore
from .scheduler import DebouncedSaveScheduler, DEFAULT_DEBOUNCE_SECONDS
from .errors import SaveError, SaveValidationError, UnsupportedSchemaError

__all__ = [
    "SCHEMA_VERSION",
    "MIN_SCHEMA_VERSION",
    "DEFAULT_ACCENT_HEX",
    "Entrant",
    "Contest",
    "ApplicationState",
    "encode_state",
    "decode_state",
    "state_from_dict",
    "DurableStore",
    "DebouncedSaveScheduler",
    "DEFAULT_DEBOUNCE_SECONDS",
    "SaveError",
    "SaveValidationError",
    "UnsupportedSchemaError",
]
