from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict

from jsonschema import Draft202012Validator

from .errors import SaveValidationError

logger = logging.getLogger(__name__)

ENTRANT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["id", "name"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "score": {"type": "integer", "minimum": 0},
    },
}

CONTEST_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["id", "name", "createdAt", "entrants"],
    # accentHex is unconstrained: a bad colour falls back to the default
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "createdAt": {"type": "string"},
        "entrants": {"type": "array", "items": ENTRANT_SCHEMA},
    },
}

STATE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "tapscore persisted state",
    "type": "object",
    "required": ["schemaVersion", "contests"],
    "properties": {
        "schemaVersion": {"type": "integer"},
        "contests": {"type": "array", "items": CONTEST_SCHEMA},
        "selectedContestID": {"type": ["string", "null"]},
    },
}

CONTEST_LIST_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "array",
    "items": CONTEST_SCHEMA,
}


@lru_cache(maxsize=None)
def _validator(kind: str) -> Draft202012Validator:
    schema = STATE_SCHEMA if kind == "state" else CONTEST_LIST_SCHEMA
    return Draft202012Validator(schema)


def _validate(kind: str, data: Any) -> None:
    errors = sorted(_validator(kind).iter_errors(data), key=lambda e: list(e.path))
    if errors:
        for err in errors:
            logger.debug("Schema validation error at %s: %s", list(err.path), err.message)
        first = errors[0]
        raise SaveValidationError(f"Invalid document at {list(first.path)}: {first.message}")


def validate_state_dict(data: Any) -> None:
    """Validate a persisted-state document. Raises SaveValidationError."""
    _validate("state", data)


def validate_contest_list(data: Any) -> None:
    """Validate a bare array of contests (legacy backup shape)."""
    _validate("contests", data)


__all__ = [
    "STATE_SCHEMA",
    "CONTEST_LIST_SCHEMA",
    "validate_state_dict",
    "validate_contest_list",
]
