from __future__ import annotations

import json
from typing import Any, Dict

from .errors import SaveValidationError, UnsupportedSchemaError
from .models import MIN_SCHEMA_VERSION, ApplicationState
from .schema import validate_state_dict


def encode_state(state: ApplicationState) -> str:
    """Encode an ApplicationState to a pretty-printed JSON string."""
    return json.dumps(state.to_dict(), ensure_ascii=False, sort_keys=True, indent=2)


def decode_state(text: str) -> ApplicationState:
    """Decode JSON text into an ApplicationState, enforcing the schema and version gate."""
    try:
        data: Dict[str, Any] = json.loads(text)
    except json.JSONDecodeError as e:
        raise SaveValidationError(f"Invalid JSON: {e}") from e
    return state_from_dict(data)


def state_from_dict(data: Any) -> ApplicationState:
    validate_state_dict(data)
    version = data["schemaVersion"]
    if version < MIN_SCHEMA_VERSION:
        raise UnsupportedSchemaError(f"Unsupported schema version {version}")
    try:
        return ApplicationState.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise SaveValidationError(f"Malformed state document: {e}") from e
