from __future__ import annotations

import copy
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .errors import SaveValidationError

# Increment when making breaking schema changes
SCHEMA_VERSION = 1
# Documents below this version are rejected on load
MIN_SCHEMA_VERSION = 1

DEFAULT_ACCENT_HEX = "#8B5CF6"

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_timestamp(value: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with a ``Z`` suffix, second precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc).replace(microsecond=0)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(text: str) -> datetime:
    try:
        value = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except (AttributeError, ValueError) as e:
        raise SaveValidationError(f"Invalid timestamp: {text!r}") from e
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_uuid(text: Any, what: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(text))
    except ValueError as e:
        raise SaveValidationError(f"{what} is not a valid UUID: {text!r}") from e


@dataclass
class Entrant:
    """A named competitor inside one contest."""

    name: str
    score: int = 0
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise SaveValidationError("Entrant.name must be a string")
        if isinstance(self.score, bool) or not isinstance(self.score, int) or self.score < 0:
            raise SaveValidationError("Entrant.score must be a non-negative integer")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": str(self.id), "name": self.name, "score": self.score}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Entrant":
        return Entrant(
            id=parse_uuid(data["id"], "Entrant.id"),
            name=data["name"],
            score=int(data.get("score", 0)),
        )


@dataclass
class Contest:
    """A scored contest. Entrant order is the display and export order."""

    name: str
    entrants: List[Entrant] = field(default_factory=list)
    accent_hex: str = DEFAULT_ACCENT_HEX
    created_at: datetime = field(default_factory=utcnow)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise SaveValidationError("Contest.name must be a string")
        if not isinstance(self.accent_hex, str) or not _HEX_COLOR.match(self.accent_hex):
            raise SaveValidationError(f"Contest.accent_hex must look like #RRGGBB, got {self.accent_hex!r}")

    def entrant(self, entrant_id: uuid.UUID) -> Optional[Entrant]:
        for e in self.entrants:
            if e.id == entrant_id:
                return e
        return None

    def entrant_index(self, entrant_id: uuid.UUID) -> Optional[int]:
        for i, e in enumerate(self.entrants):
            if e.id == entrant_id:
                return i
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "createdAt": format_timestamp(self.created_at),
            "entrants": [e.to_dict() for e in self.entrants],
            "accentHex": self.accent_hex,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Contest":
        # Older documents predate accentHex; anything unusable gets the default
        accent = data.get("accentHex")
        if not isinstance(accent, str) or not _HEX_COLOR.match(accent):
            accent = DEFAULT_ACCENT_HEX
        return Contest(
            id=parse_uuid(data["id"], "Contest.id"),
            name=data["name"],
            created_at=parse_timestamp(data["createdAt"]),
            entrants=[Entrant.from_dict(e) for e in data.get("entrants", [])],
            accent_hex=accent,
        )


@dataclass
class ApplicationState:
    """Everything that is persisted: contests, the selection and the schema tag."""

    contests: List[Contest] = field(default_factory=list)
    selected_contest_id: Optional[uuid.UUID] = None
    schema_version: int = SCHEMA_VERSION

    def contest(self, contest_id: Optional[uuid.UUID]) -> Optional[Contest]:
        if contest_id is None:
            return None
        for c in self.contests:
            if c.id == contest_id:
                return c
        return None

    def resolved_selection(self) -> Optional[Contest]:
        """The selected contest, falling back to the first one when the selection dangles."""
        return self.contest(self.selected_contest_id) or (self.contests[0] if self.contests else None)

    def snapshot(self) -> "ApplicationState":
        """Return an independent copy, safe to hand to another thread."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "schemaVersion": self.schema_version,
            "contests": [c.to_dict() for c in self.contests],
        }
        if self.selected_contest_id is not None:
            data["selectedContestID"] = str(self.selected_contest_id)
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ApplicationState":
        selected = data.get("selectedContestID")
        return ApplicationState(
            schema_version=int(data.get("schemaVersion", SCHEMA_VERSION)),
            contests=[Contest.from_dict(c) for c in data.get("contests", [])],
            selected_contest_id=parse_uuid(selected, "selectedContestID") if selected else None,
        )
