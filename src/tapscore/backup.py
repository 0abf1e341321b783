"""JSON backup export/import.

A backup has the same shape as the state file. Older exports were a bare
array of contests; those are still accepted on import, with the selection
defaulting to the first contest.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

from .errors import BackupImportError
from .persistence.codec import encode_state, state_from_dict
from .persistence.errors import SaveError
from .persistence.models import ApplicationState, Contest
from .persistence.schema import validate_contest_list

logger = logging.getLogger(__name__)

NOT_JSON_MESSAGE = "That file is not valid JSON."
NOT_A_BACKUP_MESSAGE = "That file is not a tapscore backup."
UNREADABLE_MESSAGE = "Could not read the backup file."


def export_backup(state: ApplicationState) -> str:
    return encode_state(state)


def import_backup(text: Union[str, bytes]) -> ApplicationState:
    """Parse a backup document. Raises BackupImportError with a short message on failure."""
    try:
        data: Any = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BackupImportError(NOT_JSON_MESSAGE) from e

    try:
        return state_from_dict(data)
    except SaveError as e:
        logger.debug("Backup is not a full state document (%s); trying contest list", e)

    try:
        validate_contest_list(data)
        contests = [Contest.from_dict(c) for c in data]
    except (SaveError, KeyError, TypeError, ValueError) as e:
        logger.info("Rejected backup import: %s", e)
        raise BackupImportError(NOT_A_BACKUP_MESSAGE) from e
    return ApplicationState(
        contests=contests,
        selected_contest_id=contests[0].id if contests else None,
    )


def read_backup_file(path: Union[str, Path]) -> ApplicationState:
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        logger.info("Could not read backup %s: %s", path, e)
        raise BackupImportError(UNREADABLE_MESSAGE) from e
    return import_backup(raw)


def write_backup_file(path: Union[str, Path], state: ApplicationState) -> Path:
    p = Path(path)
    p.write_text(export_backup(state), encoding="utf-8")
    logger.info("Wrote backup of %d contests to %s", len(state.contests), p)
    return p
