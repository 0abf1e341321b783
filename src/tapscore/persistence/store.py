from __future__ import annotations

import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Optional, Union

from .codec import decode_state, encode_state
from .errors import SaveError
from .models import ApplicationState

logger = logging.getLogger(__name__)


class DurableStore:
    """Sole owner of the state file on disk.

    Files:
    - ``<path>``: the current document
    - ``<path>.bak``: the previous generation, used only for recovery
    - ``<path>.tmp``: scratch file for the write in progress

    Writes go to the scratch file first and then atomically replace the
    primary, so a reader only ever sees a complete document. ``load`` and
    ``save`` never raise: a broken or missing file degrades to ``None`` and
    a failed write leaves the previous document in place.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.backup_path = self.path.with_name(self.path.name + ".bak")
        self.tmp_path = self.path.with_name(self.path.name + ".tmp")
        self.lock = threading.RLock()

    # Public API

    def load(self) -> Optional[ApplicationState]:
        """Read the primary file, falling back to the backup. Returns None on first run or total loss."""
        with self.lock:
            if not self.path.exists():
                logger.debug("No state file at %s (first run)", self.path)
                return None
            try:
                return self._read(self.path)
            except (OSError, SaveError) as primary_exc:
                logger.warning("State file %s is unreadable: %s", self.path, primary_exc)

            if not self.backup_path.exists():
                logger.warning("No backup at %s; starting from defaults", self.backup_path)
                return None
            try:
                recovered = self._read(self.backup_path)
            except (OSError, SaveError) as backup_exc:
                logger.warning("Backup %s is unreadable too: %s", self.backup_path, backup_exc)
                return None

            logger.warning("Recovered state from backup %s", self.backup_path)
            try:
                self._atomic_write(encode_state(recovered), rotate_backup=False)
            except (OSError, TypeError, ValueError) as repair_exc:
                logger.debug("Could not repair %s from backup: %s", self.path, repair_exc)
            return recovered

    def save(self, state: ApplicationState) -> bool:
        """Persist ``state``. Failures are swallowed; returns True when the write landed."""
        with self.lock:
            try:
                text = encode_state(state)
                self._atomic_write(text, rotate_backup=True)
            except (OSError, TypeError, ValueError, SaveError):
                logger.debug("Save to %s failed", self.path, exc_info=True)
                self._discard_tmp()
                return False
            logger.debug("Saved %d contests to %s", len(state.contests), self.path)
            return True

    # Internal utilities

    def _read(self, path: Path) -> ApplicationState:
        with path.open("r", encoding="utf-8") as f:
            text = f.read()
        return decode_state(text)

    def _atomic_write(self, text: str, *, rotate_backup: bool) -> None:
        """Write text to the primary path atomically.

        Strategy:
        - Write to path.tmp, flush and fsync
        - Copy the current primary to path.bak (one generation)
        - os.replace path.tmp over the primary
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.tmp_path.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if rotate_backup and self.path.exists():
            self._rotate_backup()
        os.replace(self.tmp_path, self.path)

    def _rotate_backup(self) -> None:
        staging = self.backup_path.with_name(self.backup_path.name + ".tmp")
        try:
            shutil.copy2(self.path, staging)
            os.replace(staging, self.backup_path)
        except OSError:
            # The new write still goes ahead without a fresh backup
            logger.debug("Could not rotate backup %s", self.backup_path, exc_info=True)
            try:
                staging.unlink()
            except FileNotFoundError:
                pass
            except OSError:
                logger.debug("Could not remove %s", staging, exc_info=True)

    def _discard_tmp(self) -> None:
        try:
            self.tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            logger.debug("Could not remove temp file %s", self.tmp_path, exc_info=True)
