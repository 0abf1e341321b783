from __future__ import annotations

import logging
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional

logger = logging.getLogger(__name__)

MAX_UNDO_DEPTH = 10


@dataclass(frozen=True)
class UndoEntry:
    """One reversible score change. Session-only; never persisted."""

    contest_id: uuid.UUID
    entrant_id: uuid.UUID
    previous_score: int
    new_score: int


class UndoLedger:
    """Bounded per-contest stacks of score changes.

    The ledger only remembers; applying the reverse change is the caller's
    job. Stacks are capped at ``max_depth`` and evict their oldest entry.
    """

    def __init__(self, max_depth: int = MAX_UNDO_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.max_depth = max_depth
        self._stacks: Dict[uuid.UUID, Deque[UndoEntry]] = {}

    def record_increment(
        self,
        contest_id: uuid.UUID,
        entrant_id: uuid.UUID,
        previous_score: int,
        new_score: int,
    ) -> UndoEntry:
        entry = UndoEntry(contest_id, entrant_id, previous_score, new_score)
        stack = self._stacks.get(contest_id)
        if stack is None:
            stack = self._stacks[contest_id] = deque(maxlen=self.max_depth)
        stack.append(entry)
        return entry

    def undo_last(self, contest_id: uuid.UUID) -> Optional[UndoEntry]:
        """Pop the newest entry for a contest, or None when there is nothing to undo."""
        stack = self._stacks.get(contest_id)
        if not stack:
            return None
        return stack.pop()

    def can_undo(self, contest_id: Optional[uuid.UUID]) -> bool:
        if contest_id is None:
            return False
        return bool(self._stacks.get(contest_id))

    def depth(self, contest_id: uuid.UUID) -> int:
        return len(self._stacks.get(contest_id, ()))

    def clear(self, contest_id: uuid.UUID) -> None:
        if self._stacks.pop(contest_id, None):
            logger.debug("Cleared undo history for contest %s", contest_id)

    def clear_all(self) -> None:
        self._stacks.clear()
