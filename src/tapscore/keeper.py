from __future__ import annotations

import logging
import uuid
from typing import Callable, Iterable, List, Optional, Union

from . import backup
from .events import BANNER, STATE_CHANGED, Event, EventBus
from .errors import UnknownContestError, UnknownEntrantError
from .persistence.models import ApplicationState, Contest, Entrant
from .persistence.scheduler import DebouncedSaveScheduler
from .persistence.store import DurableStore
from .undo import MAX_UNDO_DEPTH, UndoEntry, UndoLedger

logger = logging.getLogger(__name__)

ACCENT_PALETTE = [
    "#8B5CF6",  # purple
    "#EC4899",  # magenta
    "#F97316",  # orange
    "#22C55E",  # green
    "#06B6D4",  # teal
    "#3B82F6",  # blue
]

DEFAULT_ENTRANT_COUNT = 12
NEW_CONTEST_BASE_NAME = "New Contest"


def default_state() -> ApplicationState:
    """Sample contests shown on the very first launch."""
    contests = [
        Contest(
            name="Contest A",
            entrants=[Entrant(name=f"Entrant {i}") for i in range(1, 13)],
            accent_hex=ACCENT_PALETTE[0],
        ),
        Contest(
            name="Contest B",
            entrants=[Entrant(name=f"Player {i}") for i in range(1, 11)],
            accent_hex=ACCENT_PALETTE[1],
        ),
    ]
    return ApplicationState(contests=contests, selected_contest_id=contests[0].id)


class ScoreKeeper:
    """In-memory owner of all contests and entrants.

    Every mutation runs synchronously on the caller's thread, records undo
    information where it applies, notifies ``state_changed`` subscribers and
    hands a snapshot to the save scheduler. Nothing else mutates the state.
    """

    def __init__(
        self,
        state: Optional[ApplicationState] = None,
        *,
        scheduler: Optional[DebouncedSaveScheduler] = None,
        bus: Optional[EventBus] = None,
        undo_depth: int = MAX_UNDO_DEPTH,
    ) -> None:
        self._state = state if state is not None else default_state()
        if self._state.contest(self._state.selected_contest_id) is None and self._state.contests:
            self._state.selected_contest_id = self._state.contests[0].id
        self.ledger = UndoLedger(max_depth=undo_depth)
        self.scheduler = scheduler
        self.bus = bus or EventBus()
        self.banner_message: Optional[str] = None

    @classmethod
    def open(
        cls,
        store: DurableStore,
        *,
        scheduler: Optional[DebouncedSaveScheduler] = None,
        bus: Optional[EventBus] = None,
        undo_depth: int = MAX_UNDO_DEPTH,
    ) -> "ScoreKeeper":
        """Load from ``store`` (blocking) or start from the sample contests."""
        loaded = store.load()
        if loaded is None:
            logger.info("Starting with default contests")
        else:
            logger.info("Loaded %d contests from %s", len(loaded.contests), store.path)
        return cls(loaded, scheduler=scheduler, bus=bus, undo_depth=undo_depth)

    # Observation

    @property
    def state(self) -> ApplicationState:
        return self._state

    @property
    def contests(self) -> List[Contest]:
        return self._state.contests

    def snapshot(self) -> ApplicationState:
        return self._state.snapshot()

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        self.bus.subscribe(STATE_CHANGED, callback)

    # Derived

    @property
    def current_contest(self) -> Optional[Contest]:
        return self._state.resolved_selection()

    @property
    def current_contest_id(self) -> Optional[uuid.UUID]:
        contest = self.current_contest
        return contest.id if contest else None

    @property
    def can_undo_current(self) -> bool:
        return self.ledger.can_undo(self.current_contest_id)

    def can_undo(self, contest_id: uuid.UUID) -> bool:
        return self.ledger.can_undo(contest_id)

    def find_contest(self, name: str) -> Contest:
        wanted = name.strip().casefold()
        for c in self._state.contests:
            if c.name.casefold() == wanted:
                return c
        raise UnknownContestError(f"No contest named {name!r}")

    def find_entrant(self, name: str, contest_id: Optional[uuid.UUID] = None) -> Entrant:
        contest = self._contest(contest_id)
        wanted = name.strip().casefold()
        for e in contest.entrants:
            if e.name.casefold() == wanted:
                return e
        raise UnknownEntrantError(f"No entrant named {name!r} in {contest.name!r}")

    # Scoring

    def increment(self, entrant_id: uuid.UUID, contest_id: Optional[uuid.UUID] = None) -> Optional[int]:
        """Add one point. Returns the new score, or None if the entrant is not in the contest."""
        contest = self._state.contest(contest_id) if contest_id else self.current_contest
        if contest is None:
            return None
        entrant = contest.entrant(entrant_id)
        if entrant is None:
            return None
        previous = entrant.score
        entrant.score = previous + 1
        self.ledger.record_increment(contest.id, entrant.id, previous, entrant.score)
        self._commit()
        return entrant.score

    def undo_last(self, contest_id: Optional[uuid.UUID] = None) -> Optional[UndoEntry]:
        """Revert the newest score change in a contest.

        The entry is consumed even when its entrant has since been removed;
        in that case nothing else changes.
        """
        contest = self._state.contest(contest_id) if contest_id else self.current_contest
        if contest is None:
            return None
        entry = self.ledger.undo_last(contest.id)
        if entry is None:
            return None
        entrant = contest.entrant(entry.entrant_id)
        if entrant is None:
            logger.debug("Undo target %s no longer exists", entry.entrant_id)
            # Only the ledger changed, so observers refresh but nothing is saved
            self.bus.publish(STATE_CHANGED, {"contest_id": self.current_contest_id})
            return entry
        entrant.score = entry.previous_score
        self.show_banner(f"Undid: {entrant.name} ({entry.new_score} → {entry.previous_score})")
        self._commit()
        return entry

    # Contests

    def default_new_contest_name(self) -> str:
        existing = {c.name for c in self._state.contests}
        if NEW_CONTEST_BASE_NAME not in existing:
            return NEW_CONTEST_BASE_NAME
        i = 2
        while f"{NEW_CONTEST_BASE_NAME} {i}" in existing:
            i += 1
        return f"{NEW_CONTEST_BASE_NAME} {i}"

    def _next_accent_hex(self) -> str:
        used = {c.accent_hex for c in self._state.contests}
        for hex_value in ACCENT_PALETTE:
            if hex_value not in used:
                return hex_value
        return ACCENT_PALETTE[len(self._state.contests) % len(ACCENT_PALETTE)]

    def add_contest(self, name: str = "") -> Contest:
        """Create a contest with default entrants, put it first and select it."""
        final_name = name.strip() or self.default_new_contest_name()
        contest = Contest(
            name=final_name,
            entrants=[Entrant(name=f"Entrant {i}") for i in range(1, DEFAULT_ENTRANT_COUNT + 1)],
            accent_hex=self._next_accent_hex(),
        )
        self._state.contests.insert(0, contest)
        self._state.selected_contest_id = contest.id
        self.ledger.clear(contest.id)
        self._commit()
        return contest

    def select_contest(self, contest_id: uuid.UUID) -> Contest:
        contest = self._state.contest(contest_id)
        if contest is None:
            raise UnknownContestError(f"No contest with id {contest_id}")
        self._state.selected_contest_id = contest.id
        self._commit()
        return contest

    def rename_contest(self, name: str, contest_id: Optional[uuid.UUID] = None) -> Contest:
        contest = self._contest(contest_id)
        contest.name = name.strip()
        self._commit()
        return contest

    # Entrants. Structural edits invalidate the contest's undo history.

    def add_entrant(self, name: str = "", contest_id: Optional[uuid.UUID] = None) -> Entrant:
        contest = self._contest(contest_id)
        entrant = Entrant(name=name.strip() or f"Entrant {len(contest.entrants) + 1}")
        contest.entrants.append(entrant)
        self._structural_change(contest)
        return entrant

    def remove_entrant(self, entrant_id: uuid.UUID, contest_id: Optional[uuid.UUID] = None) -> Entrant:
        contest = self._contest(contest_id)
        index = contest.entrant_index(entrant_id)
        if index is None:
            raise UnknownEntrantError(f"No entrant with id {entrant_id} in {contest.name!r}")
        removed = contest.entrants.pop(index)
        self._structural_change(contest)
        return removed

    def move_entrant(self, from_index: int, to_index: int, contest_id: Optional[uuid.UUID] = None) -> None:
        contest = self._contest(contest_id)
        count = len(contest.entrants)
        if not (0 <= from_index < count and 0 <= to_index < count):
            raise IndexError(f"Entrant positions must be within 0..{count - 1}")
        entrant = contest.entrants.pop(from_index)
        contest.entrants.insert(to_index, entrant)
        self._structural_change(contest)

    def set_entrants(self, entrants: Iterable[Entrant], contest_id: Optional[uuid.UUID] = None) -> None:
        contest = self._contest(contest_id)
        contest.entrants = list(entrants)
        self._structural_change(contest)

    def rename_entrant(self, entrant_id: uuid.UUID, name: str, contest_id: Optional[uuid.UUID] = None) -> Entrant:
        """Rename keeps the undo history; it is not a structural change."""
        contest = self._contest(contest_id)
        entrant = contest.entrant(entrant_id)
        if entrant is None:
            raise UnknownEntrantError(f"No entrant with id {entrant_id} in {contest.name!r}")
        entrant.name = name.strip()
        self._commit()
        return entrant

    # Reset / delete

    def reset_current_contest(self) -> None:
        """Zero every score in the current contest and clear its undo history."""
        contest = self.current_contest
        if contest is None:
            return
        for e in contest.entrants:
            e.score = 0
        self.ledger.clear(contest.id)
        self.show_banner("Contest reset.")
        self._commit()

    def delete_current_contest(self) -> None:
        contest = self.current_contest
        if contest is None:
            return
        self._state.contests.remove(contest)
        self.ledger.clear(contest.id)
        self._state.selected_contest_id = self._state.contests[0].id if self._state.contests else None
        self.show_banner("Contest deleted.")
        self._commit()

    def reset_all_contests(self) -> None:
        for c in self._state.contests:
            for e in c.entrants:
                e.score = 0
        self.ledger.clear_all()
        self.show_banner("All contests reset.")
        self._commit()

    def delete_all_contests(self) -> None:
        self._state.contests.clear()
        self._state.selected_contest_id = None
        self.ledger.clear_all()
        self.show_banner("All contests deleted.")
        self._commit()

    # Import / export

    def replace_all_contests(self, contests: List[Contest], selected_id: Optional[uuid.UUID] = None) -> None:
        self._state.contests = list(contests)
        if selected_id is None or self._state.contest(selected_id) is None:
            selected_id = contests[0].id if contests else None
        self._state.selected_contest_id = selected_id
        self.ledger.clear_all()
        self.show_banner("Imported contests.")
        self._commit()

    def import_backup(self, source: Union[str, bytes]) -> ApplicationState:
        """Replace everything with a backup document.

        Raises BackupImportError before touching any state if the document
        cannot be parsed.
        """
        imported = backup.import_backup(source)
        self.replace_all_contests(imported.contests, imported.selected_contest_id)
        return imported

    def export_backup(self) -> str:
        return backup.export_backup(self._state)

    # Lifecycle

    def show_banner(self, text: str) -> None:
        self.banner_message = text
        self.bus.publish(BANNER, {"message": text})

    def close(self) -> None:
        """Write any pending snapshot now."""
        if self.scheduler is not None:
            self.scheduler.flush()

    # Internals

    def _contest(self, contest_id: Optional[uuid.UUID]) -> Contest:
        contest = self._state.contest(contest_id) if contest_id else self.current_contest
        if contest is None:
            raise UnknownContestError("No contest selected" if contest_id is None else f"No contest with id {contest_id}")
        return contest

    def _structural_change(self, contest: Contest) -> None:
        self.ledger.clear(contest.id)
        self._commit()

    def _commit(self) -> None:
        self.bus.publish(STATE_CHANGED, {"contest_id": self.current_contest_id})
        if self.scheduler is not None:
            self.scheduler.schedule(self._state.snapshot())
