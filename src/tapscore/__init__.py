"""tapscore: live contest scoring with crash-safe, debounced persistence."""

from .keeper import ScoreKeeper
from .persistence import ApplicationState, Contest, DebouncedSaveScheduler, DurableStore, Entrant
from .undo import UndoEntry, UndoLedger

__version__ = "0.1.0"

__all__ = [
    "ScoreKeeper",
    "ApplicationState",
    "Contest",
    "Entrant",
    "DurableStore",
    "DebouncedSaveScheduler",
    "UndoEntry",
    "UndoLedger",
    "__version__",
]
