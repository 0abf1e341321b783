import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from tapscore.persistence import ApplicationState, Contest, Entrant  # noqa: E402


@pytest.fixture()
def jam_state() -> ApplicationState:
    """Two contests with fixed ids and timestamps."""
    jam_a = Contest(
        id=uuid.UUID("11111111-1111-4111-8111-111111111111"),
        name="Jam A",
        created_at=datetime(2026, 1, 25, 18, 30, tzinfo=timezone.utc),
        entrants=[
            Entrant(id=uuid.UUID("aaaaaaaa-0000-4000-8000-000000000001"), name="Alice", score=3),
            Entrant(id=uuid.UUID("aaaaaaaa-0000-4000-8000-000000000002"), name="Bob", score=3),
            Entrant(id=uuid.UUID("aaaaaaaa-0000-4000-8000-000000000003"), name="Carol", score=5),
        ],
        accent_hex="#EC4899",
    )
    jam_b = Contest(
        id=uuid.UUID("22222222-2222-4222-8222-222222222222"),
        name="Jam B",
        created_at=datetime(2026, 1, 25, 19, 0, tzinfo=timezone.utc),
        entrants=[
            Entrant(id=uuid.UUID("bbbbbbbb-0000-4000-8000-000000000001"), name="Dave", score=4),
        ],
    )
    return ApplicationState(contests=[jam_a, jam_b], selected_contest_id=jam_a.id)


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep platform directories and env overrides inside the test's tmp dir."""
    monkeypatch.setenv("TAPSCORE_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("TAPSCORE_DATA_DIR", raising=False)
    monkeypatch.delenv("TAPSCORE_LOG_LEVEL", raising=False)
