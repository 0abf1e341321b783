import json
import os
import threading
from pathlib import Path

import pytest

from tapscore.persistence import ApplicationState, Contest, DurableStore, Entrant, decode_state, encode_state


@pytest.fixture()
def store(tmp_path: Path) -> DurableStore:
    return DurableStore(tmp_path / "data" / "tapscore_state.json")


def test_first_run_returns_none(store: DurableStore):
    assert store.load() is None


def test_save_then_load(store: DurableStore, jam_state):
    assert store.save(jam_state) is True
    assert store.path.exists()
    assert not store.tmp_path.exists()
    assert store.load() == jam_state


def test_second_save_keeps_previous_generation_as_backup(store: DurableStore, jam_state):
    store.save(jam_state)
    assert not store.backup_path.exists()

    newer = jam_state.snapshot()
    newer.contests[0].entrants[0].score = 10
    store.save(newer)

    assert decode_state(store.backup_path.read_text(encoding="utf-8")) == jam_state
    assert store.load() == newer


def test_corrupt_primary_recovers_from_backup_and_repairs(store: DurableStore, jam_state):
    store.save(jam_state)
    newer = jam_state.snapshot()
    newer.contests[0].name = "Jam A (final)"
    store.save(newer)

    # Truncated write from some other tool
    store.path.write_text(store.path.read_text(encoding="utf-8")[:40], encoding="utf-8")

    loaded = store.load()
    assert loaded == jam_state
    assert decode_state(store.path.read_text(encoding="utf-8")) == jam_state


def test_both_files_corrupt_returns_none(store: DurableStore, jam_state):
    store.save(jam_state)
    store.save(jam_state)
    store.path.write_text("not json", encoding="utf-8")
    store.backup_path.write_text("also not json", encoding="utf-8")
    assert store.load() is None


def test_schema_version_zero_falls_back_to_backup(store: DurableStore, jam_state):
    store.save(jam_state)
    store.save(jam_state)
    data = json.loads(store.path.read_text(encoding="utf-8"))
    data["schemaVersion"] = 0
    data["contests"] = []
    store.path.write_text(json.dumps(data), encoding="utf-8")

    loaded = store.load()
    assert loaded is not None
    assert loaded.schema_version == 1
    assert loaded == jam_state


def test_schema_version_zero_without_backup_returns_none(store: DurableStore, jam_state):
    store.path.parent.mkdir(parents=True)
    data = json.loads(encode_state(jam_state))
    data["schemaVersion"] = 0
    store.path.write_text(json.dumps(data), encoding="utf-8")
    assert store.load() is None


def test_failed_replace_is_swallowed_and_keeps_previous_file(store: DurableStore, jam_state, monkeypatch):
    store.save(jam_state)
    before = store.path.read_text(encoding="utf-8")

    real_replace = os.replace

    def failing_replace(src, dst):
        if Path(dst) == store.path:
            raise OSError(28, "No space left on device")
        return real_replace(src, dst)

    monkeypatch.setattr(os, "replace", failing_replace)
    newer = jam_state.snapshot()
    newer.contests[0].entrants[0].score = 42

    assert store.save(newer) is False
    assert store.path.read_text(encoding="utf-8") == before
    assert not store.tmp_path.exists()


def test_serialization_failure_is_swallowed(store: DurableStore, jam_state, monkeypatch):
    store.save(jam_state)

    def boom(state):
        raise ValueError("cannot encode")

    monkeypatch.setattr("tapscore.persistence.store.encode_state", boom)
    assert store.save(jam_state) is False
    assert store.load() == jam_state


def test_unwritable_location_is_swallowed(tmp_path: Path, jam_state):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    store = DurableStore(blocker / "state.json")
    assert store.save(jam_state) is False
    assert store.load() is None


def test_reader_between_writes_sees_complete_documents(store: DurableStore, jam_state, monkeypatch):
    """Read the primary right before each replace: it must be the previous complete state."""
    states = []
    for i in range(5):
        s = jam_state.snapshot()
        s.contests[0].entrants[0].score = i
        states.append(s)

    observed = []
    real_replace = os.replace

    def spying_replace(src, dst):
        if Path(dst) == store.path:
            if store.path.exists():
                observed.append(("primary", decode_state(store.path.read_text(encoding="utf-8"))))
            observed.append(("incoming", decode_state(Path(src).read_text(encoding="utf-8"))))
        return real_replace(src, dst)

    monkeypatch.setattr(os, "replace", spying_replace)
    for s in states:
        store.save(s)

    primaries = [state for kind, state in observed if kind == "primary"]
    incoming = [state for kind, state in observed if kind == "incoming"]
    assert primaries == states[:-1]
    assert incoming == states
    assert store.load() == states[-1]


def test_concurrent_saves_never_mix(store: DurableStore):
    def make(tag: str) -> ApplicationState:
        return ApplicationState(contests=[
            Contest(name=f"{tag}-{i}", entrants=[Entrant(name=tag, score=i)]) for i in range(20)
        ])

    a, b = make("a"), make("b")

    def hammer(state):
        for _ in range(15):
            assert store.save(state)

    threads = [threading.Thread(target=hammer, args=(s,)) for s in (a, b)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.load() in (a, b)
    assert decode_state(store.backup_path.read_text(encoding="utf-8")) in (a, b)


def test_null_accent_does_not_discard_saved_state(store: DurableStore, jam_state):
    data = json.loads(encode_state(jam_state))
    data["contests"][0]["accentHex"] = None
    store.path.parent.mkdir(parents=True)
    store.path.write_text(json.dumps(data), encoding="utf-8")

    loaded = store.load()
    assert loaded is not None
    assert [c.name for c in loaded.contests] == ["Jam A", "Jam B"]
    assert loaded.contests[0].accent_hex == "#8B5CF6"
