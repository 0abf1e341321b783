import json

import pytest

from tapscore.persistence import (
    SCHEMA_VERSION,
    ApplicationState,
    Contest,
    Entrant,
    SaveValidationError,
    UnsupportedSchemaError,
    decode_state,
    encode_state,
)


def test_encode_uses_wire_field_names(jam_state):
    data = json.loads(encode_state(jam_state))
    assert data["schemaVersion"] == SCHEMA_VERSION
    assert data["selectedContestID"] == "11111111-1111-4111-8111-111111111111"
    contest = data["contests"][0]
    assert set(contest) == {"id", "name", "createdAt", "entrants", "accentHex"}
    assert contest["createdAt"] == "2026-01-25T18:30:00Z"
    assert contest["entrants"][2] == {
        "id": "aaaaaaaa-0000-4000-8000-000000000003",
        "name": "Carol",
        "score": 5,
    }


def test_round_trip_preserves_contests_and_order(jam_state):
    decoded = decode_state(encode_state(jam_state))
    assert decoded == jam_state
    assert [e.name for e in decoded.contests[0].entrants] == ["Alice", "Bob", "Carol"]


def test_missing_optional_fields_take_defaults(jam_state):
    data = json.loads(encode_state(jam_state))
    del data["selectedContestID"]
    del data["contests"][0]["accentHex"]
    del data["contests"][0]["entrants"][0]["score"]

    decoded = decode_state(json.dumps(data))
    assert decoded.selected_contest_id is None
    assert decoded.contests[0].accent_hex == "#8B5CF6"
    assert decoded.contests[0].entrants[0].score == 0
    # Callers fall back to the first contest
    assert decoded.resolved_selection().name == "Jam A"


@pytest.mark.parametrize("accent", [None, "", "#FFF", "purple", 123])
def test_unusable_accent_falls_back_to_default(jam_state, accent):
    data = json.loads(encode_state(jam_state))
    data["contests"][0]["accentHex"] = accent

    decoded = decode_state(json.dumps(data))
    assert decoded.contests[0].accent_hex == "#8B5CF6"
    assert decoded.contests[0].entrants == jam_state.contests[0].entrants
    assert decoded.contests[1] == jam_state.contests[1]

def test_schema_version_zero_is_rejected(jam_state):
    data = json.loads(encode_state(jam_state))
    data["schemaVersion"] = 0
    with pytest.raises(UnsupportedSchemaError):
        decode_state(json.dumps(data))


def test_invalid_json_and_schema_violations():
    with pytest.raises(SaveValidationError):
        decode_state("{ not json")
    with pytest.raises(SaveValidationError):
        decode_state(json.dumps({"contests": []}))
    with pytest.raises(SaveValidationError):
        decode_state(json.dumps({"schemaVersion": 1, "contests": [{"id": "x", "name": "A"}]}))
    with pytest.raises(SaveValidationError):
        decode_state(json.dumps({
            "schemaVersion": 1,
            "contests": [{
                "id": "11111111-1111-4111-8111-111111111111",
                "name": "A",
                "createdAt": "2026-01-25T18:30:00Z",
                "entrants": [{"id": "e", "name": "Neg", "score": -1}],
            }],
        }))


def test_bad_uuid_and_timestamp_are_validation_errors():
    base = {
        "schemaVersion": 1,
        "contests": [{
            "id": "not-a-uuid",
            "name": "A",
            "createdAt": "2026-01-25T18:30:00Z",
            "entrants": [],
        }],
    }
    with pytest.raises(SaveValidationError):
        decode_state(json.dumps(base))
    base["contests"][0]["id"] = "11111111-1111-4111-8111-111111111111"
    base["contests"][0]["createdAt"] = "yesterday"
    with pytest.raises(SaveValidationError):
        decode_state(json.dumps(base))


def test_model_validation():
    with pytest.raises(SaveValidationError):
        Entrant(name="Neg", score=-1)
    with pytest.raises(SaveValidationError):
        Contest(name="Bad color", accent_hex="purple")


def test_snapshot_is_independent(jam_state):
    snap = jam_state.snapshot()
    jam_state.contests[0].entrants[0].score = 99
    jam_state.contests.pop()
    assert snap.contests[0].entrants[0].score == 3
    assert len(snap.contests) == 2


def test_empty_state_round_trip():
    empty = ApplicationState()
    assert decode_state(encode_state(empty)) == empty
