from unittest.mock import Mock

import pytest

from mixaid.core.index_maintainer import compute_diff, compute_retractions
from mixaid.core.keys import KeySpace
from mixaid.errors import ValidationError
from mixaid.models.card import CardUpdate

KEYS = KeySpace("ns")


def _diff(old, data):
    return compute_diff(KEYS, data["id"], old, CardUpdate.from_mapping(data))


def test_key_space():
    assert KEYS.data("S01-C001") == "ns:data:S01-C001"
    assert KEYS.index("isRed", "true") == "ns:sets:isRed:true"


def test_new_card_writes_everything_and_drops_nulls():
    diff = _diff(None, {"id": "S1-1", "season": "S1", "level": "2", "isRed": True, "artist": None})
    assert diff.hash_writes == {"id": "S1-1", "season": "S1", "level": "2", "isRed": "true"}
    assert diff.hash_deletes == []
    assert sorted(diff.index_adds) == ["ns:sets:isRed:true", "ns:sets:level:2", "ns:sets:season:S1"]
    assert diff.index_removes == []


def test_unchanged_fields_emit_nothing():
    old = {"id": "S1-1", "season": "S1", "level": "2", "isRed": "true"}
    diff = _diff(old, {"id": "S1-1", "season": "S1", "level": 2, "isRed": "TRUE"})
    assert diff.is_empty


def test_changed_indexed_field_moves_membership():
    old = {"id": "S1-1", "season": "S1", "level": "2"}
    diff = _diff(old, {"id": "S1-1", "level": 3})
    assert diff.hash_writes == {"level": "3"}
    assert diff.index_removes == ["ns:sets:level:2"]
    assert diff.index_adds == ["ns:sets:level:3"]


def test_new_field_on_existing_card_has_no_removal():
    old = {"id": "S1-1", "season": "S1"}
    diff = _diff(old, {"id": "S1-1", "artist": "X"})
    assert diff.index_removes == []
    assert diff.index_adds == ["ns:sets:artist:X"]


def test_clear_retracts_old_value():
    old = {"id": "S1-1", "isYellow": "false"}
    diff = _diff(old, {"id": "S1-1", "isYellow": None})
    assert diff.hash_deletes == ["isYellow"]
    assert diff.index_removes == ["ns:sets:isYellow:false"]
    assert diff.index_adds == []


def test_clear_of_absent_field_is_noop():
    diff = _diff({"id": "S1-1"}, {"id": "S1-1", "artist": None})
    assert diff.is_empty


def test_non_indexed_field_touches_no_sets():
    old = {"id": "S1-1", "artHash": "a"}
    diff = _diff(old, {"id": "S1-1", "artHash": "b", "playlistIndex": 4})
    assert diff.hash_writes == {"artHash": "b", "playlistIndex": "4"}
    assert diff.index_adds == [] and diff.index_removes == []


def test_legacy_value_is_retracted_by_stored_text():
    old = {"id": "S1-1", "level": "02"}
    diff = _diff(old, {"id": "S1-1", "level": 2})
    assert diff.index_removes == ["ns:sets:level:02"]
    assert diff.index_adds == ["ns:sets:level:2"]


def test_missing_stored_id_is_restored():
    diff = _diff({"season": "S1"}, {"id": "S1-1", "season": "S1"})
    assert diff.hash_writes == {"id": "S1-1"}


def test_bad_integer_fails_whole_diff():
    with pytest.raises(ValidationError) as exc:
        _diff(None, {"id": "S1-1", "season": "S1", "power": "high"})
    assert exc.value.field == "power"


def test_apply_and_queue():
    old = {"id": "S1-1", "level": "2", "artist": "X"}
    diff = _diff(old, {"id": "S1-1", "level": 3, "artist": None})
    assert diff.apply(old) == {"id": "S1-1", "level": "3"}

    pipe = Mock()
    diff.queue(pipe, "ns:data:S1-1", "S1-1")
    pipe.hdel.assert_called_once_with("ns:data:S1-1", "artist")
    pipe.hset.assert_called_once_with("ns:data:S1-1", mapping={"level": "3"})
    assert sorted(c.args[0] for c in pipe.srem.call_args_list) == ["ns:sets:artist:X", "ns:sets:level:2"]
    pipe.sadd.assert_called_once_with("ns:sets:level:3", "S1-1")


def test_retractions_cover_every_indexed_value():
    raw = {"id": "S1-1", "season": "S1", "isRed": "true", "isBlue": "false", "artHash": "h"}
    assert sorted(compute_retractions(KEYS, raw)) == [
        "ns:sets:isBlue:false",
        "ns:sets:isRed:true",
        "ns:sets:season:S1",
    ]
