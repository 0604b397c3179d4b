import pytest

from mixaid.errors import ValidationError
from mixaid.models.card import (
    CARD_FIELDS,
    FIELDS_BY_NAME,
    CardUpdate,
    FieldUpdate,
    UpdateKind,
    decode_card,
)


def test_schema_shape():
    names = [f.name for f in CARD_FIELDS]
    assert names[0] == "id"
    assert not FIELDS_BY_NAME["id"].indexed
    assert not FIELDS_BY_NAME["playlistIndex"].indexed
    assert FIELDS_BY_NAME["level"].indexed
    instrument_fields = {f.name for f in CARD_FIELDS if f.index_group == "instrument"}
    assert instrument_fields == {"yellowInstrument", "redInstrument", "blueInstrument", "greenInstrument"}


@pytest.mark.parametrize("value,expected", [
    (True, "true"),
    (False, "false"),
    ("true", "true"),
    ("FALSE", "false"),
    ("0", "false"),
    ("", "false"),
    ("yes", "true"),
    (1, "true"),
    (0, "false"),
])
def test_boolean_encode_normalizes(value, expected):
    assert FIELDS_BY_NAME["isRed"].encode(value) == expected


def test_integer_encode_strict():
    level = FIELDS_BY_NAME["level"]
    assert level.encode(2) == "2"
    assert level.encode(" 3 ") == "3"
    assert level.encode(3.0) == "3"
    for bad in ("abc", "2.5", 2.5, True, [1]):
        with pytest.raises(ValidationError) as exc:
            level.encode(bad)
        assert exc.value.field == "level"
        assert "level" in str(exc.value)


def test_decode_is_permissive():
    card = decode_card({
        "id": "S01-C001",
        "level": "2",
        "power": "lots",
        "isRed": "true",
        "isBlue": "false",
        "legacy": "kept",
    })
    assert card == {
        "id": "S01-C001",
        "level": 2,
        "power": "lots",
        "isRed": True,
        "isBlue": False,
        "legacy": "kept",
    }


def test_search_normalize_falls_back_to_text():
    assert FIELDS_BY_NAME["isRed"].normalize("True") == "true"
    assert FIELDS_BY_NAME["level"].normalize("02") == "2"
    assert FIELDS_BY_NAME["level"].normalize("two") == "two"


def test_card_update_from_mapping_tri_state():
    update = CardUpdate.from_mapping({"id": "S01-C001", "song": "Jolene", "isRed": None, "bogus": 1})
    assert update.card_id == "S01-C001"
    assert update.get("song") == FieldUpdate.set("Jolene")
    assert update.get("isRed").kind is UpdateKind.CLEAR
    assert update.get("artist").kind is UpdateKind.UNSET
    assert "bogus" not in update.fields


@pytest.mark.parametrize("data", [{}, {"id": None}, {"id": "  "}, {"song": "x"}])
def test_card_update_requires_id(data):
    with pytest.raises(ValidationError):
        CardUpdate.from_mapping(data)


def test_field_update_set_rejects_none():
    with pytest.raises(ValueError):
        FieldUpdate.set(None)


@pytest.mark.parametrize("value", ["banana", "2", "maybe"])
def test_boolean_encode_rejects_unknown_tokens(value):
    with pytest.raises(ValidationError) as exc:
        FIELDS_BY_NAME["isRed"].encode(value)
    assert exc.value.field == "isRed"


def test_boolean_normalize_keeps_unknown_tokens_as_text():
    assert FIELDS_BY_NAME["isRed"].normalize("banana") == "banana"
    assert FIELDS_BY_NAME["isRed"].normalize("YES") == "true"
