"""Card schema, per-field coercion, and the tri-state field update."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from mixaid.errors import ValidationError

logger = logging.getLogger(__name__)

Card = Dict[str, Any]

_TRUE_TOKENS = ("true", "1", "yes", "on")
_FALSE_TOKENS = ("false", "0", "no", "off", "")


class FieldType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class FieldSpec:
    """One column of the card schema."""
    name: str
    type: FieldType
    indexed: bool
    index_group: Optional[str] = None
    notes: str = ""

    def encode(self, value: Any) -> str:
        """Strict write coercion to the stored text form. Raises ValidationError."""
        if self.type is FieldType.STRING:
            return value if isinstance(value, str) else str(value)
        if self.type is FieldType.BOOLEAN:
            return "true" if _to_bool(self.name, value) else "false"
        return str(_to_int(self.name, value))

    def decode(self, raw: str) -> Any:
        """Permissive read coercion: malformed integers come back as stored."""
        if self.type is FieldType.BOOLEAN:
            return raw.strip().lower() in _TRUE_TOKENS
        if self.type is FieldType.INTEGER:
            try:
                return int(raw.strip())
            except ValueError:
                return raw
        return raw

    def normalize(self, value: Any) -> str:
        """Lenient encoding for search terms; falls back to the text as given."""
        try:
            return self.encode(value)
        except ValidationError:
            return str(value)


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, str):
        token = value.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
        raise ValidationError(f"{name} is not of type boolean", field=name)
    return bool(value)


def _to_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} is not of type integer", field=name)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{name} is not of type integer", field=name)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"{name} is not of type integer", field=name)


S, I, B = FieldType.STRING, FieldType.INTEGER, FieldType.BOOLEAN

CARD_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("id", S, False, notes='concatenation of season and card number, e.g. "S01-C001"'),
    FieldSpec("season", S, True, notes='e.g. "S01", "P01"'),
    FieldSpec("level", I, True, notes="1-3"),
    FieldSpec("power", I, True, notes="1-4"),
    FieldSpec("artist", S, True, notes='e.g. "Dolly Parton"'),
    FieldSpec("song", S, True, notes='e.g. "Jolene"'),
    FieldSpec("isYellow", B, True, notes="card has a yellow instrument part"),
    FieldSpec("yellowInstrument", S, True, "instrument", 'e.g. "Vocals"'),
    FieldSpec("isRed", B, True, notes="card has a red instrument part"),
    FieldSpec("redInstrument", S, True, "instrument", 'e.g. "Guitar"'),
    FieldSpec("isBlue", B, True, notes="card has a blue instrument part"),
    FieldSpec("blueInstrument", S, True, "instrument", 'e.g. "Drums"'),
    FieldSpec("isGreen", B, True, notes="card has a green instrument part"),
    FieldSpec("greenInstrument", S, True, "instrument", 'e.g. "Keys"'),
    FieldSpec("isWhite", B, True, notes="white card (no color)"),
    FieldSpec("isMulti", B, True, notes="card has multiple colors"),
    FieldSpec("playlist", S, True, notes='e.g. "Moonlight"'),
    FieldSpec("playlistIndex", I, False, notes="position in the playlist, usually 1-15"),
    FieldSpec("isFX", B, True, notes="card has special FX rules when played"),
    FieldSpec("FXRuleText", S, False, notes="description of the FX rules"),
    FieldSpec("artURL", S, False, notes="URL to the card artwork"),
    FieldSpec("artHash", S, False, notes="hash for accessing the card artwork"),
    FieldSpec("cardHash", S, False, notes="unique card hash"),
)

FIELDS_BY_NAME: Dict[str, FieldSpec] = {f.name: f for f in CARD_FIELDS}


def decode_card(raw: Mapping[str, str]) -> Card:
    """Turn a stored hash into a card, coercing known fields."""
    card: Card = {}
    for name, value in raw.items():
        spec = FIELDS_BY_NAME.get(name)
        card[name] = spec.decode(value) if spec is not None else value
    return card


class UpdateKind(str, Enum):
    UNSET = "unset"
    CLEAR = "clear"
    SET = "set"


@dataclass(frozen=True)
class FieldUpdate:
    """What a save does to one field: leave it, clear it, or set it."""
    kind: UpdateKind
    value: Any = None

    @classmethod
    def set(cls, value: Any) -> "FieldUpdate":
        if value is None:
            raise ValueError("FieldUpdate.set needs a value; use FieldUpdate.clear()")
        return cls(UpdateKind.SET, value)

    @classmethod
    def clear(cls) -> "FieldUpdate":
        return _CLEAR


_UNSET = FieldUpdate(UpdateKind.UNSET)
_CLEAR = FieldUpdate(UpdateKind.CLEAR)


@dataclass
class CardUpdate:
    """A partial write against the card `card_id`. Missing fields are UNSET."""
    card_id: str
    fields: Dict[str, FieldUpdate] = field(default_factory=dict)

    def get(self, name: str) -> FieldUpdate:
        return self.fields.get(name, _UNSET)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CardUpdate":
        """Build from a loose dict: absent leaves alone, None clears, else sets."""
        card_id = data.get("id")
        if card_id is None or (isinstance(card_id, str) and not card_id.strip()):
            raise ValidationError("a card ID is required", field="id")
        updates: Dict[str, FieldUpdate] = {}
        for name, value in data.items():
            if name == "id":
                continue
            if name not in FIELDS_BY_NAME:
                logger.debug("Ignoring unknown field %r on card %s", name, card_id)
                continue
            updates[name] = FieldUpdate.clear() if value is None else FieldUpdate.set(value)
        return cls(card_id=str(card_id), fields=updates)
