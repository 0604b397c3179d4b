"""Data models for cards, field updates and search terms."""
from mixaid.models.card import (
    CARD_FIELDS,
    FIELDS_BY_NAME,
    Card,
    CardUpdate,
    FieldSpec,
    FieldType,
    FieldUpdate,
    UpdateKind,
    decode_card,
)
from mixaid.models.search import SearchMode, SearchTerm

__all__ = [
    "CARD_FIELDS",
    "FIELDS_BY_NAME",
    "Card",
    "CardUpdate",
    "FieldSpec",
    "FieldType",
    "FieldUpdate",
    "UpdateKind",
    "decode_card",
    "SearchMode",
    "SearchTerm",
]
