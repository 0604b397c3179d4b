"""Diff a partial card update against the stored hash and derive index changes.

Redis has no "update a hash field and fix up the sets derived from it"
primitive, so every save computes the exact HSET/HDEL/SADD/SREM commands that
move a card from its stored state to its new state and queues them on one
MULTI/EXEC pipeline. Everything here is synchronous and in-memory; the card
store owns the I/O around it.

Values are compared and indexed in their stored text form (see
FieldSpec.encode). Old memberships are retracted using the stored text, so a
value is always removed from exactly the set it was added to.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from mixaid.core.keys import KeySpace
from mixaid.models.card import CARD_FIELDS, CardUpdate, UpdateKind


@dataclass
class CardDiff:
    """Mutations needed to apply one save."""
    hash_writes: Dict[str, str] = field(default_factory=dict)
    hash_deletes: List[str] = field(default_factory=list)
    index_adds: List[str] = field(default_factory=list)
    index_removes: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.hash_writes or self.hash_deletes or self.index_adds or self.index_removes)

    def apply(self, raw: Optional[Mapping[str, str]]) -> Dict[str, str]:
        """Return the hash as it will be stored once this diff is executed."""
        out = dict(raw or {})
        for name in self.hash_deletes:
            out.pop(name, None)
        out.update(self.hash_writes)
        return out

    def queue(self, pipe, data_key: str, card_id: str) -> None:
        """Buffer the commands on a pipeline already switched to MULTI."""
        if self.hash_deletes:
            pipe.hdel(data_key, *self.hash_deletes)
        if self.hash_writes:
            pipe.hset(data_key, mapping=self.hash_writes)
        for key in self.index_removes:
            pipe.srem(key, card_id)
        for key in self.index_adds:
            pipe.sadd(key, card_id)


def compute_diff(
    keys: KeySpace,
    card_id: str,
    old_raw: Optional[Mapping[str, str]],
    update: CardUpdate,
) -> CardDiff:
    """Compute the diff for saving `update` over `old_raw` (None for a new card).

    Raises ValidationError if a SET value fails its field's type.
    """
    is_new = old_raw is None
    old = old_raw or {}
    diff = CardDiff()

    if old.get("id") != card_id:
        diff.hash_writes["id"] = card_id

    for spec in CARD_FIELDS:
        if spec.name == "id":
            continue
        change = update.get(spec.name)
        if change.kind is UpdateKind.UNSET:
            continue

        old_value = None if is_new else old.get(spec.name)

        if change.kind is UpdateKind.CLEAR:
            # new cards never carry nulls; nothing stored means nothing to clear
            if old_value is None:
                continue
            diff.hash_deletes.append(spec.name)
            if spec.indexed:
                diff.index_removes.append(keys.index(spec.name, old_value))
            continue

        new_value = spec.encode(change.value)
        if old_value == new_value:
            continue
        diff.hash_writes[spec.name] = new_value
        if spec.indexed:
            if old_value is not None:
                diff.index_removes.append(keys.index(spec.name, old_value))
            diff.index_adds.append(keys.index(spec.name, new_value))

    return diff


def compute_retractions(keys: KeySpace, raw: Mapping[str, str]) -> List[str]:
    """Index sets a stored card is a member of."""
    return [
        keys.index(spec.name, raw[spec.name])
        for spec in CARD_FIELDS
        if spec.indexed and raw.get(spec.name) is not None
    ]
