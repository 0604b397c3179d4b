"""Persist and load cards as Redis hashes, keeping their index sets in sync."""
import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from redis.exceptions import RedisError, WatchError

from mixaid.config import KEY_NAMESPACE, SAVE_RETRIES
from mixaid.core.index_maintainer import compute_diff, compute_retractions
from mixaid.core.keys import KeySpace
from mixaid.errors import NotFoundError, StorageError, ValidationError
from mixaid.models.card import Card, CardUpdate, decode_card

logger = logging.getLogger(__name__)


class CardStore:
    """Card CRUD over an async Redis client created with decode_responses=True.

    The client is owned by the caller (opened on service start, closed on
    shutdown); the store only borrows it.
    """

    def __init__(
        self,
        client,
        namespace: str = KEY_NAMESPACE,
        retries: int = SAVE_RETRIES,
    ) -> None:
        self._client = client
        self.keys = KeySpace(namespace)
        self._retries = max(1, retries)

    @property
    def client(self):
        return self._client

    async def get(self, card_id: str) -> Optional[Card]:
        """Return the card or None. Malformed stored values are passed through."""
        try:
            raw = await self._client.hgetall(self.keys.data(card_id))
        except RedisError as e:
            raise StorageError(f"Could not retrieve card ID {card_id}") from e
        if not raw:
            return None
        return decode_card(raw)

    async def get_many(self, card_ids: Iterable[str]) -> List[Card]:
        """Fetch several cards in one round trip; ids with no stored card are skipped."""
        ids = list(card_ids)
        if not ids:
            return []
        try:
            async with self._client.pipeline(transaction=False) as pipe:
                for card_id in ids:
                    pipe.hgetall(self.keys.data(card_id))
                results = await pipe.execute()
        except RedisError as e:
            raise StorageError("Could not fetch cards") from e
        cards = []
        # pipeline replies come back in command order
        for card_id, raw in zip(ids, results):
            if not raw:
                logger.debug("Card %s vanished before hydration", card_id)
                continue
            cards.append(decode_card(raw))
        return cards

    async def save(self, card: Union[CardUpdate, Mapping[str, Any]]) -> Card:
        """Create or partially update a card and return it as stored.

        Fields not in the update are left alone, None clears a field.
        Raises ValidationError for a missing id or a value that fails its
        field type, StorageError if the transaction fails.
        """
        update = card if isinstance(card, CardUpdate) else CardUpdate.from_mapping(card)
        if not update.card_id:
            raise ValidationError("a card ID is required", field="id")
        data_key = self.keys.data(update.card_id)

        for attempt in range(1, self._retries + 1):
            try:
                async with self._client.pipeline(transaction=True) as pipe:
                    await pipe.watch(data_key)
                    old_raw = await pipe.hgetall(data_key) or None
                    diff = compute_diff(self.keys, update.card_id, old_raw, update)
                    if diff.is_empty:
                        logger.debug("Save of card %s changed nothing", update.card_id)
                        return decode_card(old_raw or {})
                    pipe.multi()
                    diff.queue(pipe, data_key, update.card_id)
                    await pipe.execute()
                    return decode_card(diff.apply(old_raw))
            except WatchError:
                logger.warning(
                    "Card %s changed during save, retrying (%d/%d)",
                    update.card_id, attempt, self._retries,
                )
            except RedisError as e:
                logger.error("Save of card %s failed: %s", update.card_id, e)
                raise StorageError(f"Could not save card data for {update.card_id}") from e
        raise StorageError(f"Card {update.card_id} kept changing; gave up after {self._retries} attempts")

    async def delete(self, card_id: str) -> None:
        """Remove a card and every index membership it holds."""
        data_key = self.keys.data(card_id)
        for attempt in range(1, self._retries + 1):
            try:
                async with self._client.pipeline(transaction=True) as pipe:
                    await pipe.watch(data_key)
                    raw = await pipe.hgetall(data_key)
                    if not raw:
                        raise NotFoundError(card_id)
                    pipe.multi()
                    pipe.delete(data_key)
                    for key in compute_retractions(self.keys, raw):
                        pipe.srem(key, card_id)
                    await pipe.execute()
                    return
            except WatchError:
                logger.warning(
                    "Card %s changed during delete, retrying (%d/%d)",
                    card_id, attempt, self._retries,
                )
            except RedisError as e:
                logger.error("Delete of card %s failed: %s", card_id, e)
                raise StorageError(f"Could not delete card data for {card_id}") from e
        raise StorageError(f"Card {card_id} kept changing; gave up after {self._retries} attempts")
