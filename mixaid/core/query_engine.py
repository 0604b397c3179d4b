"""Multi-field AND/OR card search over the per-value index sets."""
import logging
from typing import Iterable, List

from redis.exceptions import RedisError

from mixaid.core.card_store import CardStore
from mixaid.errors import StorageError
from mixaid.models.card import FIELDS_BY_NAME, Card
from mixaid.models.search import SearchMode, SearchTerm

logger = logging.getLogger(__name__)


class QueryEngine:
    def __init__(self, store: CardStore) -> None:
        self._store = store

    def term_key(self, term: SearchTerm) -> str:
        """Index set key for a term; values of known fields are normalized like writes."""
        spec = FIELDS_BY_NAME.get(term.field)
        value = spec.normalize(term.value) if spec is not None else str(term.value)
        return self._store.keys.index(term.field, value)

    async def search(self, terms: Iterable[SearchTerm], mode: SearchMode = SearchMode.AND) -> List[Card]:
        """Cards matching all (AND) or any (OR) of the terms, in no particular order.

        An empty term list matches nothing. Missing index sets count as empty.
        """
        set_keys = [
            self.term_key(t) for t in terms
            if t.field is not None and t.value is not None
        ]
        if not set_keys:
            return []
        client = self._store.client
        try:
            if mode is SearchMode.OR:
                card_ids = await client.sunion(set_keys)
            else:
                card_ids = await client.sinter(set_keys)
        except RedisError as e:
            logger.error("Set %s over %s failed: %s", mode.value, set_keys, e)
            raise StorageError(f"Could not get set {'union' if mode is SearchMode.OR else 'intersection'}") from e
        logger.debug("Search %s over %d sets matched %d cards", mode.value, len(set_keys), len(card_ids))
        return await self._store.get_many(card_ids)
