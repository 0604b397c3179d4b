"""Card search, CSV load, and single-card endpoints."""
import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, ConfigDict

from mixaid.api.state import AppState, get_state
from mixaid.config import CARDLIST_PATH
from mixaid.core.ingest import load_all
from mixaid.errors import NotFoundError, StorageError, ValidationError
from mixaid.models.card import CARD_FIELDS, CardUpdate
from mixaid.models.search import SearchMode, SearchTerm

logger = logging.getLogger(__name__)

router = APIRouter()

# Query parameter choosing union (OR) or intersection (anything else)
CONNECTIVE_PARAM = "connective"


class CardPatchBody(BaseModel):
    """Partial card. Omitted fields are left alone; null clears a field."""
    model_config = ConfigDict(extra="ignore")

    season: Optional[str] = None
    level: Optional[Union[int, str]] = None
    power: Optional[Union[int, str]] = None
    artist: Optional[str] = None
    song: Optional[str] = None
    isYellow: Optional[Union[bool, str]] = None
    yellowInstrument: Optional[str] = None
    isRed: Optional[Union[bool, str]] = None
    redInstrument: Optional[str] = None
    isBlue: Optional[Union[bool, str]] = None
    blueInstrument: Optional[str] = None
    isGreen: Optional[Union[bool, str]] = None
    greenInstrument: Optional[str] = None
    isWhite: Optional[Union[bool, str]] = None
    isMulti: Optional[Union[bool, str]] = None
    playlist: Optional[str] = None
    playlistIndex: Optional[Union[int, str]] = None
    isFX: Optional[Union[bool, str]] = None
    FXRuleText: Optional[str] = None
    artURL: Optional[str] = None
    artHash: Optional[str] = None
    cardHash: Optional[str] = None


def _parse_query(request: Request) -> tuple[List[SearchTerm], SearchMode]:
    """Every parameter but the connective is a term; repeats give several terms."""
    terms = [
        SearchTerm(field=key, value=value)
        for key, value in request.query_params.multi_items()
        if key != CONNECTIVE_PARAM
    ]
    mode = SearchMode.OR if request.query_params.get(CONNECTIVE_PARAM) == "OR" else SearchMode.AND
    return terms, mode


@router.get("/")
async def query_cards(request: Request, state: AppState = Depends(get_state)):
    """Search cards by indexed field values, sorted by id."""
    terms, mode = _parse_query(request)
    if not terms:
        return []
    try:
        cards = await state.query_engine.search(terms, mode)
    except StorageError as e:
        logger.error("Error getting card: %s", e)
        raise HTTPException(status_code=500, detail="Error getting card data!")
    return sorted(cards, key=lambda c: str(c.get("id", "")))


@router.get("/load-data")
async def load_data(state: AppState = Depends(get_state)):
    """Refresh/create card data from the card list CSV."""
    if not CARDLIST_PATH.exists():
        raise HTTPException(status_code=404, detail=f"Card list not found: {CARDLIST_PATH.name}")
    report = await load_all(state.card_store, CARDLIST_PATH)
    return {
        "total": report.total,
        "saved": report.saved,
        "rejected": report.rejected,
        "failed": report.failed,
    }


@router.get("/fields")
def list_fields():
    """Card schema: field names, types, and which ones are searchable."""
    return [
        {
            "name": f.name,
            "type": f.type.value,
            "indexed": f.indexed,
            "indexGroup": f.index_group,
            "notes": f.notes,
        }
        for f in CARD_FIELDS
    ]


@router.get("/cards/{card_id}")
async def get_card(card_id: str, state: AppState = Depends(get_state)):
    try:
        card = await state.card_store.get(card_id)
    except StorageError as e:
        logger.error("Error getting card %s: %s", card_id, e)
        raise HTTPException(status_code=500, detail="Error getting card data!")
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


@router.patch("/cards/{card_id}")
async def update_card(
    card_id: str,
    body: CardPatchBody,
    state: AppState = Depends(get_state),
):
    """Create or partially update a card."""
    data = body.model_dump(exclude_unset=True)
    data["id"] = card_id
    try:
        return await state.card_store.save(CardUpdate.from_mapping(data))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        logger.error("Error saving card %s: %s", card_id, e)
        raise HTTPException(status_code=500, detail="Could not save card data!")


@router.delete("/cards/{card_id}", status_code=204)
async def delete_card(card_id: str, state: AppState = Depends(get_state)):
    try:
        await state.card_store.delete(card_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Card not found")
    except StorageError as e:
        logger.error("Error deleting card %s: %s", card_id, e)
        raise HTTPException(status_code=500, detail="Could not delete card data!")
    return Response(status_code=204)
