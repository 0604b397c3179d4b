"""Load the card list CSV into the store.

Column-level changes to the card list CSV must be reflected in row_to_card.
"""
import asyncio
import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from mixaid.core.card_store import CardStore
from mixaid.errors import MixAidError, ValidationError

logger = logging.getLogger(__name__)

# Single-color cards: Color column -> (flag field, instrument field)
SINGLE_COLORS = {
    "Lead": ("isYellow", "yellowInstrument"),
    "Loop": ("isRed", "redInstrument"),
    "Beat": ("isBlue", "blueInstrument"),
    "Bass": ("isGreen", "greenInstrument"),
}
# Order of the pipe-separated instruments on a Wild card
WILD_SLOTS = SINGLE_COLORS["Lead"], SINGLE_COLORS["Loop"], SINGLE_COLORS["Beat"], SINGLE_COLORS["Bass"]
WILD_POWER = 4
FX_POWER = 4


@dataclass
class LoadReport:
    total: int = 0
    saved: int = 0
    rejected: int = 0
    failed: int = 0


def _cell(row: Mapping[str, Any], column: str) -> Optional[str]:
    value = row.get(column)
    if value is None:
        return None
    value = value.strip()
    return value or None


def row_to_card(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Map one CSV row to a card dict ready for CardStore.save.

    Raises ValidationError for an unknown color or a Wild card whose
    instrument list does not have exactly four entries.
    """
    season, card_no = _cell(row, "Season"), _cell(row, "CardNo")
    if season is None or card_no is None:
        raise ValidationError("Season and CardNo are required", field="id")

    card: Dict[str, Any] = {
        "id": f"{season}-{card_no}",
        "season": season,
        "level": _cell(row, "Level"),
        "artist": _cell(row, "Artist"),
        "song": _cell(row, "Title"),
        "playlist": _cell(row, "Playlist"),
        "artHash": _cell(row, "ArtHash"),
        "cardHash": _cell(row, "CardHash"),
    }
    # optional columns only touch the card when the sheet has them
    if "PlaylistIndex" in row:
        card["playlistIndex"] = _cell(row, "PlaylistIndex")
    if "ArtURL" in row:
        card["artURL"] = _cell(row, "ArtURL")
    card["power"] = card["level"]

    color = _cell(row, "Color")
    instrument = _cell(row, "Instrument")
    if color == "Wild":
        instruments = (instrument or "").split("|")
        if len(instruments) != len(WILD_SLOTS):
            raise ValidationError(f"bad instrument value: {instrument}", field="Instrument")
        for (flag, slot), name in zip(WILD_SLOTS, instruments):
            card[flag] = True
            card[slot] = name.strip()
        card["isMulti"] = True
        card["power"] = WILD_POWER
    elif color in SINGLE_COLORS:
        flag, slot = SINGLE_COLORS[color]
        card[flag] = True
        card[slot] = instrument
    elif color == "White":
        card["isWhite"] = True
        card["isFX"] = True
        card["FXRuleText"] = _cell(row, "Notes")
        card["power"] = FX_POWER
    else:
        raise ValidationError(f"bad color: {color}", field="Color")
    return card


def _read_rows(path: Path) -> List[Dict[str, str]]:
    # undecodable bytes become lone surrogates; load_all rejects rows carrying them
    with open(path, newline="", encoding="utf-8-sig", errors="surrogateescape") as f:
        return list(csv.DictReader(f))


def _undecodable_column(row: Mapping[str, Any]) -> Optional[str]:
    for column, value in row.items():
        if isinstance(value, str) and any("\udc80" <= ch <= "\udcff" for ch in value):
            return column
    return None


async def load_all(store: CardStore, path: Path) -> LoadReport:
    """Save every row of the CSV; bad rows and failed saves are logged and skipped."""
    report = LoadReport()
    rows = await asyncio.to_thread(_read_rows, path)
    # line numbers count the header as line 1
    for line, row in enumerate(rows, start=2):
        report.total += 1
        bad_column = _undecodable_column(row)
        if bad_column is not None:
            logger.warning("Skipping line %d: %s is not valid UTF-8", line, bad_column)
            report.rejected += 1
            continue
        try:
            card = row_to_card(row)
        except ValidationError as e:
            logger.warning("Skipping line %d: %s", line, e)
            report.rejected += 1
            continue
        try:
            await store.save(card)
        except MixAidError as e:
            logger.error("Error saving card %s, line %d: %s", card["id"], line, e)
            report.failed += 1
            continue
        report.saved += 1
    logger.info(
        "Loaded %s: %d saved, %d rejected, %d failed",
        path, report.saved, report.rejected, report.failed,
    )
    return report
