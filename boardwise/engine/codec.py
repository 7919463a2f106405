"""
Board codec.
Encodes a board configuration to a URL-safe share token or a plain JSON file,
and decodes either form back through a single normalization path.
"""

import base64
import binascii
import json
import logging
from typing import Any
from urllib.parse import unquote

from boardwise.engine.definitions import (
    DEFAULT_TILE_COLOR,
    FINISH_TILE_COLOR,
    START_TILE_COLOR,
    TILE_EMPTY,
    TILE_FINISH,
    TILE_START,
    TILE_TYPE_EMOJIS,
)
from boardwise.engine.errors import InvalidFormat
from boardwise.engine.state import BoardConfig, BoardSettings, Tile, TileUI
from boardwise.engine.utils import new_id

logger = logging.getLogger(__name__)

REQUIRED_BOARD_KEYS = ("id", "settings", "tiles")


# ===== Tile layout =====

def _start_tile(tile_id: str | None = None) -> Tile:
    return Tile(
        id=tile_id or new_id(),
        type=TILE_START,
        position=0,
        ui=TileUI(color=START_TILE_COLOR, icon=TILE_TYPE_EMOJIS[TILE_START]),
    )


def _finish_tile(position: int, tile_id: str | None = None) -> Tile:
    return Tile(
        id=tile_id or new_id(),
        type=TILE_FINISH,
        position=position,
        ui=TileUI(color=FINISH_TILE_COLOR, icon=TILE_TYPE_EMOJIS[TILE_FINISH]),
    )


def _empty_tile(position: int) -> Tile:
    return Tile(
        id=new_id(),
        type=TILE_EMPTY,
        position=position,
        ui=TileUI(color=DEFAULT_TILE_COLOR, icon=TILE_TYPE_EMOJIS[TILE_EMPTY]),
    )


def tiles_need_layout(tiles: list[Tile], number_of_tiles: int) -> bool:
    """True when tiles disagree with the board shape (count, start/finish, positions)."""
    if len(tiles) != number_of_tiles or not tiles:
        return True
    if tiles[0].type != TILE_START:
        return True
    if len(tiles) > 1 and tiles[-1].type != TILE_FINISH:
        return True
    return any(tile.position != index for index, tile in enumerate(tiles))


def resize_tiles(tiles: list[Tile], number_of_tiles: int) -> list[Tile]:
    """
    Reconcile a tile list with number_of_tiles.
    Position 0 becomes the start tile, the last position the finish tile (when
    there is more than one tile). Other positions keep their existing non-start/
    non-finish tile or become empty tiles.
    """
    if not tiles_need_layout(tiles, number_of_tiles):
        return list(tiles)

    by_position = {t.position: t for t in tiles}
    new_tiles = []
    for index in range(number_of_tiles):
        existing = by_position.get(index)
        if index == 0:
            keep_id = existing.id if existing and existing.type == TILE_START else None
            new_tiles.append(_start_tile(keep_id))
        elif index == number_of_tiles - 1:
            keep_id = existing.id if existing and existing.type == TILE_FINISH else None
            new_tiles.append(_finish_tile(index, keep_id))
        elif existing and existing.type not in (TILE_START, TILE_FINISH):
            new_tiles.append(Tile(
                id=existing.id,
                type=existing.type,
                position=index,
                config=existing.config,
                ui=existing.ui,
            ))
        else:
            new_tiles.append(_empty_tile(index))
    return new_tiles


def new_board(settings: BoardSettings | None = None) -> BoardConfig:
    """Fresh board for the designer: default settings, start, empty tiles, finish."""
    settings = settings or BoardSettings()
    return BoardConfig(
        id=new_id(),
        settings=settings,
        tiles=resize_tiles([], settings.number_of_tiles),
    )


# ===== Normalization =====

def normalize_board(draft: Any) -> BoardConfig:
    """
    Turn a decoded draft document into a valid BoardConfig.

    Rejects drafts without id/settings/tiles. Settings get defaults for every
    missing field, clamped counts and the legacy punishmentMode migrated away.
    Quiz options are re-normalized to exactly one correct answer and the tile
    list is reconciled with numberOfTiles.
    """
    if not isinstance(draft, dict):
        raise InvalidFormat("Board data must be a JSON object")
    missing = [k for k in REQUIRED_BOARD_KEYS if draft.get(k) is None or draft.get(k) == ""]
    if missing:
        raise InvalidFormat(f"Invalid board data structure (missing: {', '.join(missing)})")
    if not isinstance(draft["settings"], dict) or not isinstance(draft["tiles"], list):
        raise InvalidFormat("Invalid board data structure (settings must be an object, tiles a list)")

    config = BoardConfig.from_dict(draft)
    config.tiles = resize_tiles(config.tiles, config.settings.number_of_tiles)
    return config


# ===== Transport encodings =====

def encode_board_file(config: BoardConfig) -> str:
    """Plain JSON document (file export)."""
    return json.dumps(config.to_dict(), ensure_ascii=False, indent=2)


def decode_board_file(text: str) -> BoardConfig:
    """Parse a file-exported board; same normalization as share links."""
    try:
        draft = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise InvalidFormat(f"Board file is not valid JSON: {e}") from e
    return normalize_board(draft)


def encode_board(config: BoardConfig) -> str:
    """URL-safe share token: base64url of the UTF-8 JSON document, no padding."""
    raw = json.dumps(config.to_dict(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_board(token: str) -> BoardConfig:
    """
    Decode a share token.
    Accepts standard or URL-safe base64, with or without padding, and tokens that
    were additionally percent-encoded for a query string.
    """
    if not isinstance(token, str) or not token.strip():
        raise InvalidFormat("No board data provided")
    text = unquote(token.strip()).replace("+", "-").replace("/", "_")
    text += "=" * (-len(text) % 4)
    try:
        raw = base64.urlsafe_b64decode(text.encode("ascii"))
        draft = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        logger.info("Rejected share token: %s", e)
        raise InvalidFormat("Board link is corrupted or invalid") from e
    return normalize_board(draft)
