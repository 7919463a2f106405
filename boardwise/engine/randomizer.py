"""
Board randomization.
Derives a playable board instance from a configuration: random visuals for
tiles still at the default look, and quiz answer shuffling.
"""

import random
from copy import deepcopy

from boardwise.engine.definitions import (
    DEFAULT_TILE_COLOR,
    RANDOM_COLORS,
    RANDOM_EMOJIS,
    TILE_EMPTY,
    TILE_QUIZ,
    TILE_TYPE_EMOJIS,
)
from boardwise.engine.state import BoardConfig, QuizConfig, Tile, TileUI, is_start_or_finish


def has_default_visual(tile: Tile) -> bool:
    return tile.ui.color is None or tile.ui.color.upper() == DEFAULT_TILE_COLOR


def has_random_visual(tile: Tile) -> bool:
    return tile.ui.color is not None and tile.ui.color.upper() in RANDOM_COLORS


def randomize_tile_visual(tile: Tile, rng: random.Random) -> Tile:
    """Random colour from the pool; random icon for non-empty tiles."""
    icon = TILE_TYPE_EMOJIS[TILE_EMPTY] if tile.type == TILE_EMPTY else rng.choice(RANDOM_EMOJIS)
    tile.ui = TileUI(color=rng.choice(RANDOM_COLORS), icon=icon)
    return tile


def shuffle_quiz_options(tile: Tile, rng: random.Random | None = None) -> Tile:
    """Copy of a quiz tile with a fresh option order. Non-quiz tiles are returned as copies."""
    rng = rng or random
    shuffled = deepcopy(tile)
    if shuffled.type == TILE_QUIZ and isinstance(shuffled.config, QuizConfig):
        rng.shuffle(shuffled.config.options)
    return shuffled


def _restore_option_order(tile: Tile, previous: Tile) -> None:
    """Reorder tile's options to match previous (unknown ids keep their relative order at the end)."""
    order = {opt.id: i for i, opt in enumerate(previous.config.options)}
    tile.config.options.sort(key=lambda o: order.get(o.id, len(order)))


def apply_randomization(
    config: BoardConfig,
    previous_active_tile: Tile | None = None,
    *,
    initial: bool = False,
    force_visuals: bool = False,
    rng: random.Random | None = None,
) -> BoardConfig:
    """
    Return a new playable board derived from config.

    Visuals: when randomizeTiles (or force_visuals) is set, every non-start/finish
    tile still at the default look gets a random colour (and icon unless empty).
    force_visuals also re-rolls tiles that already carry a pool colour, so repeated
    re-randomizing keeps changing the board. Customised tiles are left untouched.

    Quiz ordering: a quiz that was the active interaction before a reload gets its
    previously shown option order back. Otherwise, on initial creation with
    randomizeTiles on, every quiz is pre-shuffled. In all other cases the stored
    order is kept; landing on a quiz shuffles lazily.
    """
    rng = rng or random
    board = deepcopy(config)
    randomize_visuals = board.settings.randomize_tiles or force_visuals

    restore_from = None
    if (
        previous_active_tile is not None
        and previous_active_tile.type == TILE_QUIZ
        and isinstance(previous_active_tile.config, QuizConfig)
    ):
        restore_from = previous_active_tile

    for tile in board.tiles:
        if randomize_visuals and not is_start_or_finish(tile) and (
            has_default_visual(tile) or (force_visuals and has_random_visual(tile))
        ):
            randomize_tile_visual(tile, rng)
        if tile.type != TILE_QUIZ:
            continue
        if restore_from is not None and restore_from.id == tile.id:
            _restore_option_order(tile, restore_from)
        elif initial and board.settings.randomize_tiles:
            rng.shuffle(tile.config.options)
    return board


def randomize_visuals(config: BoardConfig, rng: random.Random | None = None) -> BoardConfig:
    """One-shot re-randomize of tile visuals; the stored randomizeTiles flag is not changed."""
    return apply_randomization(config, force_visuals=True, rng=rng)
