"""
Shared board builders for the engine and session tests.
Boards are built directly (not decoded) so they can be smaller than the
minimum a share link accepts.
"""

import random

import pytest

from boardwise.engine.codec import resize_tiles
from boardwise.engine.definitions import STATUS_ANIMATING_PAWN
from boardwise.engine.actions import animation_tick
from boardwise.engine.reducer import apply_action
from boardwise.engine.state import (
    BoardConfig,
    BoardSettings,
    QuizConfig,
    QuizOption,
    RewardConfig,
    Tile,
)


def quiz_tile(position: int, difficulty: int = 1, points: int = 5, tile_id: str | None = None) -> Tile:
    return Tile(
        id=tile_id or f"quiz-{position}",
        type="quiz",
        position=position,
        config=QuizConfig(
            question="What is 2 + 2?",
            options=[
                QuizOption(id="a", text="4", is_correct=True),
                QuizOption(id="b", text="5"),
                QuizOption(id="c", text="22"),
            ],
            difficulty=difficulty,
            points=points,
        ),
    )


def reward_tile(position: int, points: int = 10) -> Tile:
    return Tile(
        id=f"reward-{position}",
        type="reward",
        position=position,
        config=RewardConfig(message="Found a shortcut", points=points),
    )


def make_board(number_of_tiles: int = 10, special_tiles: list[Tile] | None = None, **settings) -> BoardConfig:
    """Board with start/finish and empty tiles, plus any special tiles at their positions."""
    board_settings = BoardSettings(number_of_tiles=number_of_tiles, **settings)
    tiles = resize_tiles(list(special_tiles or []), number_of_tiles)
    return BoardConfig(id="board-1", settings=board_settings, tiles=tiles)


def run_animation(state, rng=None):
    """Apply animation ticks until the pawn lands. Returns (state, all effects)."""
    effects = []
    while state.game_status == STATUS_ANIMATING_PAWN:
        state, step_effects = apply_action(state, animation_tick(), rng=rng)
        effects.extend(step_effects)
    return state, effects


@pytest.fixture
def rng():
    return random.Random(1234)
