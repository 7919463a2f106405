"""
Action definitions for the game.
Actions are immutable, deterministic instructions; randomness (dice) is
decided by the caller and carried in the payload.
"""

from dataclasses import dataclass, field
from typing import Any

from boardwise.engine.state import BoardConfig, Tile


@dataclass(frozen=True)
class Action:
    """Base action class. All actions have a type and payload; player_id when a player acts."""
    type: str  # e.g. "roll_dice", "answer_quiz", "proceed_to_next_turn"
    payload: dict = field(default_factory=dict)
    player_id: str | None = None


START_LOADING = "start_loading"
SET_ERROR = "set_error"
SET_BOARD_CONFIG = "set_board_config"
UPDATE_BOARD_SETTINGS = "update_board_settings"
UPDATE_TILES = "update_tiles"
RANDOMIZE_TILE_VISUALS = "randomize_tile_visuals"
LOAD_BOARD = "load_board"
ROLL_DICE = "roll_dice"
ANIMATION_TICK = "animation_tick"
ANSWER_QUIZ = "answer_quiz"
ACKNOWLEDGE_INTERACTION = "acknowledge_interaction"
PROCEED_TO_NEXT_TURN = "proceed_to_next_turn"
RESET_GAME_FOR_PLAY = "reset_game_for_play"


def start_loading() -> Action:
    return Action(type=START_LOADING)


def set_error(message: str | None) -> Action:
    return Action(type=SET_ERROR, payload={"error": message})


def set_board_config(config: BoardConfig) -> Action:
    """Open a board in the designer (status goes to setup)."""
    return Action(type=SET_BOARD_CONFIG, payload={"board": config})


def update_board_settings(changes: dict[str, Any]) -> Action:
    """
    Patch board settings (camelCase keys as in the board document).
    Example: update_board_settings({"numberOfPlayers": 4, "diceSides": 8})
    """
    return Action(type=UPDATE_BOARD_SETTINGS, payload={"changes": dict(changes)})


def update_tiles(tiles: list[Tile]) -> Action:
    return Action(type=UPDATE_TILES, payload={"tiles": tiles})


def randomize_tile_visuals() -> Action:
    """One-shot visual re-randomize; does not persist the randomizeTiles flag."""
    return Action(type=RANDOMIZE_TILE_VISUALS)


def load_board(config: BoardConfig, persisted: dict[str, Any] | None = None) -> Action:
    """
    Load a decoded board for play.
    persisted is the saved play state for this board id (or None for a new game).
    """
    return Action(type=LOAD_BOARD, payload={"board": config, "persisted": persisted})


def roll_dice(player_id: str, value: int | None = None) -> Action:
    """
    Roll for the active player. value must be in [1, diceSides]; when omitted the
    reducer rolls with its random source.
    """
    return Action(type=ROLL_DICE, player_id=player_id, payload={"value": value})


def animation_tick() -> Action:
    """Advance the in-flight pawn animation by one step."""
    return Action(type=ANIMATION_TICK)


def answer_quiz(option_id: str) -> Action:
    return Action(type=ANSWER_QUIZ, payload={"option_id": option_id})


def acknowledge_interaction() -> Action:
    return Action(type=ACKNOWLEDGE_INTERACTION)


def proceed_to_next_turn() -> Action:
    return Action(type=PROCEED_TO_NEXT_TURN)


def reset_game_for_play() -> Action:
    return Action(type=RESET_GAME_FOR_PLAY)
