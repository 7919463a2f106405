"""
Persisted play state.

Two projections of the same GameState: the saved subset (players without
visualPosition, no pawn animation) and the runtime state. restore_state is the
reconciliation between a freshly decoded board and a previously saved subset.
"""

import random
from copy import deepcopy
from typing import Any

from boardwise.config import STORAGE_PREFIX
from boardwise.engine import MAX_LOG_ENTRIES
from boardwise.engine.definitions import (
    GAME_STATUSES,
    STATUS_ANIMATING_PAWN,
    STATUS_FINISHED,
    STATUS_INTERACTION_PENDING,
    STATUS_PLAYING,
    STATUS_SETUP,
)
from boardwise.engine.events import (
    LOG_GAME_EVENT,
    MSG_GAME_RESUMED,
    MSG_GAME_STARTED,
    MSG_PLAYER_COUNT_MISMATCH,
    append_log,
)
from boardwise.engine.randomizer import apply_randomization
from boardwise.engine.roster import generate_players
from boardwise.engine.state import BoardConfig, GameState, LogEntry, Player, Tile
from boardwise.engine.utils import clamp_position


def storage_key(board_id: str) -> str:
    return f"{STORAGE_PREFIX}-play-state-{board_id}"


def should_persist(state: GameState) -> bool:
    """Never save while loading, designing, or mid pawn hop."""
    if state.is_loading or state.board_config is None:
        return False
    return state.game_status not in (STATUS_SETUP, STATUS_ANIMATING_PAWN)


def to_persisted(state: GameState) -> dict[str, Any]:
    """Saved projection of a settled game state."""
    return {
        "players": [p.to_dict(include_visual=False) for p in state.players],
        "currentPlayerIndex": state.current_player_index,
        "diceRoll": state.dice_roll,
        "gameStatus": state.game_status,
        "activeTileForInteraction": (
            state.active_tile_for_interaction.to_dict() if state.active_tile_for_interaction else None
        ),
        "winner": state.winner.to_dict(include_visual=False) if state.winner else None,
        "logs": [e.to_dict() for e in state.logs],
        "playersFinishedCount": state.players_finished_count,
        "interactionResolved": state.interaction_resolved,
    }


def _restored_status(value: Any) -> str:
    # An animation can never be resumed: its timer died with the previous process
    if value not in GAME_STATUSES or value in (STATUS_SETUP, STATUS_ANIMATING_PAWN):
        return STATUS_PLAYING
    return value


def _restored_players(raw_players: list[dict[str, Any]], last_index: int) -> list[Player]:
    players = []
    for raw in raw_players:
        player = Player.from_dict(raw)
        player.position = clamp_position(player.position, last_index)
        player.visual_position = player.position
        players.append(player)
    return players


def restore_state(
    config: BoardConfig,
    persisted: dict[str, Any] | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """
    Build a playing GameState for config, resuming from persisted when given.

    Players are adopted only when the saved roster size matches the board's
    numberOfPlayers; otherwise a fresh roster is used and the mismatch is logged.
    A saved animating status comes back as playing, and a quiz that was on screen
    keeps its previously shown option order.
    """
    if not isinstance(persisted, dict):
        persisted = None

    previous_active = None
    if persisted and isinstance(persisted.get("activeTileForInteraction"), dict):
        previous_active = Tile.from_dict(persisted["activeTileForInteraction"])

    board = apply_randomization(config, previous_active, initial=persisted is None, rng=rng)
    state = GameState(
        board_config=board,
        base_board_config=deepcopy(config),
        game_status=STATUS_PLAYING,
        is_loading=False,
        error=None,
    )
    expected_players = config.settings.number_of_players

    if persisted is None:
        state.players = generate_players(expected_players)
        state.logs = append_log([], MSG_GAME_STARTED, LOG_GAME_EVENT, {"boardName": config.settings.name})
        return state

    raw_logs = persisted.get("logs") if isinstance(persisted.get("logs"), list) else []
    logs = [LogEntry.from_dict(e) for e in raw_logs if isinstance(e, dict)][:MAX_LOG_ENTRIES]

    raw_players = persisted.get("players") if isinstance(persisted.get("players"), list) else []
    raw_players = [p for p in raw_players if isinstance(p, dict)]
    if len(raw_players) != expected_players:
        state.players = generate_players(expected_players)
        logs = append_log(logs, MSG_PLAYER_COUNT_MISMATCH, LOG_GAME_EVENT, {
            "savedCount": len(raw_players),
            "expectedCount": expected_players,
        })
        state.logs = append_log(logs, MSG_GAME_STARTED, LOG_GAME_EVENT, {"boardName": config.settings.name})
        return state

    state.players = _restored_players(raw_players, board.last_index)
    state.players_finished_count = sum(1 for p in state.players if p.has_finished)
    try:
        index = int(persisted.get("currentPlayerIndex") or 0)
    except (TypeError, ValueError):
        index = 0
    state.current_player_index = index if 0 <= index < len(state.players) else 0
    dice = persisted.get("diceRoll")
    state.dice_roll = dice if isinstance(dice, int) and dice > 0 else None
    state.game_status = _restored_status(persisted.get("gameStatus"))
    state.interaction_resolved = bool(persisted.get("interactionResolved", False))

    if state.game_status == STATUS_INTERACTION_PENDING:
        if previous_active is None:
            state.game_status = STATUS_PLAYING
        else:
            # Prefer the board's tile (already carrying the restored option order)
            board_tile = next((t for t in board.tiles if t.id == previous_active.id), None)
            state.active_tile_for_interaction = deepcopy(board_tile) if board_tile else previous_active

    winner_raw = persisted.get("winner")
    if isinstance(winner_raw, dict):
        winner_id = winner_raw.get("id")
        match = state.player_by_id(winner_id) if winner_id else None
        state.winner = deepcopy(match) if match else Player.from_dict(winner_raw)
    if state.game_status == STATUS_FINISHED and state.winner is None:
        state.game_status = STATUS_PLAYING

    state.logs = append_log(logs, MSG_GAME_RESUMED, LOG_GAME_EVENT, {"boardName": config.settings.name})
    return state


class MemoryPlayStateStore:
    """Dict-backed play-state store (CLI and tests); same interface as the SQL store."""

    def __init__(self):
        self._data: dict[str, dict[str, Any]] = {}

    def load(self, board_id: str) -> dict[str, Any] | None:
        saved = self._data.get(storage_key(board_id))
        return deepcopy(saved) if saved is not None else None

    def save(self, board_id: str, payload: dict[str, Any]) -> None:
        self._data[storage_key(board_id)] = deepcopy(payload)

    def clear(self, board_id: str) -> None:
        self._data.pop(storage_key(board_id), None)
