"""
Main game reducer.
Applies actions to state, enforcing the game-status transition table, and
returns (new_state, effects) where effects are side effects to perform
(sounds, animation timers, storage).
"""

import random
from copy import deepcopy
from typing import Any

from boardwise.config import ANIMATION_STEP_MS
from boardwise.engine import actions as act
from boardwise.engine.actions import Action
from boardwise.engine.codec import resize_tiles
from boardwise.engine.definitions import (
    PUNISHMENT_MOVE_BACK_FIXED,
    PUNISHMENT_MOVE_BACK_LEVEL_BASED,
    PUNISHMENT_REVERT_MOVE,
    SOUND_CORRECT_ANSWER,
    SOUND_DICE_ROLL,
    SOUND_FINISH,
    SOUND_PAWN_MOVE,
    SOUND_PUNISHMENT,
    SOUND_REWARD,
    SOUND_WRONG_ANSWER,
    STATUS_ANIMATING_PAWN,
    STATUS_FINISHED,
    STATUS_INTERACTION_PENDING,
    STATUS_PLAYING,
    STATUS_SETUP,
    TILE_FINISH,
    TILE_QUIZ,
    TILE_REWARD,
    WIN_COMBINED_ORDER_SCORE,
    WIN_FIRST_TO_FINISH,
    WIN_HIGHEST_SCORE,
)
from boardwise.engine.errors import IllegalAction
from boardwise.engine.events import (
    Effect,
    LOG_GAME_EVENT,
    LOG_INFO,
    LOG_MOVE,
    LOG_PUNISHMENT,
    LOG_QUIZ_CORRECT,
    LOG_QUIZ_INCORRECT,
    LOG_REWARD,
    LOG_ROLL,
    LOG_STREAK,
    LOG_WINNER,
    MSG_DICE_ROLLED,
    MSG_GAME_RESET,
    MSG_GAME_STARTED,
    MSG_INFO,
    MSG_LANDED_ON,
    MSG_MOVE_BLOCKED,
    MSG_NEXT_TURN,
    MSG_PLAYER_FINISHED,
    MSG_PUNISHMENT,
    MSG_QUIZ_CORRECT,
    MSG_QUIZ_INCORRECT,
    MSG_REWARD,
    MSG_STREAK,
    MSG_STREAK_LOST,
    MSG_WINNER_COMBINED,
    MSG_WINNER_FIRST,
    MSG_WINNER_SCORE,
    append_log,
    cancel_timer,
    clear_persisted,
    play_sound,
    schedule_tick,
)
from boardwise.engine.persistence import restore_state
from boardwise.engine.randomizer import apply_randomization, randomize_visuals, shuffle_quiz_options
from boardwise.engine.roster import generate_players, next_unfinished_index
from boardwise.engine.state import (
    BoardSettings,
    GameState,
    PawnAnimation,
    Player,
    QuizConfig,
    Tile,
    normalize_quiz_options,
)
from boardwise.engine.victory import evaluate_winner

# Streak length from which streak log entries are written
STREAK_LOG_THRESHOLD = 2

WINNER_MESSAGES = {
    WIN_FIRST_TO_FINISH: MSG_WINNER_FIRST,
    WIN_HIGHEST_SCORE: MSG_WINNER_SCORE,
    WIN_COMBINED_ORDER_SCORE: MSG_WINNER_COMBINED,
}

_ANY_STATUS = [act.START_LOADING, act.SET_ERROR, act.SET_BOARD_CONFIG, act.LOAD_BOARD]

# Status rules: which action types are allowed in which game status
STATUS_ALLOWED_ACTIONS = {
    STATUS_SETUP: _ANY_STATUS + [
        act.UPDATE_BOARD_SETTINGS,
        act.UPDATE_TILES,
        act.RANDOMIZE_TILE_VISUALS,
        act.RESET_GAME_FOR_PLAY,
    ],
    STATUS_PLAYING: _ANY_STATUS + [
        act.ROLL_DICE,
        act.RANDOMIZE_TILE_VISUALS,
        act.RESET_GAME_FOR_PLAY,
    ],
    STATUS_ANIMATING_PAWN: _ANY_STATUS + [
        act.ANIMATION_TICK,
        act.RESET_GAME_FOR_PLAY,
    ],
    STATUS_INTERACTION_PENDING: _ANY_STATUS + [
        act.ANSWER_QUIZ,
        act.ACKNOWLEDGE_INTERACTION,
        act.PROCEED_TO_NEXT_TURN,
        act.RESET_GAME_FOR_PLAY,
    ],
    STATUS_FINISHED: _ANY_STATUS + [
        act.RESET_GAME_FOR_PLAY,
    ],
}

# Actions accepted but without effect in a status (state returned unchanged)
STATUS_IGNORED_ACTIONS = {
    STATUS_PLAYING: [act.PROCEED_TO_NEXT_TURN],
    STATUS_ANIMATING_PAWN: [act.PROCEED_TO_NEXT_TURN],
    STATUS_FINISHED: [act.PROCEED_TO_NEXT_TURN],
}


def _is_ignored(action: Action, state: GameState) -> bool:
    return action.type in STATUS_IGNORED_ACTIONS.get(state.game_status, [])


def _validate_action_for_status(action: Action, state: GameState) -> None:
    """Reject any action the transition table does not allow in the current status."""
    allowed = STATUS_ALLOWED_ACTIONS.get(state.game_status, [])
    if action.type not in allowed:
        raise IllegalAction(
            f"Action '{action.type}' is not allowed in status '{state.game_status}'. "
            f"Allowed actions: {', '.join(allowed)}"
        )
    needs_board = action.type not in (act.START_LOADING, act.SET_ERROR, act.SET_BOARD_CONFIG, act.LOAD_BOARD)
    if needs_board and state.board_config is None:
        raise IllegalAction(f"Action '{action.type}' requires a loaded board")


def apply_action(
    state: GameState,
    action: Action,
    rng: random.Random | None = None,
) -> tuple[GameState, list[Effect]]:
    """
    Apply a single action to the current state, returning new state and effects.

    The input state is never modified; a rejected action raises IllegalAction
    (or another ValueError) and leaves nothing half-applied.

    Args:
        state: Current game state
        action: Action to apply
        rng: Random source for shuffles, visuals and unrolled dice

    Returns:
        Tuple of (new_state, effects)
    """
    rng = rng or random
    if _is_ignored(action, state):
        return state, []
    _validate_action_for_status(action, state)

    handler = _HANDLERS.get(action.type)
    if handler is None:
        raise IllegalAction(f"Unknown action type: {action.type}")
    return handler(state.copy(), action, rng)


# ===== Helpers =====

def _cancel_animation(state: GameState) -> list[Effect]:
    """Drop any in-flight animation and request its timer be cancelled."""
    effects = []
    if state.pawn_animation is not None:
        if state.pawn_animation.timer_handle is not None:
            effects.append(cancel_timer(state.pawn_animation.timer_handle))
        state.pawn_animation = None
    return effects


def step_delay_ms(settings: BoardSettings) -> int:
    return ANIMATION_STEP_MS * (2 if settings.epilepsy_safe_mode else 1)


def compute_punishment(
    position: int,
    settings: BoardSettings,
    last_roll: int | None,
    difficulty: int,
) -> int:
    """New position after an incorrect answer (never below 0)."""
    if settings.punishment_type == PUNISHMENT_REVERT_MOVE:
        return max(0, position - (last_roll or 0))
    if settings.punishment_type == PUNISHMENT_MOVE_BACK_FIXED:
        return max(0, position - settings.punishment_value)
    if settings.punishment_type == PUNISHMENT_MOVE_BACK_LEVEL_BASED:
        return max(0, position - difficulty)
    return position


def _require_active_player(state: GameState) -> Player:
    player = state.current_player
    if player is None:
        raise IllegalAction("No active player")
    return player


# ===== Designer (setup) =====

def _handle_start_loading(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    state.is_loading = True
    state.error = None
    return state, []


def _handle_set_error(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    state.is_loading = False
    state.error = action.payload.get("error")
    return state, []


def _handle_set_board_config(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    board = deepcopy(action.payload["board"])
    effects = _cancel_animation(state)
    new_state = GameState(
        board_config=board,
        base_board_config=deepcopy(board),
        players=generate_players(board.settings.number_of_players),
        game_status=STATUS_SETUP,
        is_loading=False,
    )
    return new_state, effects


def _handle_update_board_settings(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    """
    Patch settings with the same defaults/clamps as decoding.
    A numberOfPlayers change regenerates the roster; a numberOfTiles change resizes the board.
    """
    changes = action.payload.get("changes") or {}
    board = state.board_config
    old = board.settings
    merged = {**old.to_dict(), **changes}
    if "punishmentMode" in changes and "punishmentType" not in changes:
        merged.pop("punishmentType", None)
    settings = BoardSettings.from_dict(merged)

    board.settings = settings
    if settings.number_of_tiles != old.number_of_tiles:
        board.tiles = resize_tiles(board.tiles, settings.number_of_tiles)
    if settings.number_of_players != old.number_of_players:
        state.players = generate_players(settings.number_of_players)
        state.current_player_index = 0
    state.base_board_config = deepcopy(board)
    return state, []


def _handle_update_tiles(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    tiles = []
    for raw in action.payload.get("tiles") or []:
        tile = deepcopy(raw) if isinstance(raw, Tile) else Tile.from_dict(raw)
        if isinstance(tile.config, QuizConfig):
            tile.config.options = normalize_quiz_options(tile.config.options)
        tiles.append(tile)
    tiles.sort(key=lambda t: t.position)
    board = state.board_config
    board.tiles = resize_tiles(tiles, board.settings.number_of_tiles)
    state.base_board_config = deepcopy(board)
    return state, []


def _handle_randomize_tile_visuals(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    state.board_config = randomize_visuals(state.board_config, rng=rng)
    if state.game_status == STATUS_SETUP:
        state.base_board_config = deepcopy(state.board_config)
    return state, []


# ===== Play =====

def _handle_load_board(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    effects = _cancel_animation(state)
    new_state = restore_state(action.payload["board"], action.payload.get("persisted"), rng=rng)
    return new_state, effects


def _handle_roll_dice(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    """
    Roll for the active player and start the pawn animation.
    A roll that cannot move the pawn (already at the last tile) passes the turn.
    """
    player = _require_active_player(state)
    if action.player_id is not None and action.player_id != player.id:
        raise IllegalAction(f"It is not {action.player_id}'s turn (current: {player.id})")
    if state.winner is not None:
        raise IllegalAction(f"Game is over. {state.winner.name} has won.")
    if player.has_finished:
        raise IllegalAction(f"{player.name} has already finished")

    settings = state.board_config.settings
    value = action.payload.get("value")
    if value is None:
        value = rng.randint(1, settings.dice_sides)
    if not isinstance(value, int) or not 1 <= value <= settings.dice_sides:
        raise IllegalAction(f"Dice value {value!r} outside [1, {settings.dice_sides}]")

    effects = _cancel_animation(state)
    effects.append(play_sound(SOUND_DICE_ROLL))
    state.dice_roll = value
    state.logs = append_log(state.logs, MSG_DICE_ROLLED, LOG_ROLL, {"name": player.name, "roll": value})

    target = min(player.position + value, state.board_config.last_index)
    if target == player.position:
        state.logs = append_log(state.logs, MSG_MOVE_BLOCKED, LOG_MOVE, {
            "name": player.name,
            "position": player.position + 1,
        })
        state.current_player_index = next_unfinished_index(state.players, state.current_player_index)
        state.game_status = STATUS_PLAYING
        return state, effects

    state.pawn_animation = PawnAnimation(
        player_id=player.id,
        path=list(range(player.position + 1, target + 1)),
    )
    state.game_status = STATUS_ANIMATING_PAWN
    effects.append(schedule_tick(step_delay_ms(settings)))
    return state, effects


def _handle_animation_tick(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    animation = state.pawn_animation
    if animation is None or not animation.path:
        raise IllegalAction("No pawn animation in progress")
    player = state.player_by_id(animation.player_id)
    if player is None:
        raise IllegalAction(f"Unknown player in animation: {animation.player_id}")

    player.visual_position = animation.path[animation.current_step_index]
    effects = [play_sound(SOUND_PAWN_MOVE)]
    if not animation.is_last_step:
        animation.current_step_index += 1
        animation.timer_handle = None
        effects.append(schedule_tick(step_delay_ms(state.board_config.settings)))
        return state, effects

    effects.extend(_land_pawn(state, player, rng))
    return state, effects


def _land_pawn(state: GameState, player: Player, rng) -> list[Effect]:
    """Commit the final step: finish handling, quiz reshuffle, landing log."""
    effects: list[Effect] = []
    state.pawn_animation = None
    player.position = player.visual_position
    board = state.board_config
    tile = board.tile_at(player.position)

    state.logs = append_log(state.logs, MSG_LANDED_ON, LOG_MOVE, {
        "name": player.name,
        "position": player.position + 1,
        "tileType": tile.type if tile else None,
    })

    if tile is not None and tile.type == TILE_FINISH and not player.has_finished:
        state.players_finished_count += 1
        player.has_finished = True
        player.finish_order = state.players_finished_count
        effects.append(play_sound(SOUND_FINISH))
        state.logs = append_log(state.logs, MSG_PLAYER_FINISHED, LOG_GAME_EVENT, {
            "name": player.name,
            "finishOrder": player.finish_order,
        })
        if board.settings.winning_condition == WIN_FIRST_TO_FINISH and state.winner is None:
            state.winner = deepcopy(player)
            state.logs = append_log(state.logs, MSG_WINNER_FIRST, LOG_WINNER, {
                "name": player.name,
                "score": player.score,
                "finishOrder": player.finish_order,
            })

    if tile is None:
        state.active_tile_for_interaction = None
    elif tile.type == TILE_QUIZ:
        state.active_tile_for_interaction = shuffle_quiz_options(tile, rng)
    else:
        state.active_tile_for_interaction = deepcopy(tile)
    state.interaction_resolved = False
    state.game_status = STATUS_INTERACTION_PENDING
    return effects


def _require_open_interaction(state: GameState) -> Tile:
    tile = state.active_tile_for_interaction
    if tile is None:
        raise IllegalAction("No tile interaction pending")
    if state.interaction_resolved:
        raise IllegalAction("Tile interaction already resolved")
    return tile


def _handle_answer_quiz(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    tile = _require_open_interaction(state)
    if tile.type != TILE_QUIZ or not isinstance(tile.config, QuizConfig):
        raise IllegalAction(f"Active tile is {tile.type}, not a quiz")
    option_id = action.payload.get("option_id")
    option = next((o for o in tile.config.options if o.id == option_id), None)
    if option is None:
        raise IllegalAction(f"Unknown quiz option: {option_id}")

    player = _require_active_player(state)
    quiz = tile.config
    effects: list[Effect] = []

    if option.is_correct:
        player.score += quiz.points
        player.current_streak += 1
        effects.append(play_sound(SOUND_CORRECT_ANSWER))
        state.logs = append_log(state.logs, MSG_QUIZ_CORRECT, LOG_QUIZ_CORRECT, {
            "name": player.name,
            "points": quiz.points,
            "score": player.score,
        })
        if player.current_streak >= STREAK_LOG_THRESHOLD:
            state.logs = append_log(state.logs, MSG_STREAK, LOG_STREAK, {
                "name": player.name,
                "streak": player.current_streak,
            })
    else:
        lost_streak = player.current_streak
        player.current_streak = 0
        effects.append(play_sound(SOUND_WRONG_ANSWER))
        state.logs = append_log(state.logs, MSG_QUIZ_INCORRECT, LOG_QUIZ_INCORRECT, {
            "name": player.name,
            "correctAnswer": quiz.correct_option.text,
        })
        if lost_streak >= STREAK_LOG_THRESHOLD:
            state.logs = append_log(state.logs, MSG_STREAK_LOST, LOG_STREAK, {
                "name": player.name,
                "streak": lost_streak,
            })
        settings = state.board_config.settings
        new_position = compute_punishment(player.position, settings, state.dice_roll, quiz.difficulty)
        if new_position != player.position:
            old_position = player.position
            player.position = new_position
            player.visual_position = new_position
            effects.append(play_sound(SOUND_PUNISHMENT))
            state.logs = append_log(state.logs, MSG_PUNISHMENT, LOG_PUNISHMENT, {
                "name": player.name,
                "punishmentType": settings.punishment_type,
                "from": old_position + 1,
                "to": new_position + 1,
                "spaces": old_position - new_position,
            })

    state.interaction_resolved = True
    return state, effects


def _handle_acknowledge_interaction(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    """Reward tiles pay out their points; every other non-quiz tile is only logged."""
    tile = _require_open_interaction(state)
    if tile.type == TILE_QUIZ:
        raise IllegalAction("Quiz tiles are resolved by answering")
    player = _require_active_player(state)
    effects: list[Effect] = []

    if tile.type == TILE_REWARD:
        points = tile.config.points or 0
        player.score += points
        effects.append(play_sound(SOUND_REWARD))
        state.logs = append_log(state.logs, MSG_REWARD, LOG_REWARD, {
            "name": player.name,
            "points": points,
            "message": tile.config.message,
        })
    else:
        params: dict[str, Any] = {"name": player.name, "tileType": tile.type}
        message = getattr(tile.config, "message", None)
        if message:
            params["message"] = message
        state.logs = append_log(state.logs, MSG_INFO, LOG_INFO, params)

    state.interaction_resolved = True
    return state, effects


def _handle_proceed_to_next_turn(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    """
    Close the interaction and pass the turn.
    When everyone has finished and nobody has won yet the winner is evaluated;
    any winner (including an eager firstToFinish winner) ends the game.
    """
    effects: list[Effect] = []
    settings = state.board_config.settings

    all_finished = bool(state.players) and all(p.has_finished for p in state.players)
    if state.winner is None and all_finished:
        winner, breakdown = evaluate_winner(state.players, settings.winning_condition)
        if winner is not None:
            state.winner = deepcopy(winner)
            effects.append(play_sound(SOUND_FINISH))
            state.logs = append_log(
                state.logs,
                WINNER_MESSAGES[settings.winning_condition],
                LOG_WINNER,
                breakdown,
            )

    if state.winner is not None:
        state.game_status = STATUS_FINISHED
    else:
        state.current_player_index = next_unfinished_index(state.players, state.current_player_index)
        state.game_status = STATUS_PLAYING
        next_player = state.current_player
        if next_player is not None:
            state.logs = append_log(state.logs, MSG_NEXT_TURN, LOG_GAME_EVENT, {"name": next_player.name})

    state.active_tile_for_interaction = None
    state.interaction_resolved = False
    state.dice_roll = None
    return state, effects


def _handle_reset_game_for_play(state: GameState, action: Action, rng) -> tuple[GameState, list[Effect]]:
    """Fresh game on the same board: saved state cleared, new visuals/shuffles, new roster."""
    base = state.base_board_config or state.board_config
    effects = [clear_persisted(base.id)]
    effects.extend(_cancel_animation(state))

    new_state = GameState(
        board_config=apply_randomization(base, initial=True, rng=rng),
        base_board_config=deepcopy(base),
        players=generate_players(base.settings.number_of_players),
        game_status=STATUS_PLAYING,
        is_loading=False,
    )
    new_state.logs = append_log([], MSG_GAME_RESET, LOG_GAME_EVENT, {"boardName": base.settings.name})
    new_state.logs = append_log(new_state.logs, MSG_GAME_STARTED, LOG_GAME_EVENT, {
        "boardName": base.settings.name,
    })
    return new_state, effects


_HANDLERS = {
    act.START_LOADING: _handle_start_loading,
    act.SET_ERROR: _handle_set_error,
    act.SET_BOARD_CONFIG: _handle_set_board_config,
    act.UPDATE_BOARD_SETTINGS: _handle_update_board_settings,
    act.UPDATE_TILES: _handle_update_tiles,
    act.RANDOMIZE_TILE_VISUALS: _handle_randomize_tile_visuals,
    act.LOAD_BOARD: _handle_load_board,
    act.ROLL_DICE: _handle_roll_dice,
    act.ANIMATION_TICK: _handle_animation_tick,
    act.ANSWER_QUIZ: _handle_answer_quiz,
    act.ACKNOWLEDGE_INTERACTION: _handle_acknowledge_interaction,
    act.PROCEED_TO_NEXT_TURN: _handle_proceed_to_next_turn,
    act.RESET_GAME_FOR_PLAY: _handle_reset_game_for_play,
}


def replay_from_actions(
    initial_state: GameState,
    actions: list[Action],
    rng: random.Random | None = None,
) -> GameState:
    """Replay a sequence of actions from an initial state (effects are discarded)."""
    state = initial_state
    for action in actions:
        state, _ = apply_action(state, action, rng=rng)
    return state
