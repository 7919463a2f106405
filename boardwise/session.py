"""
Game session: the single actor that owns one GameState.

Every change goes through dispatch(), which applies the reducer, performs the
returned effects (sounds, animation timers, storage) and saves settled state.
One action fully resolves before the next is accepted.
"""

import logging
import random
from typing import Any

from boardwise.engine import actions
from boardwise.engine.actions import Action
from boardwise.engine.codec import decode_board, decode_board_file, encode_board, encode_board_file, new_board
from boardwise.engine.definitions import TILE_QUIZ
from boardwise.engine.errors import IllegalAction, InvalidFormat, PersistenceUnavailable
from boardwise.engine.events import CANCEL_TIMER, CLEAR_PERSISTED, PLAY_SOUND, SCHEDULE_TICK, Effect
from boardwise.engine.persistence import should_persist, to_persisted
from boardwise.engine.reducer import apply_action
from boardwise.engine.state import BoardConfig, GameState, QuizConfig, Tile, is_start_or_finish
from boardwise.engine.utils import roll_die
from boardwise.services.sound import SoundPlayer

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load board data. The link might be corrupted or invalid."


class GameSession:
    """
    Drives one game.

    Args:
        store: play-state store with load/save/clear keyed by board id (None disables saving)
        scheduler: animation scheduler with schedule(delay_ms, callback) -> handle
        sound: sound player
        rng: random source for dice, shuffles and visuals
    """

    def __init__(self, store=None, scheduler=None, sound: SoundPlayer | None = None,
                 rng: random.Random | None = None):
        self.state = GameState()
        self.store = store
        self.scheduler = scheduler
        self.sound = sound or SoundPlayer()
        self.rng = rng or random.Random()

    # ===== Core =====

    def dispatch(self, action: Action) -> GameState:
        """Apply an action, run its effects, then save the state if it is settled."""
        new_state, effects = apply_action(self.state, action, rng=self.rng)
        if self.scheduler is None and any(e.type == SCHEDULE_TICK for e in effects):
            raise RuntimeError("Pawn animation requires a scheduler")
        self.state = new_state
        for effect in effects:
            self._run_effect(effect)
        self._persist()
        return self.state

    def _run_effect(self, effect: Effect) -> None:
        if effect.type == PLAY_SOUND:
            self.sound.play(effect.payload["sound"])
        elif effect.type == CANCEL_TIMER:
            handle = effect.payload.get("handle")
            if handle is not None:
                handle.cancel()
        elif effect.type == CLEAR_PERSISTED:
            self._clear_persisted(effect.payload["board_id"])
        elif effect.type == SCHEDULE_TICK:
            self._schedule_tick(effect.payload["delay_ms"])
        else:
            raise ValueError(f"Unknown effect type: {effect.type}")

    def _schedule_tick(self, delay_ms: int) -> None:
        animation = self.state.pawn_animation
        if animation is None:
            return
        handle_ref: list[Any] = [None]

        def fire() -> None:
            current = self.state.pawn_animation
            # Superseded or cancelled animations never advance
            if current is None or current.timer_handle is not handle_ref[0]:
                return
            self.dispatch(actions.animation_tick())

        handle_ref[0] = self.scheduler.schedule(delay_ms, fire)
        animation.timer_handle = handle_ref[0]

    def close(self) -> None:
        """Cancel the pending animation timer, if any (unmount/navigation away)."""
        animation = self.state.pawn_animation
        if animation is not None and animation.timer_handle is not None:
            animation.timer_handle.cancel()
            animation.timer_handle = None

    # ===== Persistence =====

    def _persist(self) -> None:
        if self.store is None or not should_persist(self.state):
            return
        try:
            self.store.save(self.state.board_config.id, to_persisted(self.state))
        except PersistenceUnavailable as e:
            logger.warning("Could not save play state for %s: %s", self.state.board_config.id, e)

    def _load_persisted(self, board_id: str) -> dict[str, Any] | None:
        if self.store is None:
            return None
        try:
            return self.store.load(board_id)
        except PersistenceUnavailable as e:
            logger.warning("Could not read play state for %s: %s", board_id, e)
            return None

    def _clear_persisted(self, board_id: str) -> None:
        if self.store is None:
            return
        try:
            self.store.clear(board_id)
        except PersistenceUnavailable as e:
            logger.warning("Could not clear play state for %s: %s", board_id, e)

    # ===== Board loading =====

    def initialize_new_board(self) -> GameState:
        return self.dispatch(actions.set_board_config(new_board()))

    def open_board(self, config: BoardConfig) -> GameState:
        """Open an existing board in the designer."""
        return self.dispatch(actions.set_board_config(config))

    def load_board(self, config: BoardConfig) -> GameState:
        """Start (or resume) play on an already decoded board."""
        self.dispatch(actions.start_loading())
        return self.dispatch(actions.load_board(config, self._load_persisted(config.id)))

    def load_board_from_token(self, token: str) -> GameState:
        """Decode a share token and start play; a bad token leaves an error on the state."""
        self.dispatch(actions.start_loading())
        try:
            config = decode_board(token)
        except InvalidFormat as e:
            logger.warning("Failed to load board from share token: %s", e)
            return self.dispatch(actions.set_error(LOAD_ERROR_MESSAGE))
        return self.dispatch(actions.load_board(config, self._load_persisted(config.id)))

    def load_board_from_file(self, text: str) -> GameState:
        self.dispatch(actions.start_loading())
        try:
            config = decode_board_file(text)
        except InvalidFormat as e:
            logger.warning("Failed to load board file: %s", e)
            return self.dispatch(actions.set_error(f"Failed to load board file: {e}"))
        return self.dispatch(actions.load_board(config, self._load_persisted(config.id)))

    def share_token(self) -> str:
        board = self.state.base_board_config or self.state.board_config
        if board is None:
            raise InvalidFormat("No board loaded")
        return encode_board(board)

    def export_file(self) -> str:
        board = self.state.base_board_config or self.state.board_config
        if board is None:
            raise InvalidFormat("No board loaded")
        return encode_board_file(board)

    # ===== Designer =====

    def update_settings(self, changes: dict[str, Any]) -> GameState:
        return self.dispatch(actions.update_board_settings(changes))

    def update_tiles(self, tiles: list[Tile] | list[dict[str, Any]]) -> GameState:
        return self.dispatch(actions.update_tiles(tiles))

    def randomize_visuals(self) -> GameState:
        return self.dispatch(actions.randomize_tile_visuals())

    def set_tile_quiz(self, position: int, quiz: QuizConfig) -> GameState:
        """Turn the tile at position into a quiz tile, keeping its id and look."""
        board = self.state.board_config
        if board is None:
            raise IllegalAction("No board loaded")
        target = next((t for t in board.tiles if t.position == position), None)
        if target is None:
            raise IllegalAction(f"No tile at position {position}")
        if is_start_or_finish(target):
            raise IllegalAction("Start and finish tiles cannot hold a quiz")
        tiles = [
            Tile(id=t.id, type=TILE_QUIZ, position=t.position, config=quiz, ui=t.ui) if t is target else t
            for t in board.tiles
        ]
        return self.dispatch(actions.update_tiles(tiles))

    # ===== Play =====

    def roll_dice(self, player_id: str | None = None) -> GameState:
        """Roll for player_id (default: the active player) with this session's random source."""
        board = self.state.board_config
        current = self.state.current_player
        sides = board.settings.dice_sides if board else 1
        value = roll_die(sides, self.rng)
        return self.dispatch(actions.roll_dice(player_id or (current.id if current else ""), value))

    def answer_quiz(self, option_id: str) -> GameState:
        return self.dispatch(actions.answer_quiz(option_id))

    def acknowledge(self) -> GameState:
        return self.dispatch(actions.acknowledge_interaction())

    def proceed(self) -> GameState:
        return self.dispatch(actions.proceed_to_next_turn())

    def reset(self) -> GameState:
        return self.dispatch(actions.reset_game_for_play())
