"""
Game session: effects (sounds, animation timers, storage) around the reducer.
"""

import logging
import random

import pytest

from boardwise.engine import actions
from boardwise.engine.codec import decode_board, new_board
from boardwise.engine.definitions import (
    STATUS_ANIMATING_PAWN,
    STATUS_INTERACTION_PENDING,
    STATUS_PLAYING,
    STATUS_SETUP,
    TILE_QUIZ,
)
from boardwise.engine.errors import IllegalAction, PersistenceUnavailable
from boardwise.engine.events import MSG_GAME_RESUMED
from boardwise.engine.persistence import MemoryPlayStateStore
from boardwise.engine.state import QuizConfig, QuizOption
from boardwise.services.scheduler import ManualScheduler
from boardwise.services.sound import RecordingSoundPlayer
from boardwise.session import LOAD_ERROR_MESSAGE, GameSession
from conftest import make_board


class BrokenStore:
    def load(self, board_id):
        raise PersistenceUnavailable("disk full")

    def save(self, board_id, payload):
        raise PersistenceUnavailable("disk full")

    def clear(self, board_id):
        raise PersistenceUnavailable("disk full")


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store():
    return MemoryPlayStateStore()


@pytest.fixture
def session(store, scheduler):
    return GameSession(store=store, scheduler=scheduler, sound=RecordingSoundPlayer(), rng=random.Random(7))


def test_roll_animates_one_step_per_tick(session, scheduler, store):
    board = make_board(10)
    session.load_board(board)
    assert store.load(board.id)["gameStatus"] == STATUS_PLAYING

    session.dispatch(actions.roll_dice("player-1", 3))
    assert session.state.game_status == STATUS_ANIMATING_PAWN
    assert len(scheduler.pending) == 1
    # Nothing is saved mid-animation
    assert store.load(board.id)["gameStatus"] == STATUS_PLAYING

    scheduler.advance(300)
    assert session.state.players[0].visual_position == 1
    assert session.state.players[0].position == 0
    assert len(scheduler.pending) == 1

    scheduler.run_all()
    assert session.state.game_status == STATUS_INTERACTION_PENDING
    assert session.state.players[0].position == 3
    assert scheduler.pending == []
    assert store.load(board.id)["gameStatus"] == STATUS_INTERACTION_PENDING
    assert session.sound.played == ["diceRoll", "pawnMove", "pawnMove", "pawnMove"]


def test_epilepsy_safe_mode_doubles_step_delay(session, scheduler):
    session.load_board(make_board(10, epilepsy_safe_mode=True))
    session.dispatch(actions.roll_dice("player-1", 2))
    assert scheduler.pending[0].due_ms == 600


def test_reset_cancels_pending_timer(session, scheduler, store):
    board = make_board(10)
    session.load_board(board)
    session.dispatch(actions.roll_dice("player-1", 4))
    handle = scheduler.pending[0]

    session.reset()
    assert handle.cancelled
    assert scheduler.pending == []
    assert session.state.pawn_animation is None
    assert session.state.game_status == STATUS_PLAYING
    assert store.load(board.id)["players"][0]["position"] == 0

    # The cancelled callback must not move anyone even if it still runs
    handle.callback()
    assert session.state.players[0].visual_position == 0


def test_roll_during_animation_is_rejected(session, scheduler):
    session.load_board(make_board(10))
    session.dispatch(actions.roll_dice("player-1", 4))
    with pytest.raises(IllegalAction):
        session.roll_dice()
    assert len(scheduler.pending) == 1


def test_close_cancels_timer(session, scheduler):
    session.load_board(make_board(10))
    session.dispatch(actions.roll_dice("player-1", 4))
    session.close()
    assert scheduler.pending == []


def test_resume_from_store(store, scheduler):
    board = make_board(10)
    first = GameSession(store=store, scheduler=scheduler, rng=random.Random(1))
    first.load_board(board)
    first.dispatch(actions.roll_dice("player-1", 2))
    scheduler.run_all()
    first.acknowledge()
    first.proceed()

    second = GameSession(store=store, scheduler=ManualScheduler(), rng=random.Random(2))
    second.load_board(board)
    assert second.state.players[0].position == 2
    assert second.state.current_player_index == 1
    assert second.state.logs[0].message_key == MSG_GAME_RESUMED


def test_bad_token_sets_error(session):
    session.load_board_from_token("definitely-not-a-board")
    assert session.state.error == LOAD_ERROR_MESSAGE
    assert not session.state.is_loading
    assert session.state.board_config is None


def test_share_token_uses_board_as_designed(session):
    board = new_board()
    board.settings.randomize_tiles = True
    session.load_board(board)
    decoded = decode_board(session.share_token())
    assert decoded.to_dict() == board.to_dict()


def test_storage_failures_do_not_stop_play(scheduler, caplog):
    session = GameSession(store=BrokenStore(), scheduler=scheduler, rng=random.Random(3))
    with caplog.at_level(logging.WARNING, logger="boardwise.session"):
        session.load_board(make_board(10))
        session.dispatch(actions.roll_dice("player-1", 1))
        scheduler.run_all()
    assert session.state.game_status == STATUS_INTERACTION_PENDING
    assert "Could not save play state" in caplog.text


def test_roll_without_scheduler_keeps_state(store):
    board = make_board(10)
    session = GameSession(store=store, sound=RecordingSoundPlayer(), rng=random.Random(5))
    session.load_board(board)
    before = session.state.to_dict()

    with pytest.raises(RuntimeError):
        session.dispatch(actions.roll_dice("player-1", 3))
    assert session.state.game_status == STATUS_PLAYING
    assert session.state.pawn_animation is None
    assert session.state.to_dict() == before
    assert session.sound.played == []
    assert store.load(board.id)["gameStatus"] == STATUS_PLAYING


def test_set_tile_quiz_in_designer(session):
    session.open_board(make_board(10))
    tile_id = session.state.board_config.tiles[4].id
    quiz = QuizConfig(
        question="Largest planet?",
        options=[QuizOption(id="j", text="Jupiter", is_correct=True), QuizOption(id="m", text="Mars")],
        difficulty=2,
        points=10,
    )

    session.set_tile_quiz(4, quiz)
    tile = session.state.board_config.tiles[4]
    assert session.state.game_status == STATUS_SETUP
    assert tile.id == tile_id
    assert tile.type == TILE_QUIZ
    assert tile.config.question == "Largest planet?"
    assert decode_board(session.share_token()).tiles[4].type == TILE_QUIZ

    with pytest.raises(IllegalAction):
        session.set_tile_quiz(0, quiz)
    with pytest.raises(IllegalAction):
        session.set_tile_quiz(42, quiz)


def test_set_tile_quiz_rejected_during_play(session):
    session.load_board(make_board(10))
    with pytest.raises(IllegalAction):
        session.set_tile_quiz(4, QuizConfig(question="Q", options=[QuizOption(id="a", text="A", is_correct=True)]))
