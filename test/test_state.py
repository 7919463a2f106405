"""
Board data model: tile config union, quiz answer normalization, designer tile updates.
"""

import pytest

from boardwise.engine import actions
from boardwise.engine.codec import new_board
from boardwise.engine.reducer import apply_action
from boardwise.engine.state import (
    GameState,
    InfoConfig,
    Player,
    QuizConfig,
    QuizOption,
    RewardConfig,
    Tile,
    normalize_quiz_options,
)


def test_quiz_keeps_only_first_correct_option():
    quiz = QuizConfig(question="Pick one", options=[
        QuizOption(id="A", text="A", is_correct=True),
        QuizOption(id="B", text="B", is_correct=True),
    ])
    assert [(o.id, o.is_correct) for o in quiz.options] == [("A", True), ("B", False)]
    assert quiz.correct_option.id == "A"


def test_quiz_without_correct_option_marks_first():
    options = normalize_quiz_options([QuizOption(id="x", text="x"), QuizOption(id="y", text="y")])
    assert [o.is_correct for o in options] == [True, False]
    assert len(normalize_quiz_options([])) == 1


def test_tile_rejects_mismatched_config():
    with pytest.raises(ValueError):
        Tile(id="t1", type="quiz", position=3, config=InfoConfig(message="hi"))
    with pytest.raises(ValueError):
        Tile(id="t2", type="lava", position=3)


def test_tile_config_follows_type():
    empty = Tile(id="t1", type="empty", position=2, config=RewardConfig(message="x", points=3))
    assert empty.config is None
    reward = Tile(id="t2", type="reward", position=2)
    assert isinstance(reward.config, RewardConfig)


def test_player_from_dict_defaults_visual_position():
    player = Player.from_dict({"id": "p", "name": "P", "color": "#000", "position": 4, "finishOrder": 0})
    assert player.visual_position == 4
    assert player.finish_order is None
    assert "visualPosition" not in player.to_dict(include_visual=False)


def test_update_tiles_normalizes_quiz_answers():
    board = new_board()
    state = GameState(board_config=board, game_status="setup", is_loading=False)
    tiles = [t.to_dict() for t in board.tiles]
    tiles[5] = {
        "id": "q",
        "type": "quiz",
        "position": 5,
        "config": {
            "question": "Which?",
            "options": [
                {"id": "A", "text": "A", "isCorrect": True},
                {"id": "B", "text": "B", "isCorrect": True},
            ],
        },
    }
    state, _ = apply_action(state, actions.update_tiles(tiles))
    quiz = state.board_config.tiles[5]
    assert sum(o.is_correct for o in quiz.config.options) == 1
    assert quiz.config.options[0].is_correct
    assert state.base_board_config.tiles[5].id == "q"
