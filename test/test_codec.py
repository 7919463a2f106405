"""
Board codec: share tokens, file export, and normalization of drafts.
"""

import base64
import json
from urllib.parse import quote

import pytest

from boardwise.engine.codec import (
    decode_board,
    decode_board_file,
    encode_board,
    encode_board_file,
    new_board,
    normalize_board,
    resize_tiles,
)
from boardwise.engine.definitions import (
    PUNISHMENT_NONE,
    PUNISHMENT_REVERT_MOVE,
    TILE_EMPTY,
    TILE_FINISH,
    TILE_QUIZ,
    TILE_START,
    WIN_FIRST_TO_FINISH,
)
from boardwise.engine.errors import InvalidFormat


def draft(**settings):
    return {
        "id": "abc123",
        "settings": {"name": "Rivers", "numberOfTiles": 12, **settings},
        "tiles": [],
    }


def test_share_token_round_trip():
    board = new_board()
    token = encode_board(board)
    assert "=" not in token
    assert "+" not in token and "/" not in token

    decoded = decode_board(token)
    assert decoded.to_dict() == board.to_dict()


def test_decode_accepts_padded_and_percent_encoded_tokens():
    board = new_board()
    raw = json.dumps(board.to_dict()).encode("utf-8")
    padded = base64.b64encode(raw).decode("ascii")
    assert decode_board(padded).id == board.id
    assert decode_board(quote(padded, safe="")).id == board.id


def test_file_round_trip():
    board = new_board()
    assert decode_board_file(encode_board_file(board)).to_dict() == board.to_dict()


@pytest.mark.parametrize("token", [
    "",
    "   ",
    base64.urlsafe_b64encode(b"hello world").decode(),
    base64.urlsafe_b64encode(b"[1, 2]").decode(),
])
def test_decode_rejects_garbage(token):
    with pytest.raises(InvalidFormat):
        decode_board(token)


@pytest.mark.parametrize("missing", ["id", "settings", "tiles"])
def test_normalize_requires_core_keys(missing):
    doc = draft()
    del doc[missing]
    with pytest.raises(InvalidFormat):
        normalize_board(doc)


def test_legacy_punishment_mode_is_migrated():
    on = normalize_board(draft(punishmentMode=True))
    off = normalize_board(draft(punishmentMode=False))
    assert on.settings.punishment_type == PUNISHMENT_REVERT_MOVE
    assert off.settings.punishment_type == PUNISHMENT_NONE
    assert "punishmentMode" not in on.settings.to_dict()


def test_explicit_punishment_type_wins_over_legacy_flag():
    board = normalize_board(draft(punishmentMode=True, punishmentType="moveBackFixed"))
    assert board.settings.punishment_type == "moveBackFixed"


def test_settings_are_defaulted_and_clamped():
    board = normalize_board(draft(numberOfTiles=500, numberOfPlayers=0, diceSides=-3, winningCondition="fastest"))
    settings = board.settings
    assert settings.number_of_tiles == 100
    assert settings.number_of_players == 1
    assert settings.dice_sides == 1
    assert settings.winning_condition == WIN_FIRST_TO_FINISH
    assert len(board.tiles) == 100

    small = normalize_board(draft(numberOfTiles=3))
    assert small.settings.number_of_tiles == 10


def test_tile_layout_is_reconciled():
    doc = draft()
    doc["tiles"] = [
        {"id": "q1", "type": "quiz", "position": 4, "config": {
            "question": "Capital of France?",
            "options": [
                {"id": "x", "text": "Paris", "isCorrect": True},
                {"id": "y", "text": "Lyon", "isCorrect": True},
            ],
            "difficulty": 2,
        }},
    ]
    board = normalize_board(doc)
    assert [t.position for t in board.tiles] == list(range(12))
    assert board.tiles[0].type == TILE_START
    assert board.tiles[-1].type == TILE_FINISH
    quiz = board.tiles[4]
    assert quiz.type == TILE_QUIZ
    assert [o.is_correct for o in quiz.config.options] == [True, False]
    assert quiz.config.points == 10


def test_resize_keeps_existing_tiles():
    board = new_board()
    original_ids = [t.id for t in board.tiles[:5]]

    grown = resize_tiles(board.tiles, 25)
    assert len(grown) == 25
    assert [t.id for t in grown[:5]] == original_ids
    assert grown[-1].type == TILE_FINISH
    assert grown[board.last_index].type == TILE_EMPTY

    shrunk = resize_tiles(grown, 10)
    assert len(shrunk) == 10
    assert shrunk[0].id == original_ids[0]
    assert shrunk[-1].type == TILE_FINISH


def test_messy_draft_normalizes_to_a_fixed_point():
    doc = draft(numberOfTiles=3, numberOfPlayers=20, punishmentMode=True, diceSides="8")
    doc["tiles"] = [
        {"id": "late", "type": "reward", "position": 40, "config": {"message": "Gone", "points": 5}},
        {"id": "q7", "type": "quiz", "position": 7, "config": {
            "question": "Longest river?",
            "options": [
                {"id": "n", "text": "Nile", "isCorrect": True},
                {"id": "a", "text": "Amazon", "isCorrect": True},
                {"id": "y", "text": "Yangtze"},
            ],
            "difficulty": 9,
        }},
        {"id": "mid-start", "type": "start", "position": 5},
        {"id": "i2", "type": "info", "position": 2, "config": {"message": "Rivers flow downhill"}},
    ]

    board = normalize_board(doc)
    assert board.settings.number_of_tiles == 10
    assert board.settings.punishment_type == PUNISHMENT_REVERT_MOVE
    assert [t.position for t in board.tiles] == list(range(10))
    assert board.tiles[5].type == TILE_EMPTY
    assert [o.is_correct for o in board.tiles[7].config.options] == [True, False, False]
    assert all(t.id != "late" for t in board.tiles)

    assert normalize_board(board.to_dict()).to_dict() == board.to_dict()
    assert decode_board(encode_board(board)).to_dict() == board.to_dict()
    assert decode_board_file(encode_board_file(board)).to_dict() == board.to_dict()
