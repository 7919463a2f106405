"""
Player roster and designer settings changes.
"""

from boardwise.engine import MAX_PLAYERS, actions
from boardwise.engine.codec import new_board
from boardwise.engine.definitions import PLAYER_COLORS, PUNISHMENT_REVERT_MOVE
from boardwise.engine.reducer import apply_action
from boardwise.engine.roster import generate_players, next_unfinished_index
from boardwise.engine.state import GameState


def test_generate_players():
    players = generate_players(3)
    assert [p.id for p in players] == ["player-1", "player-2", "player-3"]
    assert [p.name for p in players] == ["Player 1", "Player 2", "Player 3"]
    assert players[2].color == PLAYER_COLORS[2]
    assert all(p.score == 0 and p.position == 0 and p.finish_order is None for p in players)


def test_generate_players_clamps_count():
    assert len(generate_players(0)) == 1
    assert len(generate_players(50)) == MAX_PLAYERS


def test_next_unfinished_skips_finished_players():
    players = generate_players(4)
    players[1].has_finished = True
    players[2].has_finished = True
    assert next_unfinished_index(players, 0) == 3
    assert next_unfinished_index(players, 3) == 0

    for p in players:
        p.has_finished = True
    assert next_unfinished_index(players, 2) == 2


def test_changing_player_count_regenerates_roster():
    state, _ = apply_action(GameState(), actions.set_board_config(new_board()))
    assert len(state.players) == 2
    state.players[0].score = 30

    state, _ = apply_action(state, actions.update_board_settings({"numberOfPlayers": 4}))
    assert len(state.players) == 4
    assert all(p.score == 0 for p in state.players)
    assert state.board_config.settings.number_of_players == 4


def test_settings_patch_resizes_and_migrates():
    state, _ = apply_action(GameState(), actions.set_board_config(new_board()))
    state, _ = apply_action(state, actions.update_board_settings({
        "numberOfTiles": 15,
        "punishmentMode": True,
        "diceSides": 0,
    }))
    settings = state.board_config.settings
    assert len(state.board_config.tiles) == 15
    assert settings.punishment_type == PUNISHMENT_REVERT_MOVE
    assert settings.dice_sides == 1
