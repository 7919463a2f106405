"""
Player roster.
"""

from boardwise.engine import MIN_PLAYERS, MAX_PLAYERS
from boardwise.engine.definitions import PLAYER_COLORS
from boardwise.engine.state import Player


def generate_players(count: int) -> list[Player]:
    """
    Create a fresh roster of count players (clamped to [MIN_PLAYERS, MAX_PLAYERS]).
    Names are sequential, colours cycle through PLAYER_COLORS, stats start at zero.
    """
    count = max(MIN_PLAYERS, min(MAX_PLAYERS, int(count)))
    return [
        Player(
            id=f"player-{i + 1}",
            name=f"Player {i + 1}",
            color=PLAYER_COLORS[i % len(PLAYER_COLORS)],
        )
        for i in range(count)
    ]


def next_unfinished_index(players: list[Player], current_index: int) -> int:
    """
    Index of the next player after current_index who has not finished.
    Wraps around and tries at most one full lap; returns current_index when
    everyone has finished.
    """
    total = len(players)
    if total == 0:
        return current_index
    index = current_index
    for _ in range(total):
        index = (index + 1) % total
        if not players[index].has_finished:
            return index
    return current_index
