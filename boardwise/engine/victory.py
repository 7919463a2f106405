"""
Win evaluation.
Decides who wins once every player has finished, under each winning condition.
"""

from typing import Any

from boardwise.engine.definitions import (
    WIN_COMBINED_ORDER_SCORE,
    WIN_FIRST_TO_FINISH,
    WIN_HIGHEST_SCORE,
)
from boardwise.engine.state import Player


def combined_score(player: Player, total_players: int) -> int:
    """(total - finishOrder + 1) * 10 + score; unfinished players get no order bonus."""
    if player.finish_order is None:
        return player.score
    return (total_players - player.finish_order + 1) * 10 + player.score


def _first_to_finish(players: list[Player]) -> tuple[Player | None, dict[str, Any]]:
    winner = next((p for p in players if p.finish_order == 1), None)
    if winner is None:
        return None, {}
    return winner, {"name": winner.name, "score": winner.score, "finishOrder": 1}


def _highest_score(players: list[Player]) -> tuple[Player | None, dict[str, Any]]:
    winner = None
    for player in players:
        # Strict comparison keeps the first player in order on ties
        if winner is None or player.score > winner.score:
            winner = player
    if winner is None:
        return None, {}
    return winner, {"name": winner.name, "score": winner.score}


def _combined_order_score(players: list[Player]) -> tuple[Player | None, dict[str, Any]]:
    total = len(players)
    if total == 0:
        return None, {}

    def rank(p: Player) -> tuple[int, int, int]:
        order = p.finish_order if p.finish_order is not None else total + 1
        return (combined_score(p, total), -order, p.score)

    # max() returns the first maximal element, so remaining ties keep player order
    winner = max(players, key=rank)
    return winner, {
        "name": winner.name,
        "score": winner.score,
        "finishOrder": winner.finish_order,
        "combinedScore": combined_score(winner, total),
        "orderBonus": combined_score(winner, total) - winner.score,
    }


EVALUATORS = {
    WIN_FIRST_TO_FINISH: _first_to_finish,
    WIN_HIGHEST_SCORE: _highest_score,
    WIN_COMBINED_ORDER_SCORE: _combined_order_score,
}


def evaluate_winner(players: list[Player], condition: str) -> tuple[Player | None, dict[str, Any]]:
    """
    Pick the winner under condition.
    Returns (winner, breakdown) where breakdown holds the log params describing
    the scores that decided it. (None, {}) when no player qualifies.
    """
    evaluator = EVALUATORS.get(condition)
    if evaluator is None:
        raise ValueError(f"Unknown winning condition: {condition}")
    return evaluator(players)
