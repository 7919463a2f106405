"""
Game log and side-effect descriptions.
Log entries are message templates plus structured params so rendering and
localization stay outside the engine. Effects describe side effects (sounds,
timers, storage) that the reducer wants performed; the session executes them.
"""

from dataclasses import dataclass
from typing import Any

from boardwise.engine import MAX_LOG_ENTRIES
from boardwise.engine.state import LogEntry
from boardwise.engine.utils import new_id, now_ms


# ===== Log Types =====

LOG_ROLL = "roll"
LOG_MOVE = "move"
LOG_QUIZ_CORRECT = "quiz_correct"
LOG_QUIZ_INCORRECT = "quiz_incorrect"
LOG_PUNISHMENT = "punishment"
LOG_REWARD = "reward"
LOG_INFO = "info"
LOG_GAME_EVENT = "game_event"
LOG_WINNER = "winner"
LOG_STREAK = "streak"

# ===== Message Keys =====

MSG_GAME_STARTED = "gameLog.gameStarted"
MSG_GAME_RESUMED = "gameLog.gameResumed"
MSG_GAME_RESET = "gameLog.gameReset"
MSG_PLAYER_COUNT_MISMATCH = "gameLog.playerCountMismatch"
MSG_DICE_ROLLED = "gameLog.diceRolled"
MSG_MOVE_BLOCKED = "gameLog.moveBlocked"
MSG_LANDED_ON = "gameLog.landedOn"
MSG_PLAYER_FINISHED = "gameLog.playerFinished"
MSG_QUIZ_CORRECT = "gameLog.quizCorrect"
MSG_QUIZ_INCORRECT = "gameLog.quizIncorrect"
MSG_STREAK = "gameLog.streak"
MSG_STREAK_LOST = "gameLog.streakLost"
MSG_PUNISHMENT = "gameLog.punishment"
MSG_REWARD = "gameLog.reward"
MSG_INFO = "gameLog.info"
MSG_NEXT_TURN = "gameLog.nextTurn"
MSG_WINNER_FIRST = "gameLog.winnerFirstToFinish"
MSG_WINNER_SCORE = "gameLog.winnerHighestScore"
MSG_WINNER_COMBINED = "gameLog.winnerCombinedScore"


def append_log(
    logs: list[LogEntry],
    message_key: str,
    log_type: str,
    params: dict[str, Any] | None = None,
) -> list[LogEntry]:
    """Prepend a new entry and keep only the most recent MAX_LOG_ENTRIES."""
    entry = LogEntry(
        id=new_id(),
        message_key=message_key,
        timestamp=now_ms(),
        type=log_type,
        message_params=params,
    )
    return [entry, *logs][:MAX_LOG_ENTRIES]


# ===== Effects =====

PLAY_SOUND = "play_sound"
SCHEDULE_TICK = "schedule_tick"
CANCEL_TIMER = "cancel_timer"
CLEAR_PERSISTED = "clear_persisted"


@dataclass
class Effect:
    """Side effect requested by a transition. All effects have a type and payload."""
    type: str
    payload: dict[str, Any]


def play_sound(name: str) -> Effect:
    return Effect(PLAY_SOUND, {"sound": name})


def schedule_tick(delay_ms: int) -> Effect:
    return Effect(SCHEDULE_TICK, {"delay_ms": delay_ms})


def cancel_timer(handle: Any) -> Effect:
    return Effect(CANCEL_TIMER, {"handle": handle})


def clear_persisted(board_id: str) -> Effect:
    return Effect(CLEAR_PERSISTED, {"board_id": board_id})
