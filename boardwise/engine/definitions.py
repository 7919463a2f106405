"""
Static definitions for tiles, settings and players.
Closed sets of tile types, punishment modes and win conditions, plus the
visual pools used when randomizing a board.
"""

# ===== Tile types =====

TILE_EMPTY = "empty"
TILE_START = "start"
TILE_FINISH = "finish"
TILE_QUIZ = "quiz"
TILE_INFO = "info"
TILE_REWARD = "reward"

TILE_TYPES = (TILE_EMPTY, TILE_START, TILE_FINISH, TILE_QUIZ, TILE_INFO, TILE_REWARD)

# ===== Settings enums =====

PUNISHMENT_NONE = "none"
PUNISHMENT_REVERT_MOVE = "revertMove"
PUNISHMENT_MOVE_BACK_FIXED = "moveBackFixed"
PUNISHMENT_MOVE_BACK_LEVEL_BASED = "moveBackLevelBased"

PUNISHMENT_TYPES = (
    PUNISHMENT_NONE,
    PUNISHMENT_REVERT_MOVE,
    PUNISHMENT_MOVE_BACK_FIXED,
    PUNISHMENT_MOVE_BACK_LEVEL_BASED,
)

WIN_FIRST_TO_FINISH = "firstToFinish"
WIN_HIGHEST_SCORE = "highestScore"
WIN_COMBINED_ORDER_SCORE = "combinedOrderScore"

WINNING_CONDITIONS = (WIN_FIRST_TO_FINISH, WIN_HIGHEST_SCORE, WIN_COMBINED_ORDER_SCORE)

# ===== Game status =====

STATUS_SETUP = "setup"
STATUS_PLAYING = "playing"
STATUS_ANIMATING_PAWN = "animating_pawn"
STATUS_INTERACTION_PENDING = "interaction_pending"
STATUS_FINISHED = "finished"

GAME_STATUSES = (
    STATUS_SETUP,
    STATUS_PLAYING,
    STATUS_ANIMATING_PAWN,
    STATUS_INTERACTION_PENDING,
    STATUS_FINISHED,
)

# ===== Defaults =====

DEFAULT_BOARD_SETTINGS = {
    "name": "My Awesome Board Game",
    "description": None,
    "numberOfTiles": 20,
    "punishmentType": PUNISHMENT_NONE,
    "punishmentValue": 1,
    "randomizeTiles": False,
    "diceSides": 6,
    "numberOfPlayers": 2,
    "winningCondition": WIN_FIRST_TO_FINISH,
    "epilepsySafeMode": False,
    "boardBackgroundImage": None,
}

# Quiz difficulty -> default points awarded for a correct answer
DIFFICULTY_POINTS = {1: 5, 2: 10, 3: 15}

# ===== Visuals =====

DEFAULT_TILE_COLOR = "#FFFFFF"
START_TILE_COLOR = "#4CAF50"
FINISH_TILE_COLOR = "#F44336"

TILE_TYPE_EMOJIS = {
    TILE_EMPTY: "⬜",
    TILE_START: "\U0001f3c1",
    TILE_FINISH: "\U0001f3c6",
    TILE_QUIZ: "❓",
    TILE_INFO: "ℹ️",
    TILE_REWARD: "⭐",
}

RANDOM_EMOJIS = [
    "\U0001f389", "\U0001f388", "\U0001f381", "✨", "\U0001f680",
    "\U0001f31f", "\U0001f4a1", "\U0001f9e9", "\U0001f48e", "\U0001f3af",
    "\U0001f30d", "\U0001f3dd️", "⛰️", "\U0001f3d5️", "\U0001f3a8",
    "\U0001f3ad", "\U0001f3b5", "\U0001f4da", "\U0001f52c", "\U0001f52d",
    "\U0001f34e", "\U0001f34c", "\U0001f347", "\U0001f353", "\U0001f355",
    "\U0001f354", "\U0001f366", "\U0001f369", "☕", "\U0001f379",
]

RANDOM_COLORS = [
    "#FFADAD",
    "#FFD6A5",
    "#FDFFB6",
    "#CAFFBF",
    "#9BF6FF",
    "#A0C4FF",
    "#BDB2FF",
    "#FFC6FF",
    "#FFB3BA",
    "#FFDFBA",
    "#FFFFBA",
    "#BAFFC9",
    "#BAE1FF",
    "#E0BBE4",
]

PLAYER_COLORS = [
    "#FF5733",
    "#33FF57",
    "#3357FF",
    "#FF33A1",
    "#FFB833",
    "#33FFF0",
    "#A133FF",
    "#FF3333",
    "#33A1FF",
    "#A1FF33",
]

# ===== Sounds (opaque names passed to the sound collaborator) =====

SOUND_DICE_ROLL = "diceRoll"
SOUND_PAWN_MOVE = "pawnMove"
SOUND_CORRECT_ANSWER = "correctAnswer"
SOUND_WRONG_ANSWER = "wrongAnswer"
SOUND_PUNISHMENT = "punishment"
SOUND_REWARD = "reward"
SOUND_FINISH = "finish"
