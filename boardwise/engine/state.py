"""
Game state representation.
Reducers work on deep copies; every dataclass round-trips through the
camelCase JSON document used by share links and saved play state.
"""

from copy import deepcopy
from dataclasses import dataclass, field, replace
from typing import Any

from boardwise.engine import MIN_TILES, MAX_TILES, MIN_PLAYERS, MAX_PLAYERS
from boardwise.engine.definitions import (
    DEFAULT_BOARD_SETTINGS,
    DIFFICULTY_POINTS,
    GAME_STATUSES,
    PUNISHMENT_NONE,
    PUNISHMENT_REVERT_MOVE,
    PUNISHMENT_TYPES,
    STATUS_SETUP,
    TILE_FINISH,
    TILE_INFO,
    TILE_QUIZ,
    TILE_REWARD,
    TILE_START,
    TILE_TYPES,
    WINNING_CONDITIONS,
)
from boardwise.engine.utils import new_id


def _int(value: Any, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value != "" else None


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


# ===== Tile configs (tagged by tile type) =====

@dataclass
class QuizOption:
    id: str
    text: str
    is_correct: bool = False
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "text": self.text, "isCorrect": self.is_correct}
        if self.image:
            out["image"] = self.image
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QuizOption":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=str(data.get("id") or new_id()),
            text=str(data.get("text") or ""),
            is_correct=bool(data.get("isCorrect", False)),
            image=_opt_str(data.get("image")),
        )


def normalize_quiz_options(options: list[QuizOption]) -> list[QuizOption]:
    """
    Return copies of options with exactly one marked correct.
    Keeps the first correct option; if none is correct the first option becomes correct.
    An empty list gets a single blank (correct) option.
    """
    if not options:
        return [QuizOption(id=new_id(), text="", is_correct=True)]
    result = []
    found = False
    for opt in options:
        correct = opt.is_correct and not found
        found = found or correct
        result.append(replace(opt, is_correct=correct))
    if not found:
        result[0] = replace(result[0], is_correct=True)
    return result


@dataclass
class QuizConfig:
    question: str
    options: list[QuizOption]
    difficulty: int = 1  # 1, 2 or 3
    points: int = DIFFICULTY_POINTS[1]
    question_image: str | None = None

    def __post_init__(self):
        if self.difficulty not in DIFFICULTY_POINTS:
            self.difficulty = _clamp(_int(self.difficulty, 1), 1, 3)
        self.points = max(0, _int(self.points, 0))
        self.options = normalize_quiz_options(self.options)

    @property
    def correct_option(self) -> QuizOption:
        return next(o for o in self.options if o.is_correct)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "question": self.question,
            "options": [o.to_dict() for o in self.options],
            "difficulty": self.difficulty,
            "points": self.points,
        }
        if self.question_image:
            out["questionImage"] = self.question_image
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QuizConfig":
        if not isinstance(data, dict):
            data = {}
        raw_options = data.get("options")
        if not isinstance(raw_options, list):
            raw_options = []
        difficulty = _clamp(_int(data.get("difficulty"), 1), 1, 3)
        return cls(
            question=str(data.get("question") or ""),
            options=[QuizOption.from_dict(o) for o in raw_options if isinstance(o, dict)],
            difficulty=difficulty,
            points=_int(data.get("points"), DIFFICULTY_POINTS[difficulty]),
            question_image=_opt_str(data.get("questionImage")),
        )


@dataclass
class InfoConfig:
    message: str
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"message": self.message}
        if self.image:
            out["image"] = self.image
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InfoConfig":
        if not isinstance(data, dict):
            data = {}
        return cls(message=str(data.get("message") or ""), image=_opt_str(data.get("image")))


@dataclass
class RewardConfig:
    message: str
    points: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"message": self.message}
        if self.points is not None:
            out["points"] = self.points
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RewardConfig":
        if not isinstance(data, dict):
            data = {}
        points = data.get("points")
        return cls(
            message=str(data.get("message") or ""),
            points=max(0, _int(points, 0)) if points is not None else None,
        )


TileConfig = QuizConfig | InfoConfig | RewardConfig

# tile type -> config class; other tile types carry no config
TILE_CONFIG_TYPES: dict[str, type] = {
    TILE_QUIZ: QuizConfig,
    TILE_INFO: InfoConfig,
    TILE_REWARD: RewardConfig,
}


def default_config_for(tile_type: str) -> TileConfig | None:
    """Blank config for a freshly typed tile (None for empty/start/finish)."""
    if tile_type == TILE_QUIZ:
        return QuizConfig(
            question="",
            options=[
                QuizOption(id=new_id(), text="", is_correct=True),
                QuizOption(id=new_id(), text="", is_correct=False),
            ],
        )
    if tile_type == TILE_INFO:
        return InfoConfig(message="")
    if tile_type == TILE_REWARD:
        return RewardConfig(message="", points=0)
    return None


# ===== Tiles and board =====

@dataclass
class TileUI:
    color: str | None = None
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.color is not None:
            out["color"] = self.color
        if self.icon is not None:
            out["icon"] = self.icon
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TileUI":
        if not isinstance(data, dict):
            data = {}
        return cls(color=_opt_str(data.get("color")), icon=_opt_str(data.get("icon")))


@dataclass
class Tile:
    """One board cell. config is present exactly for quiz/info/reward tiles."""
    id: str
    type: str
    position: int
    config: TileConfig | None = None
    ui: TileUI = field(default_factory=TileUI)

    def __post_init__(self):
        if self.type not in TILE_TYPES:
            raise ValueError(f"Unknown tile type: {self.type}")
        expected = TILE_CONFIG_TYPES.get(self.type)
        if expected is None:
            self.config = None
        elif self.config is None:
            self.config = default_config_for(self.type)
        elif not isinstance(self.config, expected):
            raise ValueError(
                f"Tile {self.id} of type {self.type} requires {expected.__name__}, "
                f"got {type(self.config).__name__}"
            )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "position": self.position,
            "ui": self.ui.to_dict(),
        }
        if self.config is not None:
            out["config"] = self.config.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tile":
        if not isinstance(data, dict):
            data = {}
        tile_type = data.get("type")
        if tile_type not in TILE_TYPES:
            tile_type = "empty"
        config_cls = TILE_CONFIG_TYPES.get(tile_type)
        config = None
        if config_cls is not None and isinstance(data.get("config"), dict):
            config = config_cls.from_dict(data["config"])
        return cls(
            id=str(data.get("id") or new_id()),
            type=tile_type,
            position=max(0, _int(data.get("position"), 0)),
            config=config,
            ui=TileUI.from_dict(data.get("ui")),
        )


def _migrate_punishment(data: dict[str, Any]) -> str:
    """
    Resolve punishmentType, honouring the legacy boolean punishmentMode.
    Legacy: punishmentMode true -> revertMove, false -> none (only when punishmentType is absent).
    """
    value = data.get("punishmentType")
    if value in PUNISHMENT_TYPES:
        return value
    if value is None and "punishmentMode" in data:
        return PUNISHMENT_REVERT_MOVE if data.get("punishmentMode") else PUNISHMENT_NONE
    return DEFAULT_BOARD_SETTINGS["punishmentType"]


@dataclass
class BoardSettings:
    name: str = DEFAULT_BOARD_SETTINGS["name"]
    description: str | None = None
    number_of_tiles: int = DEFAULT_BOARD_SETTINGS["numberOfTiles"]
    number_of_players: int = DEFAULT_BOARD_SETTINGS["numberOfPlayers"]
    dice_sides: int = DEFAULT_BOARD_SETTINGS["diceSides"]
    punishment_type: str = DEFAULT_BOARD_SETTINGS["punishmentType"]
    punishment_value: int = DEFAULT_BOARD_SETTINGS["punishmentValue"]
    winning_condition: str = DEFAULT_BOARD_SETTINGS["winningCondition"]
    randomize_tiles: bool = DEFAULT_BOARD_SETTINGS["randomizeTiles"]
    epilepsy_safe_mode: bool = DEFAULT_BOARD_SETTINGS["epilepsySafeMode"]
    board_background_image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "numberOfTiles": self.number_of_tiles,
            "numberOfPlayers": self.number_of_players,
            "diceSides": self.dice_sides,
            "punishmentType": self.punishment_type,
            "punishmentValue": self.punishment_value,
            "winningCondition": self.winning_condition,
            "randomizeTiles": self.randomize_tiles,
            "epilepsySafeMode": self.epilepsy_safe_mode,
        }
        if self.description is not None:
            out["description"] = self.description
        if self.board_background_image is not None:
            out["boardBackgroundImage"] = self.board_background_image
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoardSettings":
        """
        Build settings from a (possibly partial or legacy) document.
        Missing fields take defaults, counts are clamped, legacy punishmentMode is
        migrated and never carried forward.
        """
        if not isinstance(data, dict):
            data = {}
        defaults = DEFAULT_BOARD_SETTINGS
        winning = data.get("winningCondition")
        if winning not in WINNING_CONDITIONS:
            winning = defaults["winningCondition"]
        return cls(
            name=str(data.get("name") or defaults["name"]),
            description=_opt_str(data.get("description")),
            number_of_tiles=_clamp(
                _int(data.get("numberOfTiles"), defaults["numberOfTiles"]) or defaults["numberOfTiles"],
                MIN_TILES,
                MAX_TILES,
            ),
            number_of_players=_clamp(
                _int(data.get("numberOfPlayers"), defaults["numberOfPlayers"]),
                MIN_PLAYERS,
                MAX_PLAYERS,
            ),
            dice_sides=max(1, _int(data.get("diceSides"), defaults["diceSides"])),
            punishment_type=_migrate_punishment(data),
            punishment_value=max(0, _int(data.get("punishmentValue"), defaults["punishmentValue"])),
            winning_condition=winning,
            randomize_tiles=bool(data.get("randomizeTiles", defaults["randomizeTiles"])),
            epilepsy_safe_mode=bool(data.get("epilepsySafeMode", defaults["epilepsySafeMode"])),
            board_background_image=_opt_str(data.get("boardBackgroundImage")),
        )


@dataclass
class BoardConfig:
    id: str
    settings: BoardSettings
    tiles: list[Tile]

    @property
    def last_index(self) -> int:
        return max(0, len(self.tiles) - 1)

    def tile_at(self, position: int) -> Tile | None:
        for tile in self.tiles:
            if tile.position == position:
                return tile
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "settings": self.settings.to_dict(),
            "tiles": [t.to_dict() for t in self.tiles],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoardConfig":
        tiles_raw = data.get("tiles") or []
        if not isinstance(tiles_raw, list):
            tiles_raw = []
        tiles = [Tile.from_dict(t) for t in tiles_raw if isinstance(t, dict)]
        tiles.sort(key=lambda t: t.position)
        return cls(
            id=str(data.get("id")),
            settings=BoardSettings.from_dict(data.get("settings")),
            tiles=tiles,
        )


# ===== Players and logs =====

@dataclass
class Player:
    id: str
    name: str
    color: str
    position: int = 0
    # Lags behind position while a pawn animation runs; equals position when settled
    visual_position: int = 0
    score: int = 0
    current_streak: int = 0
    has_finished: bool = False
    finish_order: int | None = None  # 1 = first to reach the finish tile

    def to_dict(self, include_visual: bool = True) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "position": self.position,
            "score": self.score,
            "currentStreak": self.current_streak,
            "hasFinished": self.has_finished,
            "finishOrder": self.finish_order,
        }
        if include_visual:
            out["visualPosition"] = self.visual_position
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        if not isinstance(data, dict):
            data = {}
        position = max(0, _int(data.get("position"), 0))
        finish_order = _int(data.get("finishOrder"), 0)
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name") or ""),
            color=str(data.get("color") or ""),
            position=position,
            visual_position=max(0, _int(data.get("visualPosition"), position)),
            score=max(0, _int(data.get("score"), 0)),
            current_streak=max(0, _int(data.get("currentStreak"), 0)),
            has_finished=bool(data.get("hasFinished", False)),
            finish_order=finish_order if finish_order > 0 else None,
        )


@dataclass
class LogEntry:
    id: str
    message_key: str
    timestamp: int  # epoch milliseconds
    type: str  # roll, move, quiz_correct, quiz_incorrect, punishment, reward, info, game_event, winner, streak
    message_params: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "messageKey": self.message_key,
            "timestamp": self.timestamp,
            "type": self.type,
        }
        if self.message_params:
            out["messageParams"] = self.message_params
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEntry":
        if not isinstance(data, dict):
            data = {}
        params = data.get("messageParams")
        return cls(
            id=str(data.get("id") or new_id()),
            message_key=str(data.get("messageKey") or ""),
            timestamp=_int(data.get("timestamp"), 0),
            type=str(data.get("type") or "info"),
            message_params=dict(params) if isinstance(params, dict) else None,
        )


@dataclass
class PawnAnimation:
    """
    In-flight multi-step move. Never persisted.
    timer_handle is the one pending scheduler callback for this animation; it is
    shared (not copied) between state copies so it can always be cancelled.
    """
    player_id: str
    path: list[int]
    current_step_index: int = 0
    timer_handle: Any = None

    def __deepcopy__(self, memo):
        return PawnAnimation(
            player_id=self.player_id,
            path=list(self.path),
            current_step_index=self.current_step_index,
            timer_handle=self.timer_handle,
        )

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index >= len(self.path) - 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "playerId": self.player_id,
            "path": self.path,
            "currentStepIndex": self.current_step_index,
        }


# ===== Game state =====

@dataclass
class GameState:
    """Complete play state for one board."""
    board_config: BoardConfig | None = None
    players: list[Player] = field(default_factory=list)
    current_player_index: int = 0
    dice_roll: int | None = None
    game_status: str = STATUS_SETUP
    is_loading: bool = True
    error: str | None = None
    active_tile_for_interaction: Tile | None = None
    winner: Player | None = None
    logs: list[LogEntry] = field(default_factory=list)
    players_finished_count: int = 0
    pawn_animation: PawnAnimation | None = None
    # Board as decoded, before tile visuals were randomized; reset re-derives from it
    base_board_config: BoardConfig | None = None
    # True once the pending tile interaction (answer / acknowledge) has been applied
    interaction_resolved: bool = False

    def copy(self) -> "GameState":
        """Return a deep copy of this game state."""
        return deepcopy(self)

    @property
    def current_player(self) -> Player | None:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    def player_by_id(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def to_dict(self) -> dict[str, Any]:
        """Full runtime view (for API responses); see persistence for the saved projection."""
        if self.game_status not in GAME_STATUSES:
            raise ValueError(f"Unknown game status: {self.game_status}")
        return {
            "boardConfig": self.board_config.to_dict() if self.board_config else None,
            "players": [p.to_dict() for p in self.players],
            "currentPlayerIndex": self.current_player_index,
            "diceRoll": self.dice_roll,
            "gameStatus": self.game_status,
            "isLoading": self.is_loading,
            "error": self.error,
            "activeTileForInteraction": (
                self.active_tile_for_interaction.to_dict() if self.active_tile_for_interaction else None
            ),
            "winner": self.winner.to_dict() if self.winner else None,
            "logs": [e.to_dict() for e in self.logs],
            "playersFinishedCount": self.players_finished_count,
            "pawnAnimation": self.pawn_animation.to_dict() if self.pawn_animation else None,
            "interactionResolved": self.interaction_resolved,
        }


def is_start_or_finish(tile: Tile) -> bool:
    return tile.type in (TILE_START, TILE_FINISH)
