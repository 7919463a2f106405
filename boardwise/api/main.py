"""
FastAPI backend for BoardWise.
Provides REST endpoints for board design, share links, play and AI helpers.
"""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from boardwise import __version__
from boardwise.engine.codec import decode_board, encode_board, normalize_board
from boardwise.engine.errors import AIServiceError, IllegalAction, InvalidFormat, UnsupportedLanguage
from boardwise.services.ai import (
    AIServiceClient,
    QuizRequest,
    TranslateRequest,
    generate_quiz_question,
    quiz_config_from_generation,
    translate_text,
)
from boardwise.services.scheduler import AsyncioScheduler
from boardwise.session import GameSession

from .database import init_db
from .store import PlayStateStore

logger = logging.getLogger(__name__)

app = FastAPI(
    title="BoardWise API",
    description="Backend API for BoardWise - build and play your own board game",
    version=__version__,
)

CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000", "http://localhost:9002"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

store = PlayStateStore()
ai_client = AIServiceClient()

# In-memory sessions; play progress is also persisted through the store
design_sessions: dict[str, GameSession] = {}
play_sessions: dict[str, GameSession] = {}


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            logger.error("[500] %s %s", request.method, request.url.path)
        return response
    except Exception:
        logger.exception("[500] %s %s (exception)", request.method, request.url.path)
        raise


@app.exception_handler(IllegalAction)
async def illegal_action_handler(request, exc):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(InvalidFormat)
async def invalid_format_handler(request, exc):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(UnsupportedLanguage)
async def unsupported_language_handler(request, exc):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AIServiceError)
async def ai_service_handler(request, exc):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# ===== Pydantic Models =====

class BoardDocument(BaseModel):
    board: dict[str, Any]


class TokenRequest(BaseModel):
    token: str


class LoadRequest(BaseModel):
    token: str | None = None
    file: str | None = None
    board: dict[str, Any] | None = None


class SettingsPatch(BaseModel):
    changes: dict[str, Any]


class TilesUpdate(BaseModel):
    tiles: list[dict[str, Any]]


class RollRequest(BaseModel):
    player_id: str | None = None


class AnswerRequest(BaseModel):
    option_id: str


# ===== Helper Functions =====

def _new_session() -> GameSession:
    return GameSession(store=store, scheduler=AsyncioScheduler())


def get_design_session(board_id: str) -> GameSession:
    session = design_sessions.get(board_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Board {board_id} not found")
    return session


def get_play_session(board_id: str) -> GameSession:
    session = play_sessions.get(board_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"No game loaded for board {board_id}")
    return session


def state_for_response(session: GameSession) -> dict[str, Any]:
    return session.state.to_dict()


@app.on_event("startup")
def on_startup():
    init_db()


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "BoardWise API", "version": __version__}


# ----- Boards & share links -----

@app.post("/boards")
async def create_board():
    """Create a fresh board in the designer."""
    session = _new_session()
    session.initialize_new_board()
    board_id = session.state.board_config.id
    design_sessions[board_id] = session
    return state_for_response(session)


@app.post("/boards/encode")
def encode_board_document(request: BoardDocument):
    return {"token": encode_board(normalize_board(request.board))}


@app.post("/boards/decode")
def decode_board_token(request: TokenRequest):
    return {"board": decode_board(request.token).to_dict()}


# ----- Designer -----

@app.post("/design")
async def open_board_in_designer(request: BoardDocument):
    config = normalize_board(request.board)
    session = _new_session()
    session.open_board(config)
    design_sessions[config.id] = session
    return state_for_response(session)


@app.get("/design/{board_id}")
def get_design(board_id: str):
    return state_for_response(get_design_session(board_id))


@app.patch("/design/{board_id}/settings")
async def patch_settings(board_id: str, request: SettingsPatch):
    session = get_design_session(board_id)
    session.update_settings(request.changes)
    return state_for_response(session)


@app.put("/design/{board_id}/tiles")
async def put_tiles(board_id: str, request: TilesUpdate):
    session = get_design_session(board_id)
    session.update_tiles(request.tiles)
    return state_for_response(session)


@app.post("/design/{board_id}/randomize")
async def randomize_design(board_id: str):
    session = get_design_session(board_id)
    session.randomize_visuals()
    return state_for_response(session)


@app.post("/design/{board_id}/tiles/{position}/quiz")
async def generate_tile_quiz(board_id: str, position: int, request: QuizRequest):
    """Generate a quiz from source text and place it on the tile at position."""
    session = get_design_session(board_id)
    generated = await generate_quiz_question(request, ai_client)
    session.set_tile_quiz(position, quiz_config_from_generation(generated))
    return state_for_response(session)


@app.get("/design/{board_id}/share")
def share_design(board_id: str):
    session = get_design_session(board_id)
    return {"token": session.share_token(), "file": session.export_file()}


# ----- Play -----

@app.post("/play/load")
async def load_game(request: LoadRequest):
    """Load a board for play from a share token, a file body or a board document."""
    session = _new_session()
    if request.token is not None:
        session.load_board_from_token(request.token)
    elif request.file is not None:
        session.load_board_from_file(request.file)
    elif request.board is not None:
        session.load_board(normalize_board(request.board))
    else:
        raise HTTPException(status_code=400, detail="Provide token, file or board")

    if session.state.error or session.state.board_config is None:
        raise HTTPException(status_code=400, detail=session.state.error or "Board could not be loaded")
    board_id = session.state.board_config.id
    previous = play_sessions.get(board_id)
    if previous is not None:
        previous.close()
    play_sessions[board_id] = session
    return state_for_response(session)


@app.get("/play/{board_id}")
def get_game(board_id: str):
    return state_for_response(get_play_session(board_id))


@app.post("/play/{board_id}/roll")
async def roll(board_id: str, request: RollRequest):
    session = get_play_session(board_id)
    session.roll_dice(request.player_id)
    return state_for_response(session)


@app.post("/play/{board_id}/answer")
async def answer(board_id: str, request: AnswerRequest):
    session = get_play_session(board_id)
    session.answer_quiz(request.option_id)
    return state_for_response(session)


@app.post("/play/{board_id}/acknowledge")
async def acknowledge(board_id: str):
    session = get_play_session(board_id)
    session.acknowledge()
    return state_for_response(session)


@app.post("/play/{board_id}/proceed")
async def proceed(board_id: str):
    session = get_play_session(board_id)
    session.proceed()
    return state_for_response(session)


@app.post("/play/{board_id}/reset")
async def reset(board_id: str):
    session = get_play_session(board_id)
    session.reset()
    return state_for_response(session)


@app.delete("/play/{board_id}")
async def leave_game(board_id: str):
    """Navigate away: cancel timers and drop the in-memory session (saved state is kept)."""
    session = play_sessions.pop(board_id, None)
    if session is not None:
        session.close()
    return {"ok": True}


# ----- AI helpers (design time only) -----

@app.post("/ai/quiz")
async def ai_quiz(request: QuizRequest):
    response = await generate_quiz_question(request, ai_client)
    return response.model_dump(by_alias=True)


@app.post("/ai/translate")
async def ai_translate(request: TranslateRequest):
    response = await translate_text(request, ai_client)
    return response.model_dump(by_alias=True)
