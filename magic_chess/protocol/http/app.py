from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    RuleRefusalError,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    rule_refusal_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemoryMatchStore
from ...engine.board import Board, new_game
from ...engine.game import Match, MatchStatus
from ...engine.magic import (
    MagicAction,
    allowed_types,
    get_valid_downgrade_targets,
    get_valid_upgrade_targets,
)
from ...engine.move import Move, parse_coord, square_to_str, str_to_square
from ...engine.perft import perft as perft_nodes
from ...engine.types import Color, MoveRecord, PieceType, Refusal, Square
from ...search.service import GreedyPlayer


logger = logging.getLogger(__name__)


class CreateMatchRequest(BaseModel):
    placement: Optional[str] = Field(default=None, description="FEN piece placement")
    active_color: Color = Color.WHITE


class PieceView(BaseModel):
    square: str
    type: PieceType
    color: Color
    id: str


class MagicStateView(BaseModel):
    white_used: bool
    black_used: bool


class MatchState(BaseModel):
    game_id: str
    placement: str
    pieces: List[PieceView]
    active_color: Color
    status: MatchStatus
    magic: MagicStateView
    in_check: bool
    checkmate: bool
    stalemate: bool
    legal_moves: List[str]
    last_move: Optional[str]
    move_history: List[str]


class MoveRequest(BaseModel):
    color: Color
    move: str = Field(..., description="Coordinate move string, e.g., e2e4 or e7e8n")


class MagicRequest(BaseModel):
    color: Color
    action: MagicAction
    square: str = Field(..., description="Square of the piece to transform, e.g., c3")
    new_type: PieceType


class MagicResponse(BaseModel):
    time_reversed: bool
    state: MatchState


class MagicTargets(BaseModel):
    upgrade: Dict[str, List[PieceType]]
    downgrade: Dict[str, List[PieceType]]


class ResignRequest(BaseModel):
    color: Color


class AIRequest(BaseModel):
    skill: int = Field(default=1500, ge=0, le=4000)
    seed: Optional[int] = None


class PerftRequest(BaseModel):
    placement: Optional[str] = None
    color: Color = Color.WHITE
    depth: int = Field(default=1, ge=0, le=3)


def create_app(log_level: str = "INFO") -> FastAPI:
    app = FastAPI(title="Magic Chess API", version="0.1.0")

    logging.basicConfig(level=log_level.upper())
    logging.getLogger().setLevel(log_level.upper())

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(RuleRefusalError, rule_refusal_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemoryMatchStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=MatchState)
    async def create_game(req: Optional[CreateMatchRequest] = None) -> MatchState:
        if req is None or req.placement is None:
            match = Match(board=new_game(), active_color=req.active_color if req else Color.WHITE)
        else:
            try:
                match = Match.from_placement(req.placement, req.active_color)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
        game_id = store.create(match)
        logger.info("match created", extra={"game_id": game_id})
        return _state(game_id, match)

    @app.get("/api/games/{game_id}/state", response_model=MatchState)
    async def get_state(game_id: str) -> MatchState:
        with store.locked(game_id) as match:
            return _state(game_id, _require(match))

    @app.post("/api/games/{game_id}/move", response_model=MatchState)
    async def make_move(game_id: str, req: MoveRequest) -> MatchState:
        move = _parse(parse_coord, req.move)
        with store.locked(game_id) as match:
            match = _require(match)
            verdict = match.play(req.color, move.from_square, move.to_square, move.promotion)
            if not verdict:
                raise RuleRefusalError.from_verdict(verdict)
            return _state(game_id, match)

    @app.post("/api/games/{game_id}/magic", response_model=MagicResponse)
    async def magic(game_id: str, req: MagicRequest) -> MagicResponse:
        square = _parse(str_to_square, req.square)
        with store.locked(game_id) as match:
            match = _require(match)
            outcome = match.cast_magic(req.color, req.action, square, req.new_type)
            if not outcome:
                raise RuleRefusalError.from_verdict(outcome)
            return MagicResponse(time_reversed=outcome.time_reversed, state=_state(game_id, match))

    @app.get("/api/games/{game_id}/magic/targets", response_model=MagicTargets)
    async def magic_targets(game_id: str, color: Color) -> MagicTargets:
        with store.locked(game_id) as match:
            board = _require(match).board
            return MagicTargets(
                upgrade=_targets(board, MagicAction.UPGRADE, get_valid_upgrade_targets(board, color)),
                downgrade=_targets(
                    board, MagicAction.DOWNGRADE, get_valid_downgrade_targets(board, color)
                ),
            )

    @app.post("/api/games/{game_id}/ai", response_model=MatchState)
    async def ai_turn(game_id: str, req: AIRequest) -> MatchState:
        player = GreedyPlayer(skill=req.skill, rng=random.Random(req.seed))
        with store.locked(game_id) as match:
            match = _require(match)
            if not match.in_progress:
                raise RuleRefusalError(Refusal.GAME_OVER, "match is over")
            verdict = player.play_turn(match)
            if verdict is not None and not verdict:
                raise RuleRefusalError.from_verdict(verdict)
            return _state(game_id, match)

    @app.post("/api/games/{game_id}/resign", response_model=MatchState)
    async def resign(game_id: str, req: ResignRequest) -> MatchState:
        with store.locked(game_id) as match:
            match = _require(match)
            if not match.in_progress:
                raise RuleRefusalError(Refusal.GAME_OVER, "match is over")
            match.resign(req.color)
            return _state(game_id, match)

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        if req.placement is None:
            board = new_game()
        else:
            board = _parse(Board.from_placement, req.placement)
        return {"nodes": perft_nodes(board, req.color, req.depth)}

    return app


def _parse(parser, text: str):
    try:
        return parser(text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _require(match: Optional[Match]) -> Match:
    if match is None:
        raise HTTPException(status_code=404, detail="game not found")
    return match


def _coord(record: MoveRecord) -> str:
    return Move(record.from_square, record.to_square).to_coord()


def _targets(board: Board, action: MagicAction, squares: List[Square]) -> Dict[str, List[PieceType]]:
    out: Dict[str, List[PieceType]] = {}
    for sq in squares:
        piece = board.piece_at(sq)
        if piece is not None:
            out[square_to_str(sq)] = allowed_types(action, piece.piece_type)
    return out


def _state(game_id: str, match: Match) -> MatchState:
    board = match.board
    history = [_coord(r) for r in match.history]
    return MatchState(
        game_id=game_id,
        placement=board.to_placement(),
        pieces=[
            PieceView(square=square_to_str(sq), type=p.piece_type, color=p.color, id=p.id)
            for sq, p in board.pieces()
        ],
        active_color=match.active_color,
        status=match.status,
        magic=MagicStateView(
            white_used=match.magic.white_used, black_used=match.magic.black_used
        ),
        in_check=match.in_check(),
        # Status is refreshed after every ply, so it already records mate and stalemate
        checkmate=match.status in (MatchStatus.WHITE_WON, MatchStatus.BLACK_WON),
        stalemate=match.status is MatchStatus.DRAW,
        legal_moves=[Move(f, t).to_coord() for f, t in match.legal_moves()],
        last_move=_coord(match.last_move) if match.last_move else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
