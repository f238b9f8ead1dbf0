from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .board import Board, new_game
from .magic import MagicAction, MagicOutcome, apply_magic_move
from .rules import apply_move, is_check, is_checkmate, is_move_legal, is_stalemate, legal_moves
from .types import Color, MoveRecord, PieceType, Refusal, Square, Verdict


logger = logging.getLogger(__name__)


class MatchStatus(str, Enum):
    IN_PROGRESS = "InProgress"
    WHITE_WON = "WhiteWon"
    BLACK_WON = "BlackWon"
    DRAW = "Draw"
    WHITE_WON_RESIGN = "WhiteWon_Resign"
    BLACK_WON_RESIGN = "BlackWon_Resign"

    @classmethod
    def won_by(cls, color: Color, resign: bool = False) -> "MatchStatus":
        return cls(f"{color.value}Won" + ("_Resign" if resign else ""))


@dataclass
class MagicState:
    """Single-use Magic Move flags, one per color."""

    white_used: bool = False
    black_used: bool = False

    def used(self, color: Color) -> bool:
        return self.white_used if color is Color.WHITE else self.black_used

    def mark_used(self, color: Color) -> None:
        if color is Color.WHITE:
            self.white_used = True
        else:
            self.black_used = True


@dataclass
class Match:
    """One game in progress around the pure rules engine.

    Responsibility: turn order, Magic Move single use, the last move and the
    board before it (for soft time reversal), and the match result.
    """

    board: Board
    active_color: Color = Color.WHITE
    magic: MagicState = field(default_factory=MagicState)
    last_move: Optional[MoveRecord] = None
    previous_board: Optional[Board] = None
    history: List[MoveRecord] = field(default_factory=list)
    status: MatchStatus = MatchStatus.IN_PROGRESS

    @classmethod
    def new(cls) -> "Match":
        return cls(board=new_game())

    @classmethod
    def from_placement(cls, placement: str, active_color: Color = Color.WHITE) -> "Match":
        match = cls(board=Board.from_placement(placement), active_color=active_color)
        match._update_status(active_color.opponent)
        return match

    @property
    def in_progress(self) -> bool:
        return self.status is MatchStatus.IN_PROGRESS

    def _turn_refusal(self, color: Color) -> Optional[Tuple[Refusal, str]]:
        if not self.in_progress:
            return Refusal.GAME_OVER, "match is over"
        if color is not self.active_color:
            return Refusal.NOT_YOUR_TURN, "not your turn"
        return None

    def play(
        self,
        color: Color,
        from_sq: Square,
        to_sq: Square,
        promotion: Optional[PieceType] = None,
    ) -> Verdict:
        refusal = self._turn_refusal(color)
        if refusal is not None:
            return Verdict.refuse(*refusal)

        verdict = is_move_legal(self.board, from_sq, to_sq, color)
        if not verdict:
            logger.debug("move refused: %s", verdict.message)
            return verdict

        before = self.board
        result = apply_move(before, from_sq, to_sq, promotion)
        record = MoveRecord(result.moved.id, from_sq, to_sq, result.captured)

        self.previous_board = before
        self.board = result.board
        self.last_move = record
        self.history.append(record)
        self.active_color = color.opponent
        self._update_status(color)
        return verdict

    def cast_magic(
        self,
        color: Color,
        action: MagicAction,
        square: Square,
        new_type: PieceType,
    ) -> MagicOutcome:
        refusal = self._turn_refusal(color)
        if refusal is not None:
            return MagicOutcome.refuse(*refusal)
        if self.magic.used(color):
            return MagicOutcome.refuse(Refusal.MAGIC_ALREADY_USED, "magic move already used")

        outcome = apply_magic_move(
            self.board,
            action,
            square,
            new_type,
            color,
            self.last_move,
            self.previous_board,
        )
        if not outcome or outcome.board is None:
            logger.debug("magic move refused: %s", outcome.message)
            return outcome

        self.magic.mark_used(color)
        self.previous_board = self.board
        self.board = outcome.board
        # A magic move is a ply without a piece move
        self.last_move = None
        self.active_color = color.opponent
        logger.info(
            "magic move",
            extra={"color": color.value, "action": action.value, "new_type": new_type.value},
        )
        self._update_status(color)
        return outcome

    def resign(self, color: Color) -> None:
        if not self.in_progress:
            return
        self.status = MatchStatus.won_by(color.opponent, resign=True)
        logger.info("resignation", extra={"color": color.value})

    def _update_status(self, mover: Color) -> None:
        if is_checkmate(self.board, self.active_color):
            self.status = MatchStatus.won_by(mover)
            logger.info("checkmate", extra={"winner": mover.value})
        elif is_stalemate(self.board, self.active_color):
            self.status = MatchStatus.DRAW
            logger.info("stalemate")

    # --- State flags for protocol ---
    def in_check(self) -> bool:
        return is_check(self.board, self.active_color)

    def checkmate(self) -> bool:
        return is_checkmate(self.board, self.active_color)

    def stalemate(self) -> bool:
        return is_stalemate(self.board, self.active_color)

    def legal_moves(self) -> List[Tuple[Square, Square]]:
        if not self.in_progress:
            return []
        return list(legal_moves(self.board, self.active_color))
