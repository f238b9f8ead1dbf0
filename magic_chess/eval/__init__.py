"""Material evaluation for the greedy opponent.

Pure, deterministic, and side-effect free.
"""

from __future__ import annotations

from typing import Dict, Final

from magic_chess.engine.board import Board
from magic_chess.engine.types import Color, PieceType


# Material values in pawns; the king is weighted heavily so losing it dominates
PIECE_VALUES: Final[Dict[PieceType, int]] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 100,
}


def material(board: Board, color: Color) -> int:
    """Sum of piece values for ``color``."""
    return sum(PIECE_VALUES[p.piece_type] for _, p in board.pieces(color))


def evaluate(board: Board, color: Color) -> int:
    """Material balance from ``color``'s point of view (higher is better)."""
    return material(board, color) - material(board, color.opponent)
