from __future__ import annotations

from magic_chess.engine.board import Board
from magic_chess.engine.types import Color, PieceType
from magic_chess.eval import PIECE_VALUES, evaluate, material


def test_start_position_is_balanced(start: Board) -> None:
    assert material(start, Color.WHITE) == material(start, Color.BLACK) == 139
    assert evaluate(start, Color.WHITE) == 0
    assert evaluate(start, Color.BLACK) == 0


def test_evaluation_is_antisymmetric() -> None:
    board = Board.from_placement("4k3/8/8/3q4/8/8/8/3RK3")
    assert evaluate(board, Color.WHITE) == -4
    assert evaluate(board, Color.BLACK) == 4


def test_king_outweighs_all_other_material() -> None:
    others = sum(v for pt, v in PIECE_VALUES.items() if pt is not PieceType.KING)
    assert PIECE_VALUES[PieceType.KING] > others
