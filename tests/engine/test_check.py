from __future__ import annotations

import pytest

from magic_chess.engine.board import Board, new_game
from magic_chess.engine.move import str_to_square
from magic_chess.engine.rules import (
    apply_move,
    is_check,
    is_checkmate,
    is_move_legal,
    is_square_attacked,
    is_stalemate,
)
from magic_chess.engine.types import Color


def _play(board: Board, moves: list[str]) -> Board:
    color = Color.WHITE
    for mv in moves:
        frm, to = str_to_square(mv[:2]), str_to_square(mv[2:])
        verdict = is_move_legal(board, frm, to, color)
        assert verdict, f"{mv}: {verdict.message}"
        board = apply_move(board, frm, to).board
        color = color.opponent
    return board


def test_start_position_has_no_check(start: Board) -> None:
    for color in Color:
        assert not is_check(start, color)
        assert not is_checkmate(start, color)
        assert not is_stalemate(start, color)


def test_queen_gives_check_on_open_file() -> None:
    board = Board.from_placement("4k3/8/8/8/4Q3/8/8/4K3")
    assert is_check(board, Color.BLACK)
    assert not is_check(board, Color.WHITE)
    assert not is_checkmate(board, Color.BLACK)


def test_blocked_line_is_not_check() -> None:
    board = Board.from_placement("4k3/4p3/8/8/4Q3/8/8/4K3")
    assert not is_check(board, Color.BLACK)


def test_pawn_attacks_diagonally_forward_only() -> None:
    # Black king on d3 is attacked by the white pawn on e2
    board = Board.from_placement("8/8/8/8/8/3k4/4P3/4K3")
    assert is_check(board, Color.BLACK)
    # A king straight in front of a pawn is not attacked by it
    board = Board.from_placement("8/8/8/8/8/4k3/4P3/K7")
    assert not is_check(board, Color.BLACK)


def test_missing_king_is_never_in_check() -> None:
    board = Board.from_placement("8/8/8/8/4Q3/8/8/8")
    assert not is_check(board, Color.BLACK)
    assert not is_checkmate(board, Color.BLACK)


def test_square_attacked_by_knight() -> None:
    assert is_square_attacked(
        Board.from_placement("4k3/8/8/8/8/5P2/8/4K1N1"), str_to_square("f3"), Color.WHITE
    ) is False
    board = Board.from_placement("4k3/8/8/8/8/5p2/8/4K1N1")
    assert is_square_attacked(board, str_to_square("f3"), Color.WHITE)


def test_scholars_mate() -> None:
    board = _play(
        new_game(),
        ["e2e4", "e7e5", "d1h5", "b8c6", "f1c4", "g8f6", "h5f7"],
    )
    assert is_check(board, Color.BLACK)
    assert is_checkmate(board, Color.BLACK)
    assert not is_stalemate(board, Color.BLACK)


def test_check_that_can_be_escaped_is_not_mate() -> None:
    board = _play(new_game(), ["e2e4", "f7f6", "d1h5"])
    assert is_check(board, Color.BLACK)
    assert not is_checkmate(board, Color.BLACK)


def test_back_rank_mate() -> None:
    board = Board.from_placement("R6k/6pp/8/8/8/8/8/K7")
    assert is_checkmate(board, Color.BLACK)


def test_stalemate() -> None:
    board = Board.from_placement("7k/5Q2/6K1/8/8/8/8/8")
    assert is_stalemate(board, Color.BLACK)
    assert not is_check(board, Color.BLACK)
    assert not is_checkmate(board, Color.BLACK)
    # White still has moves
    assert not is_stalemate(board, Color.WHITE)


@pytest.mark.parametrize(
    "placement",
    [
        "7k/5Q2/6K1/8/8/8/8/8",
        "7k/6Q1/6K1/8/8/8/8/8",
        "R6k/6pp/8/8/8/8/8/K7",
        "4k3/8/8/8/4Q3/8/8/4K3",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR",
        "k7/8/1Q6/8/8/8/8/7K",
        "8/8/8/8/8/8/8/8",
    ],
)
def test_mate_implies_check_and_stalemate_excludes_it(placement: str) -> None:
    board = Board.from_placement(placement)
    for color in Color:
        if is_checkmate(board, color):
            assert is_check(board, color)
        if is_stalemate(board, color):
            assert not is_check(board, color)
        assert not (is_checkmate(board, color) and is_stalemate(board, color))
