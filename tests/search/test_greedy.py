from __future__ import annotations

import random

from magic_chess.engine.board import Board
from magic_chess.engine.game import Match, MatchStatus
from magic_chess.engine.magic import MagicAction
from magic_chess.engine.move import str_to_square
from magic_chess.engine.rules import legal_moves
from magic_chess.engine.types import Color, PieceType
from magic_chess.search.service import GreedyPlayer, MagicPlan, MovePlan


def test_takes_hanging_queen() -> None:
    board = Board.from_placement("4k3/8/8/3q4/8/8/8/3RK3")
    decision = GreedyPlayer(skill=2000).choose(board, Color.WHITE)
    assert decision == MovePlan(str_to_square("d1"), str_to_square("d5"))


def test_no_decision_without_legal_moves() -> None:
    board = Board.from_placement("7k/5Q2/6K1/8/8/8/8/8")
    assert GreedyPlayer(skill=2000).choose(board, Color.BLACK, magic_available=True) is None


def test_strong_player_casts_profitable_magic() -> None:
    board = Board.from_placement("4k3/8/8/8/8/8/P7/4K3")
    decision = GreedyPlayer(skill=2000).choose(board, Color.WHITE, magic_available=True)
    assert decision == MagicPlan(MagicAction.UPGRADE, str_to_square("a2"), PieceType.ROOK)


def test_magic_not_considered_when_spent() -> None:
    board = Board.from_placement("4k3/8/8/8/8/8/P7/4K3")
    decision = GreedyPlayer(skill=2000).choose(board, Color.WHITE, magic_available=False)
    assert isinstance(decision, MovePlan)


def test_novice_never_casts_magic_and_plays_legal_moves(start: Board) -> None:
    legal = set(legal_moves(start, Color.WHITE))
    for seed in range(10):
        player = GreedyPlayer(skill=600, rng=random.Random(seed))
        decision = player.choose(start, Color.WHITE, magic_available=True)
        assert isinstance(decision, MovePlan)
        assert (decision.from_square, decision.to_square) in legal


def test_seeded_choices_are_reproducible(start: Board) -> None:
    a = GreedyPlayer(skill=1000, rng=random.Random(7)).choose(start, Color.WHITE)
    b = GreedyPlayer(skill=1000, rng=random.Random(7)).choose(start, Color.WHITE)
    assert a == b


def test_play_turn_advances_the_match() -> None:
    match = Match.new()
    player = GreedyPlayer(skill=2000)
    verdict = player.play_turn(match)
    assert verdict is not None and verdict.ok
    assert match.active_color is Color.BLACK
    # Upgrading a pawn to a rook beats every quiet opening move
    assert match.magic.white_used

    verdict = player.play_turn(match)
    assert verdict is not None and verdict.ok
    assert match.active_color is Color.WHITE


def test_play_turn_on_finished_match() -> None:
    match = Match.new()
    match.resign(Color.WHITE)
    assert match.status is MatchStatus.BLACK_WON_RESIGN
    assert GreedyPlayer().play_turn(match) is None
