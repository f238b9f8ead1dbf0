from __future__ import annotations

from magic_chess.engine.game import Match, MatchStatus
from magic_chess.engine.types import Color
from magic_chess.search.service import GreedyPlayer


def test_stalemate_root_returns_draw_and_no_move() -> None:
    # Black to move is stalemated (not in check, no legal moves)
    # Position: Kg6, Qf7 vs kh8
    match = Match.from_placement("7k/5Q2/6K1/8/8/8/8/8", Color.BLACK)
    assert match.stalemate() is True
    assert match.status is MatchStatus.DRAW
    assert GreedyPlayer(skill=2000).choose(match.board, Color.BLACK) is None
    assert GreedyPlayer(skill=2000).play_turn(match) is None


def test_checkmate_root_reports_mate() -> None:
    # Black to move is checkmated (in check, no legal moves)
    # Position: Kh8 vs Qg7, Kg6
    match = Match.from_placement("7k/6Q1/6K1/8/8/8/8/8", Color.BLACK)
    assert match.checkmate() is True
    assert match.status is MatchStatus.WHITE_WON
    assert match.legal_moves() == []
    # Magic cannot rescue a mated side either
    assert GreedyPlayer(skill=2000).choose(match.board, Color.BLACK, magic_available=True) is None
