from __future__ import annotations

from .board import Board
from .rules import apply_move, legal_moves
from .types import Color


def perft(board: Board, color: Color, depth: int) -> int:
    """Compute perft node count for ``board`` with ``color`` to move.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1),
      with the other color to move.

    Promotions are counted once (as the default Queen), since the move
    enumeration yields squares, not promotion choices.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for from_sq, to_sq in legal_moves(board, color):
        if depth == 1:
            nodes += 1
            continue
        child = apply_move(board, from_sq, to_sq).board
        nodes += perft(child, color.opponent, depth - 1)
    return nodes
