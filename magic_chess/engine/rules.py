"""Movement rules, check detection and move application.

All functions are pure: they read the boards they are given and return new
values. Illegal requests come back as refused ``Verdict``s, never as
exceptions.
"""

from __future__ import annotations

from typing import Iterator, NamedTuple, Optional, Tuple

from .board import Board
from .types import Color, Piece, PieceType, Refusal, Square, Verdict


PROMOTION_TYPES = frozenset(
    {PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN}
)

ALL_SQUARES = tuple(Square(x, y) for y in range(1, 9) for x in range(1, 9))


class AppliedMove(NamedTuple):
    board: Board
    moved: Piece
    captured: Optional[Piece]


def pawn_direction(color: Color) -> int:
    return 1 if color is Color.WHITE else -1


def pawn_start_row(color: Color) -> int:
    return 2 if color is Color.WHITE else 7


def promotion_row(color: Color) -> int:
    return 8 if color is Color.WHITE else 1


def _line_of_sight(board: Board, from_sq: Square, to_sq: Square) -> Verdict:
    dx = to_sq.x - from_sq.x
    dy = to_sq.y - from_sq.y
    step_x = (dx > 0) - (dx < 0)
    step_y = (dy > 0) - (dy < 0)
    distance = max(abs(dx), abs(dy))
    for i in range(1, distance):
        if board.piece_at(Square(from_sq.x + i * step_x, from_sq.y + i * step_y)) is not None:
            return Verdict.refuse(Refusal.PATH_BLOCKED, "path is blocked")
    return Verdict.accept()


def _pawn_move(board: Board, from_sq: Square, to_sq: Square, piece: Piece) -> Verdict:
    dx = to_sq.x - from_sq.x
    dy = to_sq.y - from_sq.y
    direction = pawn_direction(piece.color)
    target = board.piece_at(to_sq)

    if dx == 0 and dy == direction:
        if target is None:
            return Verdict.accept()
        return Verdict.refuse(Refusal.PATH_BLOCKED, "pawn push is blocked")

    if dx == 0 and dy == 2 * direction and from_sq.y == pawn_start_row(piece.color):
        between = Square(from_sq.x, from_sq.y + direction)
        if board.piece_at(between) is None and target is None:
            return Verdict.accept()
        return Verdict.refuse(Refusal.PATH_BLOCKED, "pawn push is blocked")

    # Diagonal steps only as captures; friendly targets were refused earlier
    if abs(dx) == 1 and dy == direction and target is not None:
        return Verdict.accept()

    return Verdict.refuse(Refusal.PATTERN_VIOLATION, "invalid pawn move")


def pseudo_legal(board: Board, from_sq: Square, to_sq: Square) -> Verdict:
    """Check the moving piece's movement pattern, ignoring self-check.

    Used both for move legality and for attack detection.
    """
    piece = board.piece_at(from_sq)
    if piece is None:
        return Verdict.refuse(Refusal.INVALID_SQUARE, "no piece on origin square")

    target = board.piece_at(to_sq)
    if target is not None and target.color is piece.color:
        return Verdict.refuse(Refusal.PATTERN_VIOLATION, "cannot capture friendly piece")

    dx = to_sq.x - from_sq.x
    dy = to_sq.y - from_sq.y
    pt = piece.piece_type
    violation = Verdict.refuse(
        Refusal.PATTERN_VIOLATION, f"invalid move for {pt.value.lower()}"
    )

    if pt is PieceType.PAWN:
        return _pawn_move(board, from_sq, to_sq, piece)
    if pt is PieceType.KNIGHT:
        if {abs(dx), abs(dy)} == {1, 2}:
            return Verdict.accept()
        return violation
    if pt is PieceType.BISHOP:
        if abs(dx) == abs(dy):
            return _line_of_sight(board, from_sq, to_sq)
        return violation
    if pt is PieceType.ROOK:
        if dx == 0 or dy == 0:
            return _line_of_sight(board, from_sq, to_sq)
        return violation
    if pt is PieceType.QUEEN:
        if dx == 0 or dy == 0 or abs(dx) == abs(dy):
            return _line_of_sight(board, from_sq, to_sq)
        return violation
    # King: one step in any direction, no castling
    if abs(dx) <= 1 and abs(dy) <= 1:
        return Verdict.accept()
    return violation


def is_square_attacked(board: Board, square: Square, by_color: Color) -> bool:
    """Return True if any ``by_color`` piece has a pseudo-legal move onto ``square``."""
    return any(pseudo_legal(board, sq, square) for sq, _ in board.pieces(by_color))


def is_check(board: Board, color: Color) -> bool:
    """Return True if ``color``'s king is attacked. A missing king is never in check."""
    king_sq = board.find_king(color)
    if king_sq is None:
        return False
    return is_square_attacked(board, king_sq, color.opponent)


def is_move_legal(board: Board, from_sq: Square, to_sq: Square, color: Color) -> Verdict:
    """Check whether ``color`` may move the piece on ``from_sq`` to ``to_sq``.

    Args:
        board (Board): Position to evaluate; not modified.
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        color (Color): Side attempting the move.

    Returns:
        Verdict: Accepted, or refused with one of ``InvalidSquare``,
            ``WrongColor``, ``PathBlocked``, ``PatternViolation`` or
            ``SelfCheck``.
    """
    if not from_sq.on_board or not to_sq.on_board:
        return Verdict.refuse(Refusal.INVALID_SQUARE, "square is off the board")

    piece = board.piece_at(from_sq)
    if piece is None:
        return Verdict.refuse(Refusal.INVALID_SQUARE, "no piece on origin square")
    if piece.color is not color:
        return Verdict.refuse(Refusal.WRONG_COLOR, "cannot move opponent's piece")

    verdict = pseudo_legal(board, from_sq, to_sq)
    if not verdict:
        return verdict

    after = board.move_piece(from_sq, to_sq, piece)
    if is_check(after, color):
        return Verdict.refuse(Refusal.SELF_CHECK, "move would leave own king in check")

    return Verdict.accept()


def legal_moves(board: Board, color: Color) -> Iterator[Tuple[Square, Square]]:
    """Yield every legal ``(from, to)`` pair for ``color``.

    Exhaustive scan: each own piece against all 64 destinations.
    """
    for from_sq, _ in board.pieces(color):
        for to_sq in ALL_SQUARES:
            if is_move_legal(board, from_sq, to_sq, color):
                yield from_sq, to_sq


def has_legal_move(board: Board, color: Color) -> bool:
    return any(True for _ in legal_moves(board, color))


def is_checkmate(board: Board, color: Color) -> bool:
    return is_check(board, color) and not has_legal_move(board, color)


def is_stalemate(board: Board, color: Color) -> bool:
    return not is_check(board, color) and not has_legal_move(board, color)


def apply_move(
    board: Board,
    from_sq: Square,
    to_sq: Square,
    promotion: Optional[PieceType] = None,
) -> AppliedMove:
    """Return the position after moving the piece on ``from_sq`` to ``to_sq``.

    Legality is not re-checked; call ``is_move_legal`` first. A pawn reaching
    the far rank becomes ``promotion`` (default Queen) and keeps its id.

    Raises:
        ValueError: If ``from_sq`` is empty or ``promotion`` is not a
            promotable piece type.
    """
    moved = board.piece_at(from_sq)
    if moved is None:
        raise ValueError(f"no piece on {from_sq!r}")
    if promotion is not None and promotion not in PROMOTION_TYPES:
        raise ValueError(f"invalid promotion piece: {promotion.value}")

    captured = board.piece_at(to_sq)
    if moved.piece_type is PieceType.PAWN and to_sq.y == promotion_row(moved.color):
        moved = moved.with_type(promotion or PieceType.QUEEN)

    return AppliedMove(board.move_piece(from_sq, to_sq, moved), moved, captured)
