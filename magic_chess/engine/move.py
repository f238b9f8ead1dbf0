from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .types import PieceType, Square


PROMOTION_PIECES = {
    "q": PieceType.QUEEN,
    "r": PieceType.ROOK,
    "b": PieceType.BISHOP,
    "n": PieceType.KNIGHT,
}


@dataclass(frozen=True)
class Move:
    """Coordinate move as exchanged with hosts.

    Attributes:
        from_square (Square): Origin square.
        to_square (Square): Destination square.
        promotion (Optional[PieceType]): Requested promotion piece, if any.
    """

    from_square: Square
    to_square: Square
    promotion: Optional[PieceType] = None

    def to_coord(self) -> str:
        """Serialize the move into coordinate form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8n"``.
        """
        promo = self.promotion.symbol.lower() if self.promotion else ""
        return square_to_str(self.from_square) + square_to_str(self.to_square) + promo


def parse_coord(text: str) -> Move:
    """Parse a coordinate move string.

    Args:
        text (str): Move such as ``"e2e4"`` or ``"a7a8r"``.

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(text) not in (4, 5):
        raise ValueError(f"invalid move length: {text!r}")
    from_square = str_to_square(text[0:2])
    to_square = str_to_square(text[2:4])
    promo: Optional[PieceType] = None
    if len(text) == 5:
        key = text[4].lower()
        if key not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {key!r}")
        promo = PROMOTION_PIECES[key]
    return Move(from_square, to_square, promo)


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a board square.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: ``Square(x=5, y=4)`` for ``"e4"``.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    return Square(ord(s[0]) - ord("a") + 1, int(s[1]))


def square_to_str(square: Square) -> str:
    """Convert a board square into algebraic notation.

    Raises:
        ValueError: If ``square`` is off the board.
    """
    if not square.on_board:
        raise ValueError(f"invalid square: {square!r}")
    return chr(ord("a") + square.x - 1) + str(square.y)
