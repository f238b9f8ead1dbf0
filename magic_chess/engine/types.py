from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Color(str, Enum):
    WHITE = "White"
    BLACK = "Black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PieceType(str, Enum):
    PAWN = "Pawn"
    KNIGHT = "Knight"
    BISHOP = "Bishop"
    ROOK = "Rook"
    QUEEN = "Queen"
    KING = "King"

    @property
    def symbol(self) -> str:
        """Upper-case one-letter symbol used in placement strings."""
        return _SYMBOLS[self]

    @classmethod
    def from_symbol(cls, ch: str) -> "PieceType":
        """Resolve a one-letter symbol (either case) to a piece type.

        Raises:
            ValueError: If ``ch`` is not one of ``PNBRQK``.
        """
        for pt, sym in _SYMBOLS.items():
            if sym == ch.upper():
                return pt
        raise ValueError(f"invalid piece symbol: {ch!r}")


_SYMBOLS = {
    PieceType.PAWN: "P",
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}


@dataclass(frozen=True)
class Square:
    """Board coordinate.

    Attributes:
        x (int): Column, 1..8 (a..h).
        y (int): Row, 1..8. Row 1 is White's back rank.
    """

    x: int
    y: int

    @property
    def on_board(self) -> bool:
        return 1 <= self.x <= 8 and 1 <= self.y <= 8


@dataclass(frozen=True)
class Piece:
    """A piece value. ``id`` is stable for the piece's lifetime."""

    piece_type: PieceType
    color: Color
    id: str

    def with_type(self, piece_type: PieceType) -> "Piece":
        return Piece(piece_type, self.color, self.id)


@dataclass(frozen=True)
class MoveRecord:
    """The most recent piece move, kept by the match layer."""

    piece_id: str
    from_square: Square
    to_square: Square
    captured: Optional[Piece] = None


class Refusal(str, Enum):
    # board / move engine
    INVALID_SQUARE = "InvalidSquare"
    WRONG_COLOR = "WrongColor"
    PATH_BLOCKED = "PathBlocked"
    PATTERN_VIOLATION = "PatternViolation"
    SELF_CHECK = "SelfCheck"
    # magic move validator
    WRONG_OWNERSHIP = "WrongOwnership"
    NO_PIECE_AT_TARGET = "NoPieceAtTarget"
    DISALLOWED_TRANSFORMATION = "DisallowedTransformation"
    IMMEDIATE_CHECKMATE_FORBIDDEN = "ImmediateCheckmateForbidden"
    # match layer
    NOT_YOUR_TURN = "NotYourTurn"
    MAGIC_ALREADY_USED = "MagicAlreadyUsed"
    GAME_OVER = "GameOver"


@dataclass(frozen=True)
class Verdict:
    """Outcome of a rule check: accepted, or refused with a reason.

    A refused request is not an error; callers branch on ``ok`` (or on the
    verdict's truthiness) and present ``reason``/``message`` as they see fit.
    """

    reason: Optional[Refusal] = None
    message: str = ""

    @classmethod
    def accept(cls) -> "Verdict":
        return cls()

    @classmethod
    def refuse(cls, reason: Refusal, message: str = "") -> "Verdict":
        return cls(reason=reason, message=message or reason.value)

    @property
    def ok(self) -> bool:
        return self.reason is None

    def __bool__(self) -> bool:
        return self.ok
