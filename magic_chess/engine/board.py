from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .types import Color, Piece, PieceType, Square


STARTPOS_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)

Cells = Tuple[Optional[Piece], ...]


def _index(square: Square) -> int:
    return (square.y - 1) * 8 + (square.x - 1)


def _square(idx: int) -> Square:
    return Square(idx % 8 + 1, idx // 8 + 1)


def _id_counter() -> Iterator[str]:
    return (str(n) for n in itertools.count(1))


@dataclass(frozen=True)
class Board:
    """Immutable 8x8 board snapshot.

    Notes:
    - ``cells`` holds 64 entries, index ``(y - 1) * 8 + (x - 1)``.
    - Every transition returns a new Board; a Board never changes after
      construction, so snapshots can be shared between "current" and
      "previous" without aliasing hazards.
    """

    cells: Cells

    def __post_init__(self) -> None:
        if len(self.cells) != 64:
            raise ValueError("board must have 64 cells")

    @classmethod
    def empty(cls) -> "Board":
        return cls(cells=(None,) * 64)

    @classmethod
    def startpos(cls, ids: Optional[Iterator[str]] = None) -> "Board":
        """Create a board with the standard starting layout.

        Args:
            ids (Optional[Iterator[str]]): Source of piece ids. Defaults to a
                fresh counter yielding ``"1"``, ``"2"``, ... for this board only.

        Returns:
            Board: 16 pieces per color, kings on column 5.
        """
        ids = ids if ids is not None else _id_counter()
        cells: List[Optional[Piece]] = [None] * 64
        for x in range(1, 9):
            cells[_index(Square(x, 2))] = Piece(PieceType.PAWN, Color.WHITE, next(ids))
            cells[_index(Square(x, 7))] = Piece(PieceType.PAWN, Color.BLACK, next(ids))
        for color, row in ((Color.WHITE, 1), (Color.BLACK, 8)):
            for x, pt in enumerate(BACK_RANK, start=1):
                cells[_index(Square(x, row))] = Piece(pt, color, next(ids))
        return cls(cells=tuple(cells))

    @classmethod
    def from_placement(cls, placement: str, ids: Optional[Iterator[str]] = None) -> "Board":
        """Create a board from the piece-placement field of a FEN string.

        Args:
            placement (str): Ranks 8..1 separated by ``/``; digits are runs of
                empty squares, upper case is White. A full FEN is accepted and
                everything after the first field is ignored.
            ids (Optional[Iterator[str]]): Source of piece ids. Defaults to a
                fresh counter, assigned in reading order.

        Returns:
            Board: Board holding the described pieces.

        Raises:
            ValueError: If ``placement`` is empty, does not have 8 ranks, or a
                rank has an invalid symbol or does not cover 8 squares.
        """
        if not isinstance(placement, str) or not placement.strip():
            raise ValueError("placement must be a non-empty string")
        ids = ids if ids is not None else _id_counter()
        ranks = placement.split()[0].split("/")
        if len(ranks) != 8:
            raise ValueError("placement must have 8 ranks")
        cells: List[Optional[Piece]] = [None] * 64
        for rank_idx, rank in enumerate(ranks):
            y = 8 - rank_idx
            x = 1
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in placement rank")
                    x += n
                    continue
                if x > 8:
                    raise ValueError("too many squares in placement rank")
                pt = PieceType.from_symbol(ch)
                color = Color.WHITE if ch.isupper() else Color.BLACK
                cells[_index(Square(x, y))] = Piece(pt, color, next(ids))
                x += 1
            if x != 9:
                raise ValueError("rank does not sum to 8 squares in placement")
        return cls(cells=tuple(cells))

    def to_placement(self) -> str:
        """Serialize the board into a FEN piece-placement field."""
        ranks: List[str] = []
        for y in range(8, 0, -1):
            run = 0
            row = []
            for x in range(1, 9):
                piece = self.cells[_index(Square(x, y))]
                if piece is None:
                    run += 1
                    continue
                if run > 0:
                    row.append(str(run))
                    run = 0
                sym = piece.piece_type.symbol
                row.append(sym if piece.color is Color.WHITE else sym.lower())
            if run > 0:
                row.append(str(run))
            ranks.append("".join(row))
        return "/".join(ranks)

    # --- Access ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        """Return the piece on ``square``, or None when empty or off the board."""
        if not square.on_board:
            return None
        return self.cells[_index(square)]

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield ``(square, piece)`` pairs in row-major order (a1, b1, ... h8)."""
        for idx, piece in enumerate(self.cells):
            if piece is not None and (color is None or piece.color is color):
                yield _square(idx), piece

    def find_piece(self, piece_id: str) -> Optional[Square]:
        for square, piece in self.pieces():
            if piece.id == piece_id:
                return square
        return None

    def find_king(self, color: Color) -> Optional[Square]:
        for square, piece in self.pieces(color):
            if piece.piece_type is PieceType.KING:
                return square
        return None

    # --- Derived snapshots ---
    def with_piece(self, square: Square, piece: Optional[Piece]) -> "Board":
        """Return a new board with ``square`` set to ``piece`` (or cleared)."""
        cells = list(self.cells)
        cells[_index(square)] = piece
        return Board(cells=tuple(cells))

    def without_piece(self, square: Square) -> "Board":
        return self.with_piece(square, None)

    def move_piece(self, from_square: Square, to_square: Square, piece: Piece) -> "Board":
        """Return a new board with ``from_square`` cleared and ``piece`` on ``to_square``.

        Whatever stood on ``to_square`` is dropped.
        """
        cells = list(self.cells)
        cells[_index(from_square)] = None
        cells[_index(to_square)] = piece
        return Board(cells=tuple(cells))

    def clone(self) -> "Board":
        return Board(cells=tuple(self.cells))


def new_game(ids: Optional[Iterator[str]] = None) -> Board:
    """Return the standard starting position with freshly numbered pieces."""
    return Board.startpos(ids)


def clone_board(board: Board) -> Board:
    """Return a structurally independent copy of ``board``."""
    return board.clone()
