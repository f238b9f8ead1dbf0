"""Magic Move validation and transformation.

A Magic Move changes the type of one piece in place: an Upgrade strengthens
one of the actor's own pieces, a Downgrade weakens one opposing piece. The
validator is stateless; single use per color is tracked by the match layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .board import Board
from .rules import is_checkmate, is_move_legal
from .types import Color, MoveRecord, PieceType, Refusal, Square, Verdict


logger = logging.getLogger(__name__)


class MagicAction(str, Enum):
    UPGRADE = "Upgrade"
    DOWNGRADE = "Downgrade"


UPGRADE_PATHS: Dict[PieceType, Tuple[PieceType, ...]] = {
    PieceType.PAWN: (PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK),
    PieceType.KNIGHT: (PieceType.BISHOP, PieceType.ROOK),
    PieceType.BISHOP: (PieceType.ROOK,),
}

DOWNGRADE_PATHS: Dict[PieceType, Tuple[PieceType, ...]] = {
    PieceType.ROOK: (PieceType.BISHOP, PieceType.KNIGHT),
    PieceType.BISHOP: (PieceType.KNIGHT, PieceType.PAWN),
    PieceType.KNIGHT: (PieceType.PAWN,),
}

UNTOUCHABLE = frozenset({PieceType.KING, PieceType.QUEEN})


@dataclass(frozen=True)
class MagicOutcome(Verdict):
    """Verdict of ``apply_magic_move``.

    Attributes:
        board (Optional[Board]): Resulting position; set only on success.
        time_reversed (bool): True when the transformed piece was sent back to
            the origin of its last move.
    """

    board: Optional[Board] = None
    time_reversed: bool = False


def get_allowed_upgrade_types(piece_type: PieceType) -> List[PieceType]:
    return list(UPGRADE_PATHS.get(piece_type, ()))


def get_allowed_downgrade_types(piece_type: PieceType) -> List[PieceType]:
    return list(DOWNGRADE_PATHS.get(piece_type, ()))


def allowed_types(action: MagicAction, piece_type: PieceType) -> List[PieceType]:
    if piece_type in UNTOUCHABLE:
        return []
    if action is MagicAction.UPGRADE:
        return get_allowed_upgrade_types(piece_type)
    return get_allowed_downgrade_types(piece_type)


def get_valid_upgrade_targets(board: Board, color: Color) -> List[Square]:
    """Squares of ``color``'s own pieces that have an upgrade path."""
    return [
        sq
        for sq, piece in board.pieces(color)
        if allowed_types(MagicAction.UPGRADE, piece.piece_type)
    ]


def get_valid_downgrade_targets(board: Board, color: Color) -> List[Square]:
    """Squares of the opponent's pieces that ``color`` could downgrade."""
    return [
        sq
        for sq, piece in board.pieces(color.opponent)
        if allowed_types(MagicAction.DOWNGRADE, piece.piece_type)
    ]


def apply_magic_move(
    board: Board,
    action: MagicAction,
    square: Square,
    new_type: PieceType,
    color: Color,
    last_move: Optional[MoveRecord] = None,
    previous_board: Optional[Board] = None,
) -> MagicOutcome:
    """Validate and perform a Magic Move for ``color``.

    Args:
        board (Board): Current position; not modified.
        action (MagicAction): Upgrade (own piece) or Downgrade (opponent piece).
        square (Square): Square of the piece to transform.
        new_type (PieceType): Requested type.
        color (Color): Side performing the Magic Move.
        last_move (Optional[MoveRecord]): The immediately preceding move.
        previous_board (Optional[Board]): Position before ``last_move``.

    Returns:
        MagicOutcome: On success carries the new board. Refusals use
            ``NoPieceAtTarget``, ``WrongOwnership``,
            ``DisallowedTransformation`` or ``ImmediateCheckmateForbidden``.

    Notes:
        Soft time reversal: when a Downgrade targets the piece that made
        ``last_move`` and it still stands on that move's destination, the
        move is replayed on ``previous_board`` with the weaker type. If the
        weaker piece could not have made it, the piece is transformed and
        placed back on the move's origin square. A capture made by that move
        stands.
    """
    piece = board.piece_at(square)
    if piece is None:
        return MagicOutcome.refuse(Refusal.NO_PIECE_AT_TARGET, "no piece on target square")

    if piece.piece_type in UNTOUCHABLE:
        return MagicOutcome.refuse(
            Refusal.DISALLOWED_TRANSFORMATION,
            f"{piece.piece_type.value} cannot be transformed",
        )

    own = piece.color is color
    if (action is MagicAction.UPGRADE) != own:
        return MagicOutcome.refuse(
            Refusal.WRONG_OWNERSHIP,
            "upgrade needs an own piece, downgrade an opponent piece",
        )

    if new_type not in allowed_types(action, piece.piece_type):
        return MagicOutcome.refuse(
            Refusal.DISALLOWED_TRANSFORMATION,
            f"cannot change {piece.piece_type.value} to {new_type.value}",
        )

    changed = piece.with_type(new_type)
    candidate = board.with_piece(square, changed)

    if is_checkmate(candidate, color.opponent):
        return MagicOutcome.refuse(
            Refusal.IMMEDIATE_CHECKMATE_FORBIDDEN,
            "magic move cannot deliver checkmate",
        )

    time_reversed = False
    if (
        action is MagicAction.DOWNGRADE
        and last_move is not None
        and previous_board is not None
        and last_move.piece_id == piece.id
        and last_move.to_square == square
    ):
        replay = previous_board.with_piece(last_move.from_square, changed)
        if not is_move_legal(replay, last_move.from_square, last_move.to_square, changed.color):
            if candidate.piece_at(last_move.from_square) is None:
                candidate = candidate.move_piece(square, last_move.from_square, changed)
                time_reversed = True
                logger.info(
                    "soft time reversal",
                    extra={"piece_id": piece.id, "new_type": new_type.value},
                )
            else:
                logger.warning(
                    "soft time reversal skipped, origin occupied",
                    extra={"piece_id": piece.id},
                )

    return MagicOutcome(board=candidate, time_reversed=time_reversed)
