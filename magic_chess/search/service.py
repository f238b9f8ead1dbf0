from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from magic_chess.engine.board import Board
from magic_chess.engine.game import Match
from magic_chess.engine.magic import (
    MagicAction,
    allowed_types,
    apply_magic_move,
    get_valid_downgrade_targets,
    get_valid_upgrade_targets,
)
from magic_chess.engine.rules import apply_move, legal_moves
from magic_chess.engine.types import Color, MoveRecord, PieceType, Square, Verdict
from magic_chess.eval import evaluate


logger = logging.getLogger(__name__)

# Skill thresholds: at or below NOVICE the AI never casts magic
NOVICE_SKILL = 800
INTERMEDIATE_SKILL = 1200
# A magic plan must beat the best regular move by more than this
MAGIC_MARGIN = 1


@dataclass(frozen=True)
class MovePlan:
    from_square: Square
    to_square: Square


@dataclass(frozen=True)
class MagicPlan:
    action: MagicAction
    square: Square
    new_type: PieceType


Decision = Union[MovePlan, MagicPlan]


class GreedyPlayer:
    """One-ply material-greedy opponent.

    ``skill`` loosely follows an Elo scale: weak players pick randomly among
    the better half of the moves, intermediate ones among the top three, and
    strong ones always take the best move. Only players above ``NOVICE_SKILL``
    consider a Magic Move.
    """

    def __init__(self, skill: int = 1500, rng: Optional[random.Random] = None) -> None:
        self.skill = skill
        self.rng = rng if rng is not None else random.Random()

    def choose(
        self,
        board: Board,
        color: Color,
        magic_available: bool = False,
        last_move: Optional[MoveRecord] = None,
        previous_board: Optional[Board] = None,
    ) -> Optional[Decision]:
        scored = self._score_moves(board, color)
        if not scored:
            return None

        if magic_available and self.skill > NOVICE_SKILL:
            magic = self._score_magic(board, color, last_move, previous_board)
            if magic and magic[0][0] > scored[0][0] + MAGIC_MARGIN:
                if self.skill > INTERMEDIATE_SKILL or self.rng.random() < 0.5:
                    return magic[0][1]

        if self.skill <= NOVICE_SKILL:
            half = max(1, len(scored) // 2)
            return scored[self.rng.randrange(half)][1]
        if self.skill <= INTERMEDIATE_SKILL:
            top = min(3, len(scored))
            return scored[self.rng.randrange(top)][1]
        return scored[0][1]

    def play_turn(self, match: Match) -> Optional[Verdict]:
        """Choose and apply a decision for the match's active color.

        Returns:
            Optional[Verdict]: The match's verdict, or None when the active
                color has no legal move or the match is over.
        """
        if not match.in_progress:
            return None
        color = match.active_color
        decision = self.choose(
            match.board,
            color,
            magic_available=not match.magic.used(color),
            last_move=match.last_move,
            previous_board=match.previous_board,
        )
        if decision is None:
            return None
        logger.info("ai decision", extra={"color": color.value, "decision": repr(decision)})
        if isinstance(decision, MagicPlan):
            return match.cast_magic(color, decision.action, decision.square, decision.new_type)
        return match.play(color, decision.from_square, decision.to_square)

    def _score_moves(self, board: Board, color: Color) -> List[Tuple[int, Decision]]:
        scored: List[Tuple[int, Decision]] = []
        for from_sq, to_sq in legal_moves(board, color):
            after = apply_move(board, from_sq, to_sq).board
            scored.append((evaluate(after, color), MovePlan(from_sq, to_sq)))
        # Stable sort keeps board order among equal scores
        scored.sort(key=lambda item: item[0], reverse=True)
        return scored

    def _score_magic(
        self,
        board: Board,
        color: Color,
        last_move: Optional[MoveRecord],
        previous_board: Optional[Board],
    ) -> List[Tuple[int, Decision]]:
        scored: List[Tuple[int, Decision]] = []
        candidates = [(MagicAction.UPGRADE, sq) for sq in get_valid_upgrade_targets(board, color)]
        candidates += [
            (MagicAction.DOWNGRADE, sq) for sq in get_valid_downgrade_targets(board, color)
        ]
        for action, sq in candidates:
            piece = board.piece_at(sq)
            if piece is None:
                continue
            for new_type in allowed_types(action, piece.piece_type):
                outcome = apply_magic_move(
                    board, action, sq, new_type, color, last_move, previous_board
                )
                if outcome and outcome.board is not None:
                    scored.append(
                        (evaluate(outcome.board, color), MagicPlan(action, sq, new_type))
                    )
        scored.sort(key=lambda item: item[0], reverse=True)
        return scored
