#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import time
import os
import sys

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `magic_chess/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from magic_chess.engine.board import Board, STARTPOS_PLACEMENT
from magic_chess.engine.perft import perft
from magic_chess.engine.types import Color


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a piece placement and depth")
    parser.add_argument(
        "--placement",
        type=str,
        default=STARTPOS_PLACEMENT,
        help="FEN piece placement (default: start position)",
    )
    parser.add_argument(
        "--color",
        type=Color,
        default=Color.WHITE,
        choices=list(Color),
        help="Side to move: White or Black (default: White)",
    )
    parser.add_argument("--depth", type=int, default=2, help="Perft depth (default: 2)")
    args = parser.parse_args()

    board = Board.from_placement(args.placement)
    start = time.perf_counter()
    nodes = perft(board, args.color, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
