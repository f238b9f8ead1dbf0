import os
import sys

import pytest


# Ensure the repository root is on sys.path for `from magic_chess...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from magic_chess.engine.board import Board, new_game  # noqa: E402


@pytest.fixture
def start() -> Board:
    return new_game()
