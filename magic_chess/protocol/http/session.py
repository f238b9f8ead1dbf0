from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from ...engine.game import Match


class InMemoryMatchStore:
    """Thread-safe in-memory match store.

    Responsibilities:
    - Create new matches with unique `game_id`s
    - Retrieve existing matches by `game_id`
    - Serialize state changes per match (`locked`)
    - Delete matches
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._matches: Dict[str, Match] = {}
        self._match_locks: Dict[str, threading.Lock] = {}

    def create(self, match: Optional[Match] = None) -> str:
        """Store a match (a fresh one by default) and return its `game_id`."""
        gid = str(uuid.uuid4())
        if match is None:
            match = Match.new()
        with self._lock:
            self._matches[gid] = match
            self._match_locks[gid] = threading.Lock()
        return gid

    def get(self, game_id: str) -> Optional[Match]:
        with self._lock:
            return self._matches.get(game_id)

    @contextmanager
    def locked(self, game_id: str) -> Iterator[Optional[Match]]:
        """Hold the match's own lock while the caller mutates it.

        Yields None for unknown ids. Unrelated matches are never blocked.
        """
        with self._lock:
            match = self._matches.get(game_id)
            match_lock = self._match_locks.get(game_id)
        if match is None or match_lock is None:
            yield None
            return
        with match_lock:
            yield match

    def delete(self, game_id: str) -> None:
        with self._lock:
            self._matches.pop(game_id, None)
            self._match_locks.pop(game_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)
