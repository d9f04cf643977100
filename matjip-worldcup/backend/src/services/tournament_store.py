from __future__ import annotations

import time
from typing import Dict, Optional

from services.bracket import BracketEngine


class TournamentStore:
    """Simple in-memory map of session id to its running bracket."""

    def __init__(self, ttl_sec: int = 3600) -> None:
        self._engines: Dict[str, BracketEngine] = {}
        self._last_access: Dict[str, float] = {}
        self.ttl_sec = ttl_sec

    def get(self, session_id: str) -> Optional[BracketEngine]:
        self._cleanup()
        if not session_id:
            return None
        engine = self._engines.get(session_id)
        if engine is not None:
            self._last_access[session_id] = time.time()
        return engine

    def put(self, session_id: str, engine: BracketEngine) -> None:
        """Store ``engine`` for the session, replacing any previous bracket."""
        if not session_id:
            return
        self._cleanup()
        self._engines[session_id] = engine
        self._last_access[session_id] = time.time()

    def reset(self, session_id: str) -> bool:
        if not session_id:
            return False
        self._last_access.pop(session_id, None)
        return self._engines.pop(session_id, None) is not None

    def _cleanup(self) -> None:
        """Remove expired sessions."""
        now = time.time()
        expired = [
            sid for sid, last in self._last_access.items()
            if now - last > self.ttl_sec
        ]
        for sid in expired:
            del self._engines[sid]
            del self._last_access[sid]
