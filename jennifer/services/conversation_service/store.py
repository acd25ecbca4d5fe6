"""In-memory conversation store.

Maps an opaque, client-supplied session key to an ordered sequence of
turns bounded at max_turns. When the bound is exceeded the oldest turns
are dropped first, so the most recent context always survives.

Synchronisation: a registry lock guards the key -> session map and each
session carries its own lock, so appends to one session are serialised
while different sessions proceed independently.
"""
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Optional, Tuple

from jennifer.shared.models import Turn

logger = logging.getLogger(__name__)

MAX_TURNS = 50


class InvalidSessionKeyError(ValueError):
    """Raised when an empty session key reaches the store."""


@dataclass
class _Session:
    turns: Deque[Turn]
    last_active: float
    lock: threading.Lock = field(default_factory=threading.Lock)


class ConversationStore:
    """Keyed, thread-safe, size-bounded conversation history.

    Keys are compared by exact value: no normalisation, no case folding.
    Sessions are created lazily on first append and live until clear()
    or, when a TTL is configured, until evict_stale() finds them idle.
    """

    def __init__(
        self,
        max_turns: int = MAX_TURNS,
        session_ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize store.

        Args:
            max_turns: Maximum turns retained per session
            session_ttl_seconds: Idle time after which evict_stale() drops
                a session; None keeps sessions for the process lifetime
            clock: Monotonic time source
        """
        if max_turns < 1:
            raise ValueError(f"max_turns must be positive, got {max_turns}")

        self.max_turns = max_turns
        self.session_ttl_seconds = session_ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, _Session] = {}
        self._registry_lock = threading.Lock()

        logger.info(
            "CONVERSATION_STORE_INITIALIZED",
            extra={
                "max_turns": max_turns,
                "session_ttl_seconds": session_ttl_seconds,
            }
        )

    def append(self, session_key: str, turn: Turn) -> None:
        """Append a turn, creating the session if needed, then trim.

        Trimming happens inside the same critical section, so a session
        is never observed above max_turns.
        """
        _check_key(session_key)
        with self._registry_lock:
            session = self._sessions.get(session_key)
            if session is None:
                session = _Session(
                    turns=deque(maxlen=self.max_turns),
                    last_active=self._clock(),
                )
                self._sessions[session_key] = session
            # clear() must not run between lookup and write.
            session.lock.acquire()
        try:
            session.turns.append(turn)
            session.last_active = self._clock()
        finally:
            session.lock.release()

    def get_history(self, session_key: str) -> Tuple[Turn, ...]:
        """Return the session's turns, oldest first.

        Unknown keys yield an empty tuple. The result is a snapshot; the
        caller cannot modify stored history through it.
        """
        return self._snapshot(session_key)

    def recent(self, session_key: str, count: int) -> Tuple[Turn, ...]:
        """Return the last `count` turns, oldest first."""
        history = self._snapshot(session_key)
        return history[-count:] if count > 0 else ()

    def clear(self, session_key: str) -> None:
        """Remove a session. Clearing an unknown key is a no-op."""
        _check_key(session_key)
        with self._registry_lock:
            removed = self._sessions.pop(session_key, None)
        if removed is not None:
            logger.debug("CONVERSATION_CLEARED", extra={"turns_dropped": len(removed.turns)})

    def session_count(self) -> int:
        with self._registry_lock:
            return len(self._sessions)

    def evict_stale(self) -> int:
        """Drop sessions idle longer than session_ttl_seconds.

        Returns:
            Number of sessions removed (always 0 when no TTL is set)
        """
        if self.session_ttl_seconds is None:
            return 0

        cutoff = self._clock() - self.session_ttl_seconds
        with self._registry_lock:
            stale = [
                key for key, session in self._sessions.items()
                if session.last_active < cutoff
            ]
            for key in stale:
                del self._sessions[key]

        if stale:
            logger.info(
                "STALE_SESSIONS_EVICTED",
                extra={"evicted": len(stale), "ttl_seconds": self.session_ttl_seconds}
            )
        return len(stale)

    def _snapshot(self, session_key: str) -> Tuple[Turn, ...]:
        _check_key(session_key)
        with self._registry_lock:
            session = self._sessions.get(session_key)
            if session is None:
                return ()
            session.lock.acquire()
        try:
            return tuple(session.turns)
        finally:
            session.lock.release()


def _check_key(session_key: str) -> None:
    if not session_key:
        raise InvalidSessionKeyError("session key must be a non-empty string")
