"""Session-scoped storage for order list states."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator

from .config import session_ttl_sec
from .order_list_state import FilterState

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    state: FilterState
    touched: float
    lock: threading.Lock = field(default_factory=threading.Lock)


class FilterStateStore:
    """Hold one FilterState per session id.

    Each entry carries its own lock so requests from the same session are
    serialized while different sessions proceed independently. Entries idle
    for longer than ``ttl_sec`` are dropped on the next access to the store;
    a ``ttl_sec`` of 0 keeps them until ``discard``.
    """

    def __init__(
        self,
        factory: Callable[[], FilterState] = FilterState,
        *,
        ttl_sec: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._ttl_sec = session_ttl_sec() if ttl_sec is None else max(0, ttl_sec)
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def new_session_id() -> str:
        """Return a fresh opaque session id."""
        return uuid.uuid4().hex

    def _evict_idle(self, now: float) -> None:
        if self._ttl_sec <= 0:
            return
        expired = [
            session_id
            for session_id, entry in self._entries.items()
            if now - entry.touched > self._ttl_sec and not entry.lock.locked()
        ]
        for session_id in expired:
            del self._entries[session_id]
        if expired:
            logger.debug("Dropped %d idle order list sessions", len(expired))

    def _entry(self, session_id: str) -> _Entry:
        now = self._clock()
        with self._lock:
            self._evict_idle(now)
            entry = self._entries.get(session_id)
            if entry is None:
                entry = _Entry(state=self._factory(), touched=now)
                self._entries[session_id] = entry
            else:
                entry.touched = now
            return entry

    def get(self, session_id: str) -> FilterState:
        """Return the session's state, creating a default one if needed."""
        return self._entry(session_id).state

    @contextmanager
    def locked(self, session_id: str) -> Iterator[FilterState]:
        """Yield the session's state while holding its lock."""
        entry = self._entry(session_id)
        with entry.lock:
            try:
                yield entry.state
            finally:
                entry.touched = self._clock()

    def discard(self, session_id: str) -> None:
        """Forget a session's state when the session ends."""
        with self._lock:
            self._entries.pop(session_id, None)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
