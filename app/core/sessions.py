"""In-process registry of login sessions (idle timeout, absolute max age, logout)."""

import logging
import secrets
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from app.schemas.auth import Principal

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    """Server-side state for one login session."""

    session_id: str
    principal: Principal
    created_at: datetime
    last_accessed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class SessionRegistry:
    """
    Tracks live sessions by id. A cookie is honoured only while its id is here.

    Thread-safe: sync route handlers run in a worker thread pool.
    """

    def __init__(
        self,
        idle_timeout: timedelta = timedelta(minutes=30),
        max_age: timedelta = timedelta(hours=8),
        prune_interval: timedelta = timedelta(minutes=1),
    ) -> None:
        self.idle_timeout = idle_timeout
        self.max_age = max_age
        self.prune_interval = prune_interval
        self._entries: dict[str, SessionEntry] = {}
        self._lock = threading.Lock()
        self._last_pruned_at = datetime.now(UTC)

    def create(self, principal: Principal) -> SessionEntry:
        """
        Register a new session with a fresh random id.
        Expired sessions are swept here at most once per prune_interval.
        """
        now = datetime.now(UTC)
        entry = SessionEntry(
            session_id=secrets.token_urlsafe(32),
            principal=principal,
            created_at=now,
            last_accessed_at=now,
        )
        with self._lock:
            if now - self._last_pruned_at >= self.prune_interval:
                self._prune_locked(now)
            self._entries[entry.session_id] = entry
        logger.info("Session created: username=%s", principal.username)
        return entry

    def get(self, session_id: str) -> SessionEntry | None:
        """Return the live session and refresh its idle timer; drop it if expired."""
        now = datetime.now(UTC)
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            if self._is_expired(entry, now):
                del self._entries[session_id]
                logger.info("Session expired: username=%s", entry.principal.username)
                return None
            entry.last_accessed_at = now
            return entry

    def invalidate(self, session_id: str) -> bool:
        """Remove a session. Returns False when it was already gone."""
        with self._lock:
            entry = self._entries.pop(session_id, None)
        if entry is None:
            return False
        logger.info("Session invalidated: username=%s", entry.principal.username)
        return True

    def prune(self) -> int:
        """Drop every expired session; returns how many were removed."""
        with self._lock:
            return self._prune_locked(datetime.now(UTC))

    def _prune_locked(self, now: datetime) -> int:
        expired = [sid for sid, e in self._entries.items() if self._is_expired(e, now)]
        for sid in expired:
            del self._entries[sid]
        self._last_pruned_at = now
        if expired:
            logger.info("Sessions pruned: removed=%s", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _is_expired(self, entry: SessionEntry, now: datetime) -> bool:
        return (
            now - entry.last_accessed_at > self.idle_timeout
            or now - entry.created_at > self.max_age
        )
