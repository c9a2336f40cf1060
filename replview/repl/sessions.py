"""Browser sessions and evaluated results.

A ReplSession holds one namespace and the current EvaluationResult. A new
evaluation supersedes the current result, discarding its navigation stack
and registered click actions.

Sessions themselves are single-owner state. Only the SessionStore that maps
cookie ids to sessions is shared, and it is guarded by a lock. Idle sessions
expire after a TTL.
"""

import itertools
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from replview.navigation import NavigationStack
from replview.repl.engine import evaluate_source

logger = logging.getLogger(__name__)


class ActionTable:
    """Click callbacks registered by the last render of a result."""

    def __init__(self):
        self._actions: dict[str, Callable[[], Any]] = {}
        self._ids = itertools.count(1)

    def register(self, action: Callable[[], Any]) -> str:
        action_id = f"a{next(self._ids)}"
        self._actions[action_id] = action
        return action_id

    def invoke(self, action_id: str) -> bool:
        """Run an action. Returns False if no such action is registered.

        Actions belong to the navigation state they were rendered for, so
        running one invalidates the rest.
        """
        action = self._actions.get(action_id)
        if action is None:
            return False
        self._actions.clear()
        action()
        return True

    def clear(self) -> None:
        self._actions.clear()

    def __len__(self) -> int:
        return len(self._actions)


@dataclass
class EvaluationResult:
    """One top-level evaluated expression and its display state."""

    code: str
    value: Any
    failed: bool = False
    result_id: str = field(default_factory=lambda: f"r-{uuid.uuid4().hex[:12]}")
    evaluated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    navigation: NavigationStack = field(init=False)
    actions: ActionTable = field(init=False, default_factory=ActionTable)

    def __post_init__(self):
        self.navigation = NavigationStack(self.value)


class ReplSession:
    """Namespace plus the current result for one browser session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.namespace: dict[str, Any] = {"__name__": "__repl__"}
        self.current: Optional[EvaluationResult] = None

    def evaluate(self, code: str) -> EvaluationResult:
        """Evaluate code and make its value the current result."""
        value, failed = evaluate_source(code, self.namespace)
        if not failed:
            self.namespace["_"] = value
        self.current = EvaluationResult(code=code, value=value, failed=failed)
        logger.info(
            f"Session {self.session_id}: result {self.current.result_id} "
            f"({type(value).__name__}{', failed' if failed else ''})"
        )
        return self.current

    def result(self, result_id: str) -> Optional[EvaluationResult]:
        """Get the current result if it still has this id."""
        if self.current is not None and self.current.result_id == result_id:
            return self.current
        return None

    def clear(self) -> None:
        """Drop the current result."""
        self.current = None


@dataclass
class _Entry:
    session: ReplSession
    last_seen: float


class SessionStore:
    """Shared table of live sessions keyed by cookie id."""

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, session_id: Optional[str]) -> Optional[ReplSession]:
        """Get a live session and mark it as used."""
        if not session_id:
            return None
        with self._lock:
            self._purge_expired_locked()
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            entry.last_seen = self._clock()
            return entry.session

    def create(self) -> ReplSession:
        session = ReplSession(uuid.uuid4().hex)
        with self._lock:
            self._purge_expired_locked()
            self._sessions[session.session_id] = _Entry(session, self._clock())
        logger.info(f"Created session {session.session_id}")
        return session

    def get_or_create(self, session_id: Optional[str]) -> ReplSession:
        return self.get(session_id) or self.create()

    def drop(self, session_id: str) -> bool:
        """Tear down a session. Returns False if it was not live."""
        with self._lock:
            entry = self._sessions.pop(session_id, None)
        if entry is None:
            return False
        logger.info(f"Dropped session {session_id}")
        return True

    def count(self) -> int:
        with self._lock:
            self._purge_expired_locked()
            return len(self._sessions)

    def _purge_expired_locked(self) -> None:
        if self.ttl_seconds is None:
            return
        cutoff = self._clock() - self.ttl_seconds
        expired = [sid for sid, e in self._sessions.items() if e.last_seen <= cutoff]
        for sid in expired:
            del self._sessions[sid]
            logger.info(f"Session {sid} expired")


# Global store instance
_store: Optional[SessionStore] = None


def init_session_store(ttl_seconds: Optional[float] = None) -> SessionStore:
    """Create the global session store, replacing any previous one."""
    global _store
    _store = SessionStore(ttl_seconds=ttl_seconds)
    return _store


def get_session_store() -> SessionStore:
    """Get the global session store instance."""
    global _store
    if _store is None:
        _store = SessionStore()
    return _store
