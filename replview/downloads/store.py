"""Download correlation store.

Hands out single-use tokens for resources a visualizer wants the browser to
fetch outside the render cycle (e.g. a file download):
- issue() is idempotent per resource while its token is outstanding
- resolve() removes the token, a second resolve returns None
- unresolved tokens expire after a TTL

The store is shared by every session, so all mutations go through one lock.
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Hashable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileResource:
    """Handle for a file on disk, keyed by its resolved path."""

    path: Path

    @classmethod
    def for_path(cls, path: Path) -> "FileResource":
        return cls(path=Path(path).resolve())

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class _Pending:
    resource: Hashable
    issued_at: float


class DownloadStore:
    """Token table for pending downloads."""

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._by_token: dict[str, _Pending] = {}
        self._by_resource: dict[Hashable, str] = {}
        self._lock = threading.Lock()

    def issue(self, resource: Hashable) -> str:
        """Get the outstanding token for a resource, minting one if needed."""
        with self._lock:
            self._purge_expired_locked()
            token = self._by_resource.get(resource)
            if token is not None:
                return token

            token = uuid.uuid4().hex
            self._by_token[token] = _Pending(resource=resource, issued_at=self._clock())
            self._by_resource[resource] = token

        logger.info(f"Issued download token for {resource}")
        return token

    def token_for(self, resource: Hashable) -> Optional[str]:
        """Get the outstanding token for a resource without minting one."""
        with self._lock:
            self._purge_expired_locked()
            return self._by_resource.get(resource)

    def resolve(self, token: str) -> Optional[Hashable]:
        """Consume a token and return its resource, or None if unknown."""
        with self._lock:
            self._purge_expired_locked()
            pending = self._by_token.pop(token, None)
            if pending is None:
                return None
            self._by_resource.pop(pending.resource, None)

        logger.info(f"Resolved download token for {pending.resource}")
        return pending.resource

    def count(self) -> int:
        """Number of outstanding tokens."""
        with self._lock:
            self._purge_expired_locked()
            return len(self._by_token)

    def purge_expired(self) -> int:
        """Drop expired tokens. Returns how many were dropped."""
        with self._lock:
            return self._purge_expired_locked()

    def _purge_expired_locked(self) -> int:
        if self.ttl_seconds is None:
            return 0
        cutoff = self._clock() - self.ttl_seconds
        expired = [t for t, p in self._by_token.items() if p.issued_at <= cutoff]
        for token in expired:
            pending = self._by_token.pop(token)
            self._by_resource.pop(pending.resource, None)
        if expired:
            logger.debug(f"Expired {len(expired)} download tokens")
        return len(expired)


# Global store instance
_store: Optional[DownloadStore] = None


def init_download_store(ttl_seconds: Optional[float] = None) -> DownloadStore:
    """Create the global download store, replacing any previous one."""
    global _store
    _store = DownloadStore(ttl_seconds=ttl_seconds)
    return _store


def get_download_store() -> DownloadStore:
    """Get the global download store instance."""
    global _store
    if _store is None:
        _store = DownloadStore()
    return _store
