"""Per-user serialization for read-modify-write sync cycles."""

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock

from devquest.core.logging import get_logger

logger = get_logger(__name__)


class UserLockRegistry:
    """Thread-safe registry handing out one lock per user.

    A caller that reads challenge state, applies progress and persists the
    result while holding the user's lock gets exactly-once XP awarding,
    since completion is only signalled on the active -> completed edge.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._registry_lock = Lock()
        self._locks: dict[str, Lock] = {}

    def get_lock(self, user_id: str | int) -> Lock:
        """Get (or lazily create) the lock for a user.

        Args:
            user_id: User identifier

        Returns:
            The lock dedicated to this user
        """
        key = str(user_id)
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
                logger.debug("locks.user.created", user_id=key)
            return lock

    @contextmanager
    def hold(self, user_id: str | int) -> Iterator[None]:
        """Hold the user's lock for the duration of the block.

        Args:
            user_id: User identifier
        """
        lock = self.get_lock(user_id)
        with lock:
            yield

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._locks)
