from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock, RLock
from uuid import UUID


class _OwnerLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = RLock()
        self.users = 0


class OwnerLockRegistry:
    """
    One re-entrant lock per owner; serializes changes to an owner's assets.

    An owner's entry exists only while some thread holds or waits on it.
    """

    def __init__(self) -> None:
        self._locks: dict[UUID, _OwnerLock] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)

    def _acquire_entry(self, owner_id: UUID) -> _OwnerLock:
        with self._lock:
            entry = self._locks.get(owner_id)
            if entry is None:
                entry = _OwnerLock()
                self._locks[owner_id] = entry
            entry.users += 1
            return entry

    def _release_entry(self, owner_id: UUID, entry: _OwnerLock) -> None:
        with self._lock:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[owner_id]

    @contextmanager
    def hold(self, owner_id: UUID) -> Iterator[None]:
        entry = self._acquire_entry(owner_id)
        try:
            with entry.lock:
                yield
        finally:
            self._release_entry(owner_id, entry)
