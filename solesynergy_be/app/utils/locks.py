import threading
from contextlib import contextmanager


class UserLocks:
    """One re-entrant lock per (resource, user_id).

    Serializes read-modify-write sequences on a single user's cart or
    wishlist inside this process; unrelated users never wait on each other.
    Cross-process safety comes from the conditional updates and unique
    constraints in the store.

    Entries are reference counted and dropped once the last holder or waiter
    leaves, so the registry only holds keys that are in use.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of threads holding or waiting on it]
        self._locks = {}

    def __len__(self):
        with self._guard:
            return len(self._locks)

    def _checkout(self, key):
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.RLock(), 0]
            entry[1] += 1
            return entry[0]

    def _checkin(self, key):
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, resource: str, user_id: int):
        key = (resource, user_id)
        lock = self._checkout(key)
        try:
            with lock:
                yield
        finally:
            self._checkin(key)


user_locks = UserLocks()
