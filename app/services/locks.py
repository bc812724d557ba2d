import threading
from collections.abc import Iterator
from contextlib import contextmanager

_registry_guard = threading.Lock()
_user_locks: dict[str, threading.Lock] = {}
_user_lock_holders: dict[str, int] = {}


@contextmanager
def user_lock(user_id: str) -> Iterator[None]:
    """Serialize structural changes to one user's upload ordering within this process.

    An entry lives only while some thread holds or waits for it.
    """
    with _registry_guard:
        lock = _user_locks.setdefault(user_id, threading.Lock())
        _user_lock_holders[user_id] = _user_lock_holders.get(user_id, 0) + 1
    try:
        with lock:
            yield
    finally:
        with _registry_guard:
            _user_lock_holders[user_id] -= 1
            if not _user_lock_holders[user_id]:
                del _user_lock_holders[user_id]
                del _user_locks[user_id]
