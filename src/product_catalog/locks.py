from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Protocol

from .exceptions import LockAcquireTimeout


class LockBackend(Protocol):
    """
    Protocol describing the minimal backend interface.

    Allocation only needs in-process exclusion, but the seam lets tests swap
    in a recording or always-failing backend.
    """
    def acquire(self, key: str, timeout: float | None) -> bool: ...
    def release(self, key: str) -> None: ...


class ThreadingLockBackend:
    """
    In-process lock backend: one `threading.Lock` per key.

    Timeout behavior
    ----------------
    - timeout=None:
        Blocks until the lock is available.

    - timeout=float:
        Waits at most that many seconds, then gives up.

    Limitations
    -----------
    Exclusion holds only between threads of the same process. Workers in
    other processes rely on the database primary key as the last line of
    defence.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())

    def acquire(self, key: str, timeout: float | None) -> bool:
        if timeout is None:
            return self._lock_for(key).acquire()
        return self._lock_for(key).acquire(timeout=max(timeout, 0))

    def release(self, key: str) -> None:
        self._lock_for(key).release()


@contextmanager
def lock(
    key: str,
    backend: LockBackend,
    timeout: float | None = 3.0,
) -> Iterator[None]:
    """
    Acquire a lock for the given key.

    Only one thread holding the same key may enter the protected block at a
    time.

    Parameters
    ----------
    key : str
        Lock identifier, e.g. "product-id-allocator".

    backend : LockBackend
        Backend owning the lock. Callers that must exclude each other
        share one backend instance.

    timeout : float | None, default=3.0
        Maximum time (in seconds) to wait for lock acquisition.

        - None: block indefinitely.
        - float: raise LockAcquireTimeout if exceeded.

    Raises
    ------
    LockAcquireTimeout
        If the lock cannot be acquired within the timeout.
    """
    acquired = backend.acquire(key, timeout)

    if not acquired:
        raise LockAcquireTimeout(
            f"Failed to acquire lock for key='{key}' within timeout={timeout}s"
        )

    try:
        yield
    finally:
        backend.release(key)

