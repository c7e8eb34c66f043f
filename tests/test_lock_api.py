import threading

import pytest

from product_catalog.allocator import LOCK_KEY
from product_catalog.exceptions import LockAcquireTimeout
from product_catalog.locks import ThreadingLockBackend, lock


class RecordingBackend:
    """Grants every request and remembers the order of calls."""

    def __init__(self):
        self.events = []

    def acquire(self, key: str, timeout: float | None) -> bool:
        self.events.append(("acquire", key, timeout))
        return True

    def release(self, key: str) -> None:
        self.events.append(("release", key))


class RefusingBackend:
    """Simulates an allocation lock that another thread never gives up."""

    def acquire(self, key: str, timeout: float | None) -> bool:
        return False

    def release(self, key: str) -> None:
        raise AssertionError("a lock that was never granted must not be released")


def test_allocator_lock_is_released_after_claim():
    be = RecordingBackend()

    with lock(LOCK_KEY, be, timeout=1.5):
        be.events.append(("claim", LOCK_KEY))

    assert be.events == [
        ("acquire", LOCK_KEY, 1.5),
        ("claim", LOCK_KEY),
        ("release", LOCK_KEY),
    ]


def test_allocator_lock_is_released_when_claim_fails():
    be = RecordingBackend()

    with pytest.raises(RuntimeError):
        with lock(LOCK_KEY, be):
            raise RuntimeError("store unavailable")

    assert be.events[-1] == ("release", LOCK_KEY)


def test_refused_lock_raises_timeout_naming_the_key():
    with pytest.raises(LockAcquireTimeout, match=LOCK_KEY):
        with lock(LOCK_KEY, RefusingBackend(), timeout=0.1):
            pass


# In-process backend

def test_threading_backend_times_out_while_held():
    be = ThreadingLockBackend()
    assert be.acquire(LOCK_KEY, timeout=None) is True

    assert be.acquire(LOCK_KEY, timeout=0.05) is False

    be.release(LOCK_KEY)
    assert be.acquire(LOCK_KEY, timeout=0.05) is True
    be.release(LOCK_KEY)


def test_threading_backend_keys_are_independent():
    be = ThreadingLockBackend()

    assert be.acquire(LOCK_KEY, timeout=0.05) is True
    assert be.acquire("stock:100001", timeout=0.05) is True

    be.release(LOCK_KEY)
    be.release("stock:100001")


def test_separate_backends_do_not_exclude_each_other():
    first, second = ThreadingLockBackend(), ThreadingLockBackend()

    with lock(LOCK_KEY, first, timeout=0.05):
        with lock(LOCK_KEY, second, timeout=0.05):
            pass


def test_same_key_blocks_other_thread():
    """A second thread on the same backend and key times out."""
    be = ThreadingLockBackend()
    started = threading.Event()
    release = threading.Event()
    results: dict[str, object] = {}

    def holder() -> None:
        with lock(LOCK_KEY, be, timeout=2.0):
            started.set()
            release.wait(timeout=2.0)

    def contender() -> None:
        assert started.wait(timeout=2.0)
        try:
            with lock(LOCK_KEY, be, timeout=0.1):
                results["acquired"] = True
        except LockAcquireTimeout:
            results["timed_out"] = True

    t1 = threading.Thread(target=holder, name="lock-holder")
    t2 = threading.Thread(target=contender, name="lock-contender")

    t1.start()
    t2.start()
    t2.join(timeout=5.0)
    release.set()
    t1.join(timeout=5.0)

    assert results == {"timed_out": True}
