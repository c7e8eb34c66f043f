from __future__ import annotations

import logging
import random
from typing import Callable

from django.core.cache import BaseCache, caches
from django.core.cache.backends.locmem import LocMemCache

from .conf import get_setting
from .exceptions import IdentifierSpaceExhausted
from .locks import LockBackend, ThreadingLockBackend, lock

logger = logging.getLogger(__name__)

LOCK_KEY = "product-id-allocator"


class IdentifierAllocator:
    """
    Issues unused 6-digit product ids.

    A candidate is accepted only when it is neither reserved in the
    exclusion set nor present in the durable store. Reservations live in a
    Django cache with a short expiry; they stop two concurrent allocations
    from handing out the same id before either row has been written. The
    store check stays the source of truth.

    Draw, checks and reservation run under one lock, so two threads can
    never both see the same candidate as free.

    Parameters
    ----------
    exists : Callable[[int], bool]
        Durable-store membership check.

    cache : BaseCache
        Cache backend holding reservations.

    lower, upper : int
        Inclusive bounds of the id space.

    reservation_ttl : float
        Seconds a reservation is kept.

    max_attempts : int
        Draws before giving up with IdentifierSpaceExhausted.

    lock_timeout : float | None
        Passed to `lock()`; None waits indefinitely.

    backend : LockBackend | None
        Lock backend; each allocator gets its own in-process backend by
        default.

    rng : random.Random | None
        Source of candidates. Injectable for deterministic tests.
    """

    def __init__(
        self,
        exists: Callable[[int], bool],
        cache: BaseCache,
        *,
        lower: int = 100_000,
        upper: int = 999_999,
        reservation_ttl: float = 600,
        max_attempts: int = 10_000,
        lock_timeout: float | None = 3.0,
        backend: LockBackend | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if lower > upper:
            raise ValueError(f"Empty id range [{lower}, {upper}]")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if isinstance(cache, LocMemCache) and cache._max_entries < upper - lower + 1:
            # LocMemCache culls a third of its keys when full, dropping
            # live reservations.
            raise ValueError(
                f"Reservation cache holds {cache._max_entries} entries; "
                f"MAX_ENTRIES must cover the {upper - lower + 1} ids in range"
            )

        self.exists = exists
        self.cache = cache
        self.lower = lower
        self.upper = upper
        self.reservation_ttl = reservation_ttl
        self.max_attempts = max_attempts
        self.lock_timeout = lock_timeout
        self.backend = backend or ThreadingLockBackend()
        self.rng = rng or random.Random()

    @classmethod
    def from_settings(cls, exists: Callable[[int], bool]) -> IdentifierAllocator:
        return cls(
            exists,
            caches[get_setting("ID_CACHE_ALIAS")],
            lower=get_setting("ID_MIN"),
            upper=get_setting("ID_MAX"),
            reservation_ttl=get_setting("ID_RESERVATION_TTL"),
            max_attempts=get_setting("ID_MAX_ATTEMPTS"),
            lock_timeout=get_setting("ID_LOCK_TIMEOUT"),
        )

    @staticmethod
    def cache_key(candidate: int) -> str:
        return f"product-id:{candidate}"

    def is_reserved(self, candidate: int) -> bool:
        return self.cache.has_key(self.cache_key(candidate))

    def reserve(self, candidate: int) -> bool:
        """Reserve `candidate`; returns False when it was already reserved."""
        return self.cache.add(
            self.cache_key(candidate), True, timeout=self.reservation_ttl
        )

    def allocate(self) -> int:
        """
        Return an id that is neither reserved nor persisted, and reserve it.

        Raises
        ------
        IdentifierSpaceExhausted
            If no free id was found within `max_attempts` draws.

        LockAcquireTimeout
            If another allocation held the lock past `lock_timeout`.
        """
        with lock(LOCK_KEY, self.backend, timeout=self.lock_timeout):
            for attempt in range(1, self.max_attempts + 1):
                candidate = self.rng.randint(self.lower, self.upper)

                if self.is_reserved(candidate) or self.exists(candidate):
                    continue

                self.reserve(candidate)
                logger.debug("Allocated product id %s after %d draw(s)", candidate, attempt)
                return candidate

        logger.error(
            "No free product id in [%d, %d] after %d draws",
            self.lower,
            self.upper,
            self.max_attempts,
        )
        raise IdentifierSpaceExhausted(
            f"No free id in [{self.lower}, {self.upper}] "
            f"after {self.max_attempts} attempts"
        )
