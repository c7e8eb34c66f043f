import pytest
from django.core.cache.backends.locmem import LocMemCache

from product_catalog.allocator import IdentifierAllocator
from product_catalog.exceptions import IdentifierSpaceExhausted, LockAcquireTimeout


def never_persisted(candidate: int) -> bool:
    return False


def test_allocate_returns_six_digit_id_and_reserves_it(id_cache):
    allocator = IdentifierAllocator(never_persisted, id_cache)

    new_id = allocator.allocate()

    assert 100000 <= new_id <= 999999
    assert allocator.is_reserved(new_id)


def test_allocate_skips_reserved_candidates(id_cache, scripted_random):
    rng = scripted_random(123456, 654321)
    allocator = IdentifierAllocator(never_persisted, id_cache, rng=rng)
    allocator.reserve(123456)

    assert allocator.allocate() == 654321
    assert rng.calls == 2


def test_allocate_skips_persisted_candidates(id_cache, scripted_random):
    persisted = {111111, 222222}
    rng = scripted_random(111111, 222222, 333333)
    allocator = IdentifierAllocator(persisted.__contains__, id_cache, rng=rng)

    assert allocator.allocate() == 333333


def test_consecutive_allocations_never_repeat_a_reserved_id(id_cache, scripted_random):
    rng = scripted_random(500000, 500000, 500001)
    allocator = IdentifierAllocator(never_persisted, id_cache, rng=rng)

    assert allocator.allocate() == 500000
    assert allocator.allocate() == 500001


def test_expired_reservation_frees_the_id(id_cache, scripted_random):
    rng = scripted_random(500000, 500000)
    allocator = IdentifierAllocator(
        never_persisted, id_cache, reservation_ttl=0, rng=rng
    )

    assert allocator.allocate() == 500000
    assert allocator.allocate() == 500000


def test_reserve_reports_existing_reservation(id_cache):
    allocator = IdentifierAllocator(never_persisted, id_cache)

    assert allocator.reserve(424242) is True
    assert allocator.reserve(424242) is False


def test_allocate_gives_up_after_max_attempts(id_cache):
    checked = []

    def always_taken(candidate: int) -> bool:
        checked.append(candidate)
        return True

    allocator = IdentifierAllocator(always_taken, id_cache, max_attempts=5)

    with pytest.raises(IdentifierSpaceExhausted):
        allocator.allocate()

    assert len(checked) == 5


def test_allocate_draws_only_from_configured_range(id_cache):
    allocator = IdentifierAllocator(
        never_persisted, id_cache, lower=100000, upper=100002
    )

    issued = {allocator.allocate() for _ in range(3)}

    assert issued == {100000, 100001, 100002}
    with pytest.raises(IdentifierSpaceExhausted):
        allocator.allocate()


class NeverBackend:
    def acquire(self, key: str, timeout: float | None) -> bool:
        return False

    def release(self, key: str) -> None:
        raise AssertionError("release should not be called")


def test_allocate_raises_when_lock_unavailable(id_cache):
    allocator = IdentifierAllocator(never_persisted, id_cache, backend=NeverBackend())

    with pytest.raises(LockAcquireTimeout):
        allocator.allocate()


def test_rejects_empty_range(id_cache):
    with pytest.raises(ValueError):
        IdentifierAllocator(never_persisted, id_cache, lower=10, upper=9)


def test_from_settings_reads_app_settings(settings):
    settings.PRODUCT_CATALOG = {"ID_MIN": 200000, "ID_MAX": 200000, "ID_MAX_ATTEMPTS": 3}

    allocator = IdentifierAllocator.from_settings(never_persisted)

    assert allocator.lower == 200000
    assert allocator.upper == 200000
    assert allocator.max_attempts == 3
    assert allocator.reservation_ttl == 600


def test_reservations_outlive_many_later_allocations(id_cache):
    allocator = IdentifierAllocator(never_persisted, id_cache)

    first = allocator.allocate()
    later = [allocator.allocate() for _ in range(400)]

    assert allocator.is_reserved(first)
    assert all(allocator.is_reserved(i) for i in later)
    assert first not in later


def test_project_reservation_cache_keeps_early_ids():
    allocator = IdentifierAllocator.from_settings(never_persisted)
    try:
        first = allocator.allocate()
        for _ in range(400):
            allocator.allocate()

        assert allocator.is_reserved(first)
    finally:
        allocator.cache.clear()


def test_rejects_memory_cache_smaller_than_id_space():
    undersized = LocMemCache("test-ids-undersized", {})

    with pytest.raises(ValueError, match="MAX_ENTRIES"):
        IdentifierAllocator(never_persisted, undersized)
