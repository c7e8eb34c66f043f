import uuid
from decimal import Decimal

import pytest
from django.core.cache.backends.locmem import LocMemCache

from product_catalog.allocator import IdentifierAllocator
from product_catalog.models import Product
from product_catalog.repository import ProductRepository
from product_catalog.services import ProductService


class ScriptedRandom:
    """Stands in for random.Random: returns the given candidates in order."""

    def __init__(self, *values: int):
        self.values = list(values)
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        self.calls += 1
        return self.values.pop(0)


@pytest.fixture
def id_cache():
    """A private, empty reservation cache per test."""
    cache = LocMemCache(
        f"test-ids-{uuid.uuid4()}", {"OPTIONS": {"MAX_ENTRIES": 1_000_000}}
    )
    yield cache
    cache.clear()


@pytest.fixture
def repository():
    return ProductRepository()


@pytest.fixture
def allocator(repository, id_cache):
    return IdentifierAllocator(repository.exists, id_cache)


@pytest.fixture
def service(repository, allocator):
    return ProductService(repository, allocator)


@pytest.fixture
def laptop(db):
    return Product.objects.create(
        id=100001, name="Laptop", price=Decimal("1200.00"), stock=10
    )


@pytest.fixture
def scripted_random():
    return ScriptedRandom
