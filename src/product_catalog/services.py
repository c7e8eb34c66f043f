from __future__ import annotations

import logging
from typing import Any, Mapping

from django.apps import apps
from django.db import transaction

from .allocator import IdentifierAllocator
from .exceptions import ProductConflict
from .models import Product
from .repository import ProductRepository

logger = logging.getLogger(__name__)

#: Fields a full update overwrites. `id` is deliberately absent.
UPDATABLE_FIELDS = ("name", "price", "stock")


class ProductService:
    """
    Business rules between the HTTP views and the store.

    Lookups return None and mutations return False when the product does not
    exist; the views decide which status code that becomes.
    """

    def __init__(
        self, repository: ProductRepository, allocator: IdentifierAllocator
    ) -> None:
        self.repository = repository
        self.allocator = allocator

    def get_all(self) -> list[Product]:
        return self.repository.all()

    def get_by_id(self, product_id: int) -> Product | None:
        return self.repository.get(product_id)

    def add(self, product: Product) -> Product:
        """
        Persist a new product.

        An id of 0 (or None) is replaced by an allocator-issued one. A nonzero
        id is kept as supplied and only the primary key guards it, so a
        duplicate raises ProductConflict.
        """
        if not product.pk:
            product.pk = self.allocator.allocate()

        try:
            created = self.repository.insert(product)
        except ProductConflict:
            logger.warning("Product id %s is already taken", product.pk)
            raise

        logger.info("Created product %s (%s)", created.pk, created.name)
        return created

    def update(self, product_id: int, fields: Mapping[str, Any]) -> Product | None:
        """
        Overwrite name, price and stock of an existing product.

        Any `id` in `fields` is ignored.
        """
        with transaction.atomic():
            existing = self.repository.get_for_update(product_id)
            if existing is None:
                return None

            for name in UPDATABLE_FIELDS:
                setattr(existing, name, fields[name])

            return self.repository.save(existing)

    def delete(self, product_id: int) -> bool:
        deleted = self.repository.delete(product_id)
        if deleted:
            logger.info("Deleted product %s", product_id)
        return deleted

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Take `quantity` units out of stock.

        Fails closed: returns False and changes nothing when the product is
        missing or holds fewer than `quantity` units.
        """
        if quantity < 0:
            return False

        if not self.repository.decrement_stock(product_id, quantity):
            logger.info(
                "Stock decrement of %d refused for product %s", quantity, product_id
            )
            return False

        logger.info("Decremented stock of product %s by %d", product_id, quantity)
        return True

    def add_to_stock(self, product_id: int, quantity: int) -> bool:
        if quantity < 0:
            return False

        if not self.repository.increment_stock(product_id, quantity):
            return False

        logger.info("Added %d to stock of product %s", quantity, product_id)
        return True


def get_service() -> ProductService:
    """Return the service built once by the app config."""
    return apps.get_app_config("product_catalog").service
