from __future__ import annotations

from django.db import IntegrityError, connection, transaction
from django.db.models import F

from .exceptions import ProductConflict
from .models import Product


class ProductRepository:
    """
    Store primitives over the Product table.

    Stock mutations are single conditional UPDATE statements, so concurrent
    requests cannot interleave a read and a write on the same row.
    """

    def all(self) -> list[Product]:
        return list(Product.objects.all())

    def get(self, product_id: int) -> Product | None:
        return Product.objects.filter(pk=product_id).first()

    def get_for_update(self, product_id: int) -> Product | None:
        """Row-locked read (SELECT ... FOR UPDATE). Call inside transaction.atomic()."""
        return Product.objects.select_for_update().filter(pk=product_id).first()

    def exists(self, product_id: int) -> bool:
        return Product.objects.filter(pk=product_id).exists()

    def insert(self, product: Product) -> Product:
        """
        Insert `product` as a new row.

        Never falls back to an UPDATE: an id that is already taken raises
        ProductConflict and leaves the existing row untouched.
        """
        try:
            # Savepoint so the failed INSERT does not poison an outer transaction.
            with transaction.atomic():
                product.save(force_insert=True)
        except IntegrityError as e:
            raise ProductConflict(
                f"Product with ID {product.pk} already exists."
            ) from e
        return product

    def save(self, product: Product) -> Product:
        product.save(update_fields=["name", "price", "stock"])
        return product

    def delete(self, product_id: int) -> bool:
        deleted, _ = Product.objects.filter(pk=product_id).delete()
        return deleted > 0

    def max_stock(self) -> int:
        """Largest value the stock column can hold on this database."""
        field = Product._meta.get_field("stock")
        return connection.ops.integer_field_range(field.get_internal_type())[1]

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        if quantity > self.max_stock():
            return False

        updated = Product.objects.filter(pk=product_id, stock__gte=quantity).update(
            stock=F("stock") - quantity
        )
        return updated == 1

    def increment_stock(self, product_id: int, quantity: int) -> bool:
        """Refuses, like a missing row, when the sum would overflow the column."""
        headroom = self.max_stock() - quantity
        if headroom < 0:
            return False

        updated = Product.objects.filter(pk=product_id, stock__lte=headroom).update(
            stock=F("stock") + quantity
        )
        return updated == 1
