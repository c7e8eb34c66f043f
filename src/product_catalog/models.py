from decimal import Decimal

from django.db import models

CENTS = Decimal("0.01")


class Product(models.Model):
    """
    A catalog entry.

    The primary key is a 6-digit id issued by the allocator or supplied by
    the caller. It is never generated by the database and never changes.
    """

    id = models.IntegerField(primary_key=True)
    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=18, decimal_places=2)
    stock = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.name} #{self.id} ({self.stock})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": Decimal(self.price).quantize(CENTS),
            "stock": self.stock,
        }
