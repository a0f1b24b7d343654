"""Product aggregate — the slice of catalogue state that checkout depends on.

Product CRUD lives outside this service. Checkout only reads the name and
price (snapshotted into carts and orders) and decrements ``stock``.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String

from storefront.domain import storefront
from storefront.exceptions import OutOfStock


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @classmethod
    def create(cls, name, price, stock=0):
        now = datetime.now(UTC)
        return cls(name=name, price=price, stock=stock, created_at=now, updated_at=now)

    def has_stock(self, quantity: int) -> bool:
        return (self.stock or 0) >= quantity

    def decrement_stock(self, quantity: int) -> None:
        """Take ``quantity`` units out of stock, or raise OutOfStock leaving stock untouched."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if not self.has_stock(quantity):
            raise OutOfStock(self.name)

        self.stock = self.stock - quantity
        self.updated_at = datetime.now(UTC)
