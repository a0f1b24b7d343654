"""Cart aggregate — the items a user has picked but not yet checked out.

One cart per user. Each line keeps the product name and unit price captured
when the product was added; checkout consumes these lines read-only and the
cart is emptied in the same unit of work that creates the order.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    @property
    def total(self) -> float:
        return round(sum(item.unit_price * item.quantity for item in self.items), 2)

    def add_item(self, product_id, name, unit_price, quantity):
        """Add a product to the cart, or increase the quantity of an existing line."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        existing = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(
                CartItem(
                    product_id=product_id,
                    name=name,
                    unit_price=unit_price,
                    quantity=quantity,
                    added_at=now,
                )
            )
        self.updated_at = now

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
