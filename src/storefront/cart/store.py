"""Cart store — the read/clear interface checkout uses to reach a user's cart."""

from dataclasses import dataclass

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product


@dataclass(frozen=True)
class CartLine:
    """A cart line as checkout sees it: product reference plus price snapshot."""

    product_id: str
    name: str
    unit_price: float
    quantity: int

    @property
    def subtotal(self) -> float:
        return round(self.unit_price * self.quantity, 2)


class CartStore:
    def __init__(self, domain) -> None:
        self.domain = domain

    def _find(self, user_id):
        carts = self.domain.repository_for(Cart)._dao.query.filter(user_id=str(user_id)).all().items
        return carts[0] if carts else None

    def get_items(self, user_id) -> list[CartLine]:
        cart = self._find(user_id)
        if cart is None:
            return []
        return [
            CartLine(
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
            )
            for item in cart.items
        ]

    def get_total(self, user_id) -> float:
        return round(sum(line.subtotal for line in self.get_items(user_id)), 2)

    def clear(self, user_id) -> None:
        cart = self._find(user_id)
        if cart is None or not cart.items:
            return
        cart.clear()
        self.domain.repository_for(Cart).add(cart)

    def add_item(self, user_id, product_id, quantity) -> Cart:
        """Put a product in the user's cart, snapshotting its current name and price.

        Raises ObjectNotFoundError for an unknown product. Stock is not
        reserved here; it is checked again when the order is assembled.
        """
        product = self.domain.repository_for(Product).get(product_id)

        cart = self._find(user_id) or Cart.create(user_id=str(user_id))
        cart.add_item(
            product_id=str(product.id),
            name=product.name,
            unit_price=product.price,
            quantity=quantity,
        )
        self.domain.repository_for(Cart).add(cart)
        return cart
