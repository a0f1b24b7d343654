"""Order assembly — turns a user's cart into a persisted order.

The order header, its line items, the stock decrement of every product and
the clearing of the cart belong to one unit of work. Every decrement is
applied to the in-memory product aggregates before anything is written, so a
line that cannot be served aborts the whole order with OutOfStock and leaves
no order, no items and no stock change behind.

Concurrent checkouts racing for the same units are caught by the product's
version check. The losing write raises ExpectedVersionError, which rolls the
unit of work back; ``ensure_stock`` is then used against committed data to
tell a sold-out product apart from a conflict worth retrying.
"""

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError

from storefront.cart.store import CartStore
from storefront.catalogue.product import Product
from storefront.exceptions import OutOfStock
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


def requested_quantities(lines) -> dict:
    """Total quantity per product id, keeping the first line's name."""
    requested = {}
    for line in lines:
        name, quantity = requested.get(line.product_id, (line.name, 0))
        requested[line.product_id] = (name, quantity + line.quantity)
    return requested


class OrderAssembler:
    def __init__(self, domain, cart_store: CartStore | None = None) -> None:
        self.domain = domain
        self.cart_store = cart_store or CartStore(domain)

    def _load(self, product_id, name) -> Product:
        try:
            return self.domain.repository_for(Product).get(product_id)
        except ObjectNotFoundError:
            raise OutOfStock(name) from None

    def _reserve_stock(self, lines) -> list:
        """Decrement stock for every line on loaded product aggregates and return them."""
        products = []
        for product_id, (name, quantity) in requested_quantities(lines).items():
            product = self._load(product_id, name)
            product.decrement_stock(quantity)
            products.append(product)
        return products

    def ensure_stock(self, lines) -> None:
        """Raise OutOfStock for the first line the catalogue can no longer serve."""
        for product_id, (name, quantity) in requested_quantities(lines).items():
            product = self._load(product_id, name)
            if not product.has_stock(quantity):
                raise OutOfStock(product.name)

    def create_order(self, user_id, shipping_info, cart_items, total, payment_method="credit_card") -> Order:
        order = Order.place(
            user_id=user_id,
            shipping_info=shipping_info,
            lines=cart_items,
            total=total,
            payment_method=payment_method,
        )

        try:
            products = self._reserve_stock(cart_items)
        except OutOfStock as exc:
            logger.warning(
                "Order aborted, insufficient stock",
                user_id=str(user_id),
                product_name=exc.product_name,
            )
            raise

        self.domain.repository_for(Order).add(order)
        product_repo = self.domain.repository_for(Product)
        for product in products:
            try:
                product_repo.add(product)
            except ExpectedVersionError:
                logger.warning(
                    "Stock changed during checkout",
                    user_id=str(user_id),
                    product_id=str(product.id),
                )
                raise
        self.cart_store.clear(user_id)

        logger.info(
            "Order assembled",
            order_id=str(order.id),
            user_id=str(user_id),
            total=order.total,
            item_count=len(order.items),
        )
        return order
