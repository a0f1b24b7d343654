"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was assembled from a cart and its stock was decremented."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    total = Float(required=True)
    item_count = Integer(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The fulfilment status of an order moved."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentStatusChanged:
    """A payment attempt or refund changed what the order records about payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_status = String(required=True)
    transaction_id = String()
    changed_at = DateTime(required=True)
