"""Order aggregate — a persisted checkout with frozen line items.

An Order is created in one piece from a cart: the header, the line items
(name and price snapshots decoupled from the live product) and the total,
which always equals the sum of the line subtotals and never changes. After
that the order is only mutated through status transitions.

Fulfilment state machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    PENDING → SHIPPED (cash-on-delivery orders ship before payment)
    PENDING/PROCESSING → CANCELLED

A refund cancels the order from any state.

Payment status mirrors the outcome of the latest payment attempt (UNPAID
until the first one) and becomes REFUNDED when that payment is refunded.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.order.events import OrderPaymentStatusChanged, OrderPlaced, OrderStatusChanged


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderPaymentStatus(Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

SHIPPING_FIELDS = ("shipping_address", "shipping_city", "shipping_postal_code", "shipping_country")


def validate_shipping_info(shipping_info: dict) -> dict:
    """Return the four shipping fields stripped, or raise with one message per blank field."""
    errors = {}
    cleaned = {}
    for field_name in SHIPPING_FIELDS:
        value = (shipping_info or {}).get(field_name)
        value = value.strip() if isinstance(value, str) else ""
        if not value:
            errors[field_name] = [f"{field_name.replace('_', ' ').capitalize()} is required"]
        cleaned[field_name] = value

    if errors:
        raise ValidationError(errors)
    return cleaned


@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased product: the name and price it had at checkout, and the quantity."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Float(required=True, min_value=0.0)


@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total = Float(required=True, min_value=0.0)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    payment_status = String(
        choices=OrderPaymentStatus,
        default=OrderPaymentStatus.UNPAID.value,
    )
    transaction_id = String(max_length=255)
    payment_method = String(max_length=50, default="credit_card")
    shipping_address = String(required=True, max_length=500)
    shipping_city = String(required=True, max_length=100)
    shipping_postal_code = String(required=True, max_length=20)
    shipping_country = String(required=True, max_length=100)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, shipping_info, lines, total, payment_method):
        """Build a pending order from cart lines.

        Args:
            user_id: The user placing the order.
            shipping_info: Dict with shipping_address, shipping_city,
                shipping_postal_code, shipping_country.
            lines: Cart lines with product_id, name, unit_price, quantity.
            total: The cart total; must equal the sum of line subtotals.
            payment_method: The method the order will be paid with.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        shipping = validate_shipping_info(shipping_info)
        items = [
            OrderItem(
                product_id=line.product_id,
                product_name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                subtotal=round(line.unit_price * line.quantity, 2),
            )
            for line in lines
        ]

        computed_total = round(sum(item.subtotal for item in items), 2)
        if abs(computed_total - round(total, 2)) > 0.005:
            raise ValidationError(
                {"total": [f"Order total ({total}) does not match the sum of its items ({computed_total})"]}
            )

        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            total=computed_total,
            status=OrderStatus.PENDING.value,
            payment_status=OrderPaymentStatus.UNPAID.value,
            payment_method=payment_method,
            created_at=now,
            updated_at=now,
            **shipping,
        )
        for item in items:
            order.add_items(item)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                total=computed_total,
                item_count=len(items),
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_paid(self) -> bool:
        return self.payment_status == OrderPaymentStatus.PAID.value

    def belongs_to(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    # -------------------------------------------------------------------
    # Fulfilment status
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _change_status(self, target_status: OrderStatus) -> None:
        previous = self.status
        now = datetime.now(UTC)
        self.status = target_status.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target_status.value,
                changed_at=now,
            )
        )

    def update_status(self, new_status: str) -> None:
        """Move the order to ``new_status`` if the transition table allows it."""
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Invalid status: {new_status}"]}) from None

        self._assert_can_transition(target)
        self._change_status(target)

    def start_processing(self) -> None:
        """Advance a pending order once its payment has cleared. No-op otherwise."""
        if OrderStatus(self.status) == OrderStatus.PENDING:
            self._change_status(OrderStatus.PROCESSING)

    def cancel_for_refund(self) -> None:
        """Force the order to cancelled after its payment was refunded."""
        if OrderStatus(self.status) != OrderStatus.CANCELLED:
            self._change_status(OrderStatus.CANCELLED)

    # -------------------------------------------------------------------
    # Payment status
    # -------------------------------------------------------------------
    def record_payment_status(self, payment_status: OrderPaymentStatus, transaction_id: str | None) -> None:
        now = datetime.now(UTC)
        self.payment_status = payment_status.value
        self.transaction_id = transaction_id
        self.updated_at = now
        self.raise_(
            OrderPaymentStatusChanged(
                order_id=str(self.id),
                payment_status=payment_status.value,
                transaction_id=transaction_id,
                changed_at=now,
            )
        )
