"""Checkout — commands and handler for placing and paying orders.

Each command runs in a single unit of work: the order, its stock
decrements, the cleared cart and the payment attempt commit together, and
any exception rolls all of them back.
"""

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.store import CartStore
from storefront.domain import storefront
from storefront.order.assembly import OrderAssembler
from storefront.order.order import Order
from storefront.payment.card import CardDetails
from storefront.settlement.coordinator import SettlementCoordinator

logger = structlog.get_logger(__name__)


def _card_details(command) -> CardDetails | None:
    if not any([command.card_name, command.card_number, command.card_expiry, command.card_cvv]):
        return None
    return CardDetails(
        card_name=command.card_name,
        card_number=command.card_number,
        card_expiry=command.card_expiry,
        card_cvv=command.card_cvv,
    )


@storefront.command(part_of="Order")
class PlaceOrder:
    """Turn the user's cart into an order and charge it."""

    user_id = Identifier(required=True)
    shipping_address = String(max_length=500)
    shipping_city = String(max_length=100)
    shipping_postal_code = String(max_length=20)
    shipping_country = String(max_length=100)
    payment_method = String(required=True, max_length=50)
    card_name = String(max_length=255)
    card_number = String(max_length=30)
    card_expiry = String(max_length=10)
    card_cvv = String(max_length=10)


@storefront.command(part_of="Order")
class PayOrder:
    """Attempt payment again for an existing, unpaid order."""

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    payment_method = String(required=True, max_length=50)
    card_name = String(max_length=255)
    card_number = String(max_length=30)
    card_expiry = String(max_length=10)
    card_cvv = String(max_length=10)


@storefront.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        return SettlementCoordinator(current_domain).place_order(
            user_id=command.user_id,
            shipping_info={
                "shipping_address": command.shipping_address,
                "shipping_city": command.shipping_city,
                "shipping_postal_code": command.shipping_postal_code,
                "shipping_country": command.shipping_country,
            },
            payment_method=command.payment_method,
            card_details=_card_details(command),
        )

    @handle(PayOrder)
    def pay_order(self, command):
        return SettlementCoordinator(current_domain).pay_order(
            order_id=command.order_id,
            payment_method=command.payment_method,
            card_details=_card_details(command),
            user_id=command.user_id,
            is_admin=command.is_admin,
        )


def submit_order(command: PlaceOrder):
    """Process a PlaceOrder, reporting a checkout that lost a race for stock as OutOfStock.

    The losing unit of work has already rolled back when the version conflict
    surfaces here, so the cart is intact and the catalogue shows committed
    stock. A sold-out line raises OutOfStock; otherwise the command is retried
    once.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except ExpectedVersionError:
        logger.warning("Checkout conflicted on stock, rechecking", user_id=str(command.user_id))
        lines = CartStore(current_domain).get_items(command.user_id)
        OrderAssembler(current_domain).ensure_stock(lines)
        return current_domain.process(command, asynchronous=False)
