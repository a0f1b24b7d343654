"""Settlement — placing an order and resolving its payment.

A checkout validates its input, assembles the order from the cart, charges
it and reflects the outcome on the order:

    outcome      order.status   order.payment_status   payment.status
    completed    processing     paid                   completed
    pending      pending        pending                pending      (cash-on-delivery)
    failed       pending        failed                 failed

A failed payment is an outcome, not an error. The order and its failed
payment row are both kept so the customer can retry with ``pay_order``.
Refunds cancel the order whatever state it is in.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError

from storefront.cart.store import CartStore
from storefront.exceptions import AlreadyPaid
from storefront.order.assembly import OrderAssembler
from storefront.order.order import Order, OrderPaymentStatus, validate_shipping_info
from storefront.order.queries import OrderQueries
from storefront.payment.card import CardDetails, DeclineReason, normalize_payment_method, validate_payment
from storefront.payment.lookup import PaymentLookup
from storefront.payment.payment import Payment, PaymentStatus
from storefront.payment.processing import PaymentSimulator

logger = structlog.get_logger(__name__)

SUCCESS_MESSAGE = "Payment processed successfully!"
COD_MESSAGE = "Order placed. Payment will be collected on delivery."

_ORDER_PAYMENT_STATUS = {
    PaymentStatus.COMPLETED: OrderPaymentStatus.PAID,
    PaymentStatus.PENDING: OrderPaymentStatus.PENDING,
    PaymentStatus.FAILED: OrderPaymentStatus.FAILED,
}


@dataclass(frozen=True)
class SettlementResult:
    success: bool
    order: Order
    payment: Payment
    message: str | None = None
    error: str | None = None

    @property
    def transaction_id(self) -> str:
        return self.payment.transaction_id

    @property
    def payment_summary(self) -> dict:
        return {
            "transaction_id": self.payment.transaction_id,
            "status": self.payment.status,
            "card_brand": self.payment.card_brand,
            "card_last_four": self.payment.card_last_four,
        }


class SettlementCoordinator:
    def __init__(
        self,
        domain,
        cart_store: CartStore | None = None,
        assembler: OrderAssembler | None = None,
        simulator: PaymentSimulator | None = None,
        lookup: PaymentLookup | None = None,
    ) -> None:
        self.domain = domain
        self.cart_store = cart_store or CartStore(domain)
        self.assembler = assembler or OrderAssembler(domain, cart_store=self.cart_store)
        self.simulator = simulator or PaymentSimulator(domain)
        self.lookup = lookup or PaymentLookup(domain)

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def place_order(self, user_id, shipping_info, payment_method, card_details: CardDetails | None = None):
        shipping = validate_shipping_info(shipping_info)
        method = normalize_payment_method(payment_method)

        check = validate_payment(method, card_details)
        if not check.valid:
            field_name = "payment_method" if check.reason == DeclineReason.UNSUPPORTED_METHOD else "card_details"
            raise ValidationError({field_name: [check.message]})

        cart_items = self.cart_store.get_items(user_id)
        if not cart_items:
            raise ValidationError({"cart": ["Cart is empty"]})

        order = self.assembler.create_order(
            user_id=user_id,
            shipping_info=shipping,
            cart_items=cart_items,
            total=self.cart_store.get_total(user_id),
            payment_method=method,
        )
        return self._settle(order, user_id, method, card_details)

    def pay_order(self, order_id, payment_method, card_details: CardDetails | None, user_id, is_admin=False):
        order = OrderQueries(self.domain).get_for(order_id, user_id, is_admin=is_admin)
        if order.is_paid:
            raise AlreadyPaid(str(order.id))

        return self._settle(order, order.user_id, normalize_payment_method(payment_method), card_details)

    def _settle(self, order: Order, user_id, method, card_details) -> SettlementResult:
        result = self.simulator.process(
            user_id=user_id,
            order_id=str(order.id),
            amount=order.total,
            payment_method=method,
            card_details=card_details,
        )

        order.record_payment_status(_ORDER_PAYMENT_STATUS[result.status], result.transaction_id)
        if result.status == PaymentStatus.COMPLETED:
            order.start_processing()
        self.domain.repository_for(Order).add(order)

        logger.info(
            "Order settled",
            order_id=str(order.id),
            transaction_id=result.transaction_id,
            payment_status=order.payment_status,
            order_status=order.status,
        )

        if not result.success:
            return SettlementResult(success=False, order=order, payment=result.payment, error=result.error)

        message = COD_MESSAGE if result.status == PaymentStatus.PENDING else SUCCESS_MESSAGE
        return SettlementResult(success=True, order=order, payment=result.payment, message=message)

    # -------------------------------------------------------------------
    # Refund
    # -------------------------------------------------------------------
    def refund(self, reference) -> Payment:
        payment = self.lookup.by_reference(reference)
        payment.refund()
        self.domain.repository_for(Payment).add(payment)

        if payment.order_id:
            order_repo = self.domain.repository_for(Order)
            order = order_repo.get(payment.order_id)
            order.record_payment_status(OrderPaymentStatus.REFUNDED, payment.transaction_id)
            order.cancel_for_refund()
            order_repo.add(order)

        logger.info(
            "Payment refunded",
            payment_id=str(payment.id),
            transaction_id=payment.transaction_id,
            order_id=str(payment.order_id) if payment.order_id else None,
            amount=payment.amount,
        )
        return payment
