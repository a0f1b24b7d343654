"""Deterministic simulated payment gateway.

No external calls are made. The outcome depends only on the payment method
and card number, following the test-card convention of real processors:

- cash-on-delivery is left pending until it is collected on delivery
- the reserved card number ``4000000000000002`` is always declined
- every other card, and PayPal, is charged successfully
"""

from storefront.payment.card import CardDetails, PaymentMethod, clean_card_number, normalize_payment_method
from storefront.payment.gateway.port import GatewayDecision, PaymentGateway
from storefront.payment.payment import PaymentStatus

DECLINE_CARD_NUMBER = "4000000000000002"
DECLINE_MESSAGE = "Payment was declined. Please try another payment method."


class SimulatedGateway(PaymentGateway):
    def charge(
        self,
        transaction_id: str,
        amount: float,
        payment_method: str,
        card: CardDetails | None,
    ) -> GatewayDecision:
        if normalize_payment_method(payment_method) == PaymentMethod.CASH_ON_DELIVERY.value:
            return GatewayDecision(status=PaymentStatus.PENDING)

        if card is not None and clean_card_number(card.card_number) == DECLINE_CARD_NUMBER:
            return GatewayDecision(status=PaymentStatus.FAILED, failure_reason=DECLINE_MESSAGE)

        return GatewayDecision(status=PaymentStatus.COMPLETED)
