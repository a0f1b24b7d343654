"""Payment processing — validate, charge through the gateway, record the attempt.

Every call produces exactly one Payment row, including attempts rejected by
card validation, so the ledger shows each try a customer made.
"""

import time
from dataclasses import dataclass
from uuid import uuid4

import structlog

from storefront.payment.card import CardDetails, is_well_formed_number, normalize_payment_method, validate_payment
from storefront.payment.gateway import PaymentGateway, get_gateway
from storefront.payment.payment import Payment, PaymentStatus

logger = structlog.get_logger(__name__)


def generate_transaction_id() -> str:
    return f"TXN_{int(time.time() * 1000)}_{uuid4().hex[:12].upper()}"


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    payment: Payment
    transaction_id: str
    status: PaymentStatus
    error: str | None = None


class PaymentSimulator:
    def __init__(self, domain, gateway: PaymentGateway | None = None) -> None:
        self.domain = domain
        self._gateway = gateway

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway or get_gateway()

    def process(self, user_id, order_id, amount, payment_method, card_details: CardDetails | None = None):
        method = normalize_payment_method(payment_method)
        transaction_id = generate_transaction_id()
        card = card_details if card_details and is_well_formed_number(card_details.card_number) else None

        check = validate_payment(method, card_details)
        if not check.valid:
            status, failure_reason = PaymentStatus.FAILED, check.message
        else:
            decision = self.gateway.charge(
                transaction_id=transaction_id,
                amount=amount,
                payment_method=method,
                card=card,
            )
            status, failure_reason = decision.status, decision.failure_reason

        payment = Payment.record(
            user_id=user_id,
            order_id=order_id,
            transaction_id=transaction_id,
            amount=amount,
            payment_method=method,
            status=status,
            card_last_four=card.last_four if card else None,
            card_brand=card.brand if card else None,
            failure_reason=failure_reason,
        )
        self.domain.repository_for(Payment).add(payment)

        log = logger.warning if status == PaymentStatus.FAILED else logger.info
        log(
            "Payment processed",
            payment_id=str(payment.id),
            order_id=str(order_id) if order_id else None,
            transaction_id=transaction_id,
            amount=amount,
            payment_method=method,
            status=status.value,
            reason=check.reason.value if check.reason else None,
        )

        return PaymentResult(
            success=status != PaymentStatus.FAILED,
            payment=payment,
            transaction_id=transaction_id,
            status=status,
            error=failure_reason,
        )
