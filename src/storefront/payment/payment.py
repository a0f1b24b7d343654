"""Payment aggregate — one row per payment attempt against an order.

Payments form an append-only ledger: every attempt, successful or not, is
stored with its own transaction id and never deleted. The most recent row of
an order is the one that counts. Status only changes in place on refund.

Outcomes:
    COMPLETED  card or PayPal charge went through
    PENDING    cash-on-delivery, collected when the order is delivered
    FAILED     validation failure or gateway decline
    REFUNDED   an administrator reversed the payment
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront
from storefront.payment.events import PaymentRecorded, PaymentRefunded


class PaymentStatus(Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"
    REFUNDED = "refunded"


@storefront.aggregate
class Payment:
    user_id = Identifier(required=True)
    order_id = Identifier()
    transaction_id = String(required=True, max_length=100, unique=True)
    amount = Float(required=True, min_value=0.0)
    payment_method = String(required=True, max_length=50)
    card_last_four = String(max_length=4)
    card_brand = String(max_length=20)
    status = String(choices=PaymentStatus, required=True)
    failure_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def record(
        cls,
        user_id,
        order_id,
        transaction_id,
        amount,
        payment_method,
        status: PaymentStatus,
        card_last_four=None,
        card_brand=None,
        failure_reason=None,
    ):
        now = datetime.now(UTC)
        payment = cls(
            user_id=user_id,
            order_id=order_id,
            transaction_id=transaction_id,
            amount=amount,
            payment_method=payment_method,
            card_last_four=card_last_four,
            card_brand=card_brand,
            status=status.value,
            failure_reason=failure_reason,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentRecorded(
                payment_id=str(payment.id),
                order_id=str(order_id) if order_id else None,
                user_id=str(user_id),
                transaction_id=transaction_id,
                amount=amount,
                payment_method=payment_method,
                status=status.value,
                failure_reason=failure_reason,
                recorded_at=now,
            )
        )
        return payment

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED.value

    def refund(self) -> None:
        """Mark the payment refunded. Applying it twice rewrites the same state."""
        previous = self.status
        now = datetime.now(UTC)
        self.status = PaymentStatus.REFUNDED.value
        self.updated_at = now
        self.raise_(
            PaymentRefunded(
                payment_id=str(self.id),
                order_id=str(self.order_id) if self.order_id else None,
                transaction_id=self.transaction_id,
                amount=self.amount,
                previous_status=previous,
                refunded_at=now,
            )
        )
