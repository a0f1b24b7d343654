"""Domain events for the Payment aggregate.

Every payment attempt is recorded, whatever its outcome, so the ledger of
PaymentRecorded events is the full history of charges against an order.
"""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Payment")
class PaymentRecorded:
    """A payment attempt was processed and stored."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier()
    user_id = Identifier(required=True)
    transaction_id = String(required=True)
    amount = Float(required=True)
    payment_method = String(required=True)
    status = String(required=True)
    failure_reason = String()
    recorded_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class PaymentRefunded:
    """A payment was refunded by an administrator."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier()
    transaction_id = String(required=True)
    amount = Float(required=True)
    previous_status = String(required=True)
    refunded_at = DateTime(required=True)
