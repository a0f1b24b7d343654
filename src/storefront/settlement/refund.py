"""Payment refund — command and handler (administrators only)."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.payment.payment import Payment
from storefront.settlement.coordinator import SettlementCoordinator


@storefront.command(part_of="Payment")
class RefundPayment:
    """Refund a payment by transaction id or payment id."""

    reference = String(required=True, max_length=255)


@storefront.command_handler(part_of=Payment)
class RefundHandler:
    @handle(RefundPayment)
    def refund_payment(self, command):
        return SettlementCoordinator(current_domain).refund(command.reference)
