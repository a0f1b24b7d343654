"""Payment gateway port (abstract interface).

Every adapter answers the same question: given a method and (optionally)
card details that already passed validation, what is the outcome of the
charge? Swapping the simulator for a real processor needs no change in the
payment or settlement code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from storefront.payment.card import CardDetails
from storefront.payment.payment import PaymentStatus


@dataclass(frozen=True)
class GatewayDecision:
    """Outcome of a charge attempt."""

    status: PaymentStatus
    failure_reason: str | None = None

    @property
    def success(self) -> bool:
        return self.status != PaymentStatus.FAILED


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def charge(
        self,
        transaction_id: str,
        amount: float,
        payment_method: str,
        card: CardDetails | None,
    ) -> GatewayDecision:
        """Charge ``amount`` with the given method."""
        ...
