"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations. The
SimulatedGateway is the default and the only adapter shipped.
"""

from storefront.payment.gateway.port import GatewayDecision, PaymentGateway
from storefront.payment.gateway.simulated import SimulatedGateway

__all__ = ["GatewayDecision", "PaymentGateway", "SimulatedGateway", "get_gateway", "set_gateway", "reset_gateway"]

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to SimulatedGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = SimulatedGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
