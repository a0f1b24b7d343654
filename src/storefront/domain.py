"""Storefront bounded context — Checkout, Orders and Payments.

Handles cart-to-order assembly with inventory decrements, simulated payment
processing, and the settlement flow that ties payment outcomes to order state.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
