"""Business-rule failures raised by checkout and settlement.

Both are validation errors so the HTTP layer answers them as client faults.
"""

from protean.exceptions import ValidationError


class OutOfStock(ValidationError):
    """A cart line could not be stock-decremented."""

    def __init__(self, product_name: str) -> None:
        self.product_name = product_name
        super().__init__({"stock": [f"Insufficient stock for product: {product_name}"]})


class AlreadyPaid(ValidationError):
    """The order already carries a successful payment."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__({"order_id": ["Order is already paid"]})
