"""Read-side helpers over the payment ledger."""

from protean.exceptions import ObjectNotFoundError

from storefront.payment.payment import Payment


def _newest_first(payments: list) -> list:
    return sorted(payments, key=lambda p: p.created_at, reverse=True)


class PaymentLookup:
    def __init__(self, domain) -> None:
        self.domain = domain

    @property
    def _dao(self):
        return self.domain.repository_for(Payment)._dao

    def by_transaction_id(self, transaction_id) -> Payment | None:
        payments = self._dao.query.filter(transaction_id=str(transaction_id)).all().items
        return payments[0] if payments else None

    def by_reference(self, reference) -> Payment:
        """Resolve a transaction id, falling back to a payment id."""
        payment = self.by_transaction_id(reference)
        if payment is not None:
            return payment
        try:
            return self.domain.repository_for(Payment).get(reference)
        except ObjectNotFoundError:
            raise ObjectNotFoundError(f"Payment `{reference}` does not exist") from None

    def for_order(self, order_id) -> list[Payment]:
        return _newest_first(self._dao.query.filter(order_id=str(order_id)).all().items)

    def latest_for_order(self, order_id) -> Payment | None:
        payments = self.for_order(order_id)
        return payments[0] if payments else None

    def for_user(self, user_id) -> list[Payment]:
        return _newest_first(self._dao.query.filter(user_id=str(user_id)).all().items)
