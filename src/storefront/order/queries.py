"""Read access to orders, scoped to the caller."""

from protean.exceptions import ObjectNotFoundError

from storefront.order.order import Order


class OrderQueries:
    def __init__(self, domain) -> None:
        self.domain = domain

    def list_for(self, user_id, is_admin=False) -> list[Order]:
        """The user's orders, or every order for an admin, newest first."""
        query = self.domain.repository_for(Order)._dao.query
        if not is_admin:
            query = query.filter(user_id=str(user_id))
        orders = query.all().items
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def get_for(self, order_id, user_id, is_admin=False) -> Order:
        """Raises ObjectNotFoundError when the order is missing or belongs to someone else."""
        order = self.domain.repository_for(Order).get(order_id)
        if not is_admin and not order.belongs_to(user_id):
            raise ObjectNotFoundError(f"Order `{order_id}` does not exist")
        return order
