"""Cart item management — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.store import CartStore
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        cart = CartStore(current_domain).add_item(
            user_id=command.user_id,
            product_id=command.product_id,
            quantity=command.quantity,
        )
        return str(cart.id)
