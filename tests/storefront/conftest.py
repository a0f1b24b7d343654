import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    from protean import current_domain

    from storefront.payment.gateway import reset_gateway

    with storefront_bed.domain_context():
        yield

        # Clear all databases and the gateway while the context is still active
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
        reset_gateway()


@pytest.fixture
def make_product():
    from protean import current_domain

    from storefront.catalogue.product import Product

    def _make(name="Mechanical Keyboard", price=49.99, stock=10):
        product = Product.create(name=name, price=price, stock=stock)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture
def fill_cart():
    from protean import current_domain

    from storefront.cart.store import CartStore

    def _fill(user_id, *products_and_quantities):
        store = CartStore(current_domain)
        for product, quantity in products_and_quantities:
            store.add_item(user_id, str(product.id), quantity)
        return store.get_items(user_id)

    return _fill


@pytest.fixture
def recording_gateway():
    """Install a simulated gateway that keeps every charge it is asked to make."""
    from storefront.payment.gateway import SimulatedGateway, set_gateway

    class RecordingGateway(SimulatedGateway):
        def __init__(self):
            self.calls = []

        def charge(self, transaction_id, amount, payment_method, card):
            self.calls.append(
                {
                    "transaction_id": transaction_id,
                    "amount": amount,
                    "payment_method": payment_method,
                    "last4": card.last_four if card else None,
                }
            )
            return super().charge(transaction_id, amount, payment_method, card)

    gateway = RecordingGateway()
    set_gateway(gateway)
    return gateway


SHIPPING = {
    "shipping_address": "221B Baker Street",
    "shipping_city": "London",
    "shipping_postal_code": "NW1 6XE",
    "shipping_country": "United Kingdom",
}

VALID_CARD = {
    "card_name": "Jane Doe",
    "card_number": "4242 4242 4242 4242",
    "card_expiry": "12/39",
    "card_cvv": "123",
}

DECLINED_CARD = {**VALID_CARD, "card_number": "4000 0000 0000 0002"}


@pytest.fixture
def shipping():
    return dict(SHIPPING)


@pytest.fixture
def valid_card():
    return dict(VALID_CARD)


@pytest.fixture
def declined_card():
    return dict(DECLINED_CARD)
