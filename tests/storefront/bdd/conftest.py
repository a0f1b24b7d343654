"""Shared BDD fixtures and step definitions for checkout scenarios."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from storefront.cart.store import CartStore
from storefront.catalogue.product import Product
from storefront.order.order import Order


@pytest.fixture
def catalogue():
    return {}


@pytest.fixture
def outcome():
    return {}


CUSTOMER_ID = "bdd-customer"


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(catalogue, name, price, stock):
    product = Product.create(name=name, price=price, stock=stock)
    current_domain.repository_for(Product).add(product)
    catalogue[name] = product


@given(parsers.cfparse('the customer has {quantity:d} "{name}" in their cart'))
@given(parsers.cfparse('the customer has {quantity:d} more "{name}" in their cart'))
def _(catalogue, quantity, name):
    CartStore(current_domain).add_item(CUSTOMER_ID, str(catalogue[name].id), quantity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the checkout succeeds with message "{message}"'))
def _(outcome, message):
    result = outcome["result"]
    assert result.success
    assert result.message == message


@then(parsers.cfparse('the checkout fails with error "{error}"'))
def _(outcome, error):
    result = outcome["result"]
    assert not result.success
    assert result.error == error


@then(parsers.cfparse('the checkout is rejected with "{message}"'))
def _(outcome, message):
    error = outcome["error"]
    assert isinstance(error, ValidationError)
    assert message in [m for messages in error.messages.values() for m in messages]


@then(parsers.cfparse('the order is "{status}" with payment "{payment_status}"'))
def _(outcome, status, payment_status):
    order = current_domain.repository_for(Order).get(outcome["result"].order.id)
    assert order.status == status
    assert order.payment_status == payment_status


@then(parsers.cfparse("the order total is {total:f}"))
def _(outcome, total):
    assert outcome["result"].order.total == total


@then(parsers.cfparse('"{name}" has {stock:d} left in stock'))
def _(catalogue, name, stock):
    assert current_domain.repository_for(Product).get(catalogue[name].id).stock == stock


@then("the customer's cart is empty")
def _():
    assert CartStore(current_domain).get_items(CUSTOMER_ID) == []


@then("no order exists")
def _():
    assert current_domain.repository_for(Order)._dao.query.all().items == []
