"""BDD tests for checkout and payment settlement."""

from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, when
from storefront.settlement.checkout import PlaceOrder
from storefront.settlement.refund import RefundPayment

scenarios("features/checkout.feature")

CUSTOMER_ID = "bdd-customer"

SHIPPING = {
    "shipping_address": "1 Market Street",
    "shipping_city": "San Francisco",
    "shipping_postal_code": "94105",
    "shipping_country": "United States",
}


def _checkout(payment_method, card_number=None):
    card = {}
    if card_number:
        card = {"card_name": "Sam Lee", "card_number": card_number, "card_expiry": "12/39", "card_cvv": "321"}
    return current_domain.process(
        PlaceOrder(user_id=CUSTOMER_ID, payment_method=payment_method, **SHIPPING, **card),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Given / When steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the customer checked out with the card "{card_number}"'))
@when(parsers.cfparse('the customer checks out with the card "{card_number}"'))
def _(outcome, card_number):
    outcome["result"] = _checkout("credit_card", card_number)


@when("the customer checks out with cash on delivery")
def _(outcome):
    outcome["result"] = _checkout("cash-on-delivery")


@when(parsers.cfparse('the customer tries to check out with the card "{card_number}"'))
def _(outcome, card_number):
    try:
        outcome["result"] = _checkout("credit_card", card_number)
    except ValidationError as exc:
        outcome["error"] = exc


@when("an administrator refunds the payment")
def _(outcome):
    current_domain.process(RefundPayment(reference=outcome["result"].transaction_id), asynchronous=False)
