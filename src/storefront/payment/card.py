"""Card validation — stateless checks on the payment input of a checkout.

Cash-on-delivery and PayPal need no card details. Card methods must supply a
holder name, a Luhn-valid number of 13-19 digits, an unexpired ``MM/YY``
expiry and a 3-4 digit CVV. Checks run in that order and the first failure
is reported.

Brand detection is display-only and never fails.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    CASH_ON_DELIVERY = "cash-on-delivery"


CARD_METHODS = {PaymentMethod.CREDIT_CARD.value, PaymentMethod.DEBIT_CARD.value}
NON_CARD_METHODS = {PaymentMethod.PAYPAL.value, PaymentMethod.CASH_ON_DELIVERY.value}

_METHOD_ALIASES = {"cod": PaymentMethod.CASH_ON_DELIVERY.value}


class DeclineReason(Enum):
    MISSING_FIELDS = "missing fields"
    INVALID_NUMBER = "invalid number"
    INVALID_EXPIRY = "invalid expiry"
    INVALID_MONTH = "invalid month"
    EXPIRED = "expired"
    INVALID_CVV = "invalid CVV"
    UNSUPPORTED_METHOD = "unsupported method"


@dataclass(frozen=True)
class CardDetails:
    card_name: str | None = None
    card_number: str | None = None
    card_expiry: str | None = None
    card_cvv: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "CardDetails | None":
        if not data:
            return None
        return cls(
            card_name=data.get("card_name"),
            card_number=data.get("card_number"),
            card_expiry=data.get("card_expiry"),
            card_cvv=data.get("card_cvv"),
        )

    @property
    def last_four(self) -> str | None:
        digits = clean_card_number(self.card_number)
        return digits[-4:] if digits else None

    @property
    def brand(self) -> str | None:
        return detect_brand(self.card_number) if self.card_number else None


@dataclass(frozen=True)
class CardCheck:
    """Outcome of validating payment input."""

    valid: bool
    reason: DeclineReason | None = None
    message: str | None = None


_VALID = CardCheck(valid=True)

_EXPIRY_PATTERN = re.compile(r"^([0-9]{2})/([0-9]{2})$")


def normalize_payment_method(payment_method: str | None) -> str | None:
    if payment_method is None:
        return None
    method = payment_method.strip().lower()
    return _METHOD_ALIASES.get(method, method)


def clean_card_number(number: str | None) -> str:
    return re.sub(r"[\s-]", "", number or "")


def luhn_valid(number: str) -> bool:
    total = 0
    for position, char in enumerate(reversed(number)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def is_well_formed_number(number: str | None) -> bool:
    """13 to 19 ASCII digits, once spaces and dashes are removed, passing the Luhn check."""
    digits = clean_card_number(number)
    return bool(re.fullmatch(r"[0-9]{13,19}", digits)) and luhn_valid(digits)


def detect_brand(number: str) -> str:
    digits = clean_card_number(number)
    if digits.startswith("4"):
        return "visa"
    if re.match(r"^5[1-5]", digits):
        return "mastercard"
    if re.match(r"^3[47]", digits):
        return "amex"
    if digits.startswith("6011") or digits.startswith("65"):
        return "discover"
    return "unknown"


def card_expires_at(month: int, year: int) -> datetime:
    """First instant after the card's last valid month (two-digit years are 20YY)."""
    year = 2000 + year
    if month == 12:
        return datetime(year + 1, 1, 1, tzinfo=UTC)
    return datetime(year, month + 1, 1, tzinfo=UTC)


def _decline(reason: DeclineReason, message: str) -> CardCheck:
    return CardCheck(valid=False, reason=reason, message=message)


def validate_payment(payment_method: str, card: CardDetails | None, now: datetime | None = None) -> CardCheck:
    method = normalize_payment_method(payment_method)
    if method in NON_CARD_METHODS:
        return _VALID
    if method not in CARD_METHODS:
        return _decline(DeclineReason.UNSUPPORTED_METHOD, f"Unsupported payment method: {payment_method}")

    if card is None or not all([card.card_name, card.card_number, card.card_expiry, card.card_cvv]):
        return _decline(DeclineReason.MISSING_FIELDS, "All card fields are required.")

    number = clean_card_number(card.card_number)
    if not re.fullmatch(r"[0-9]{13,19}", number):
        return _decline(DeclineReason.INVALID_NUMBER, "Invalid card number.")
    if not luhn_valid(number):
        return _decline(DeclineReason.INVALID_NUMBER, "Invalid card number (checksum failed).")

    match = _EXPIRY_PATTERN.match(card.card_expiry.strip())
    if not match:
        return _decline(DeclineReason.INVALID_EXPIRY, "Expiry must be in MM/YY format.")

    month, year = int(match.group(1)), int(match.group(2))
    if month < 1 or month > 12:
        return _decline(DeclineReason.INVALID_MONTH, "Invalid expiry month.")

    now = now or datetime.now(UTC)
    if card_expires_at(month, year) <= now:
        return _decline(DeclineReason.EXPIRED, "Card has expired.")

    if not re.fullmatch(r"[0-9]{3,4}", card.card_cvv.strip()):
        return _decline(DeclineReason.INVALID_CVV, "Invalid CVV.")

    return _VALID
