"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands and aggregates.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CardDetailsSchema(BaseModel):
    card_name: str | None = None
    card_number: str | None = None
    card_expiry: str | None = None
    card_cvv: str | None = None


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class PlaceOrderRequest(BaseModel):
    shipping_address: str | None = None
    shipping_city: str | None = None
    shipping_postal_code: str | None = None
    shipping_country: str | None = None
    payment_method: str = "credit_card"
    card_details: CardDetailsSchema | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": "221B Baker Street",
                    "shipping_city": "London",
                    "shipping_postal_code": "NW1 6XE",
                    "shipping_country": "United Kingdom",
                    "payment_method": "credit_card",
                    "card_details": {
                        "card_name": "Jane Doe",
                        "card_number": "4242 4242 4242 4242",
                        "card_expiry": "12/30",
                        "card_cvv": "123",
                    },
                }
            ]
        }
    }


class PayOrderRequest(BaseModel):
    order_id: str
    payment_method: str = "credit_card"
    card_details: CardDetailsSchema | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartItemResponse(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    subtotal: float


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    total: float

    @classmethod
    def from_lines(cls, lines) -> "CartResponse":
        items = [
            CartItemResponse(
                product_id=line.product_id,
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                subtotal=line.subtotal,
            )
            for line in lines
        ]
        return cls(items=items, total=round(sum(item.subtotal for item in items), 2))


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_name: str
    unit_price: float
    quantity: int
    subtotal: float


class OrderResponse(BaseModel):
    id: str
    user_id: str
    total: float
    status: str
    payment_status: str
    payment_method: str | None = None
    transaction_id: str | None = None
    shipping_address: str
    shipping_city: str
    shipping_postal_code: str
    shipping_country: str
    items: list[OrderItemResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            total=order.total,
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            transaction_id=order.transaction_id,
            shipping_address=order.shipping_address,
            shipping_city=order.shipping_city,
            shipping_postal_code=order.shipping_postal_code,
            shipping_country=order.shipping_country,
            items=[
                OrderItemResponse(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    subtotal=item.subtotal,
                )
                for item in order.items
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class PaymentSummary(BaseModel):
    transaction_id: str
    status: str
    card_brand: str | None = None
    card_last_four: str | None = None


class SettlementResponse(BaseModel):
    message: str
    order: OrderResponse
    payment: PaymentSummary


class PaymentResponse(BaseModel):
    id: str
    user_id: str
    order_id: str | None = None
    transaction_id: str
    amount: float
    payment_method: str
    card_last_four: str | None = None
    card_brand: str | None = None
    status: str
    failure_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_payment(cls, payment) -> "PaymentResponse":
        return cls(
            id=str(payment.id),
            user_id=str(payment.user_id),
            order_id=str(payment.order_id) if payment.order_id else None,
            transaction_id=payment.transaction_id,
            amount=payment.amount,
            payment_method=payment.payment_method,
            card_last_four=payment.card_last_four,
            card_brand=payment.card_brand,
            status=payment.status,
            failure_reason=payment.failure_reason,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        )
