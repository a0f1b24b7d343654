"""FastAPI routes for the Storefront — cart, orders and payments."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from storefront.api.auth import Identity, current_identity, require_admin
from storefront.api.schemas import (
    AddCartItemRequest,
    CardDetailsSchema,
    CartResponse,
    OrderResponse,
    PaymentResponse,
    PaymentSummary,
    PayOrderRequest,
    PlaceOrderRequest,
    SettlementResponse,
    UpdateOrderStatusRequest,
)
from storefront.cart.items import AddToCart
from storefront.cart.store import CartStore
from storefront.order.queries import OrderQueries
from storefront.order.status import UpdateOrderStatus
from storefront.payment.lookup import PaymentLookup
from storefront.settlement.checkout import PayOrder, PlaceOrder, submit_order
from storefront.settlement.refund import RefundPayment


def _card_fields(card_details: CardDetailsSchema | None) -> dict:
    return card_details.model_dump() if card_details else {}


def _settlement_response(result, status_code: int):
    """Render a settlement outcome; payment failures keep the order reference."""
    if not result.success:
        return JSONResponse(
            status_code=400,
            content={
                "error": result.error,
                "order_id": str(result.order.id),
                "transaction_id": result.transaction_id,
            },
        )

    body = SettlementResponse(
        message=result.message,
        order=OrderResponse.from_order(result.order),
        payment=PaymentSummary(**result.payment_summary),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.post("/items", status_code=201, response_model=CartResponse)
async def add_cart_item(body: AddCartItemRequest, identity: Identity = Depends(current_identity)) -> CartResponse:
    command = AddToCart(
        user_id=identity.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse.from_lines(CartStore(current_domain).get_items(identity.user_id))


@cart_router.get("", response_model=CartResponse)
async def view_cart(identity: Identity = Depends(current_identity)) -> CartResponse:
    return CartResponse.from_lines(CartStore(current_domain).get_items(identity.user_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=SettlementResponse)
async def place_order(body: PlaceOrderRequest, identity: Identity = Depends(current_identity)):
    """Check out the caller's cart and pay for it."""
    command = PlaceOrder(
        user_id=identity.user_id,
        shipping_address=body.shipping_address,
        shipping_city=body.shipping_city,
        shipping_postal_code=body.shipping_postal_code,
        shipping_country=body.shipping_country,
        payment_method=body.payment_method,
        **_card_fields(body.card_details),
    )
    result = submit_order(command)
    return _settlement_response(result, status_code=201)


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(identity: Identity = Depends(current_identity)) -> list[OrderResponse]:
    orders = OrderQueries(current_domain).list_for(identity.user_id, is_admin=identity.is_admin)
    return [OrderResponse.from_order(order) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, identity: Identity = Depends(current_identity)) -> OrderResponse:
    order = OrderQueries(current_domain).get_for(order_id, identity.user_id, is_admin=identity.is_admin)
    return OrderResponse.from_order(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    identity: Identity = Depends(require_admin),
) -> OrderResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status)
    order = current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(order)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/process", response_model=SettlementResponse)
async def pay_order(body: PayOrderRequest, identity: Identity = Depends(current_identity)):
    """Pay an existing order that has not been paid yet."""
    command = PayOrder(
        order_id=body.order_id,
        user_id=identity.user_id,
        is_admin=identity.is_admin,
        payment_method=body.payment_method,
        **_card_fields(body.card_details),
    )
    result = current_domain.process(command, asynchronous=False)
    return _settlement_response(result, status_code=200)


@payment_router.get("", response_model=list[PaymentResponse])
async def payment_history(identity: Identity = Depends(current_identity)) -> list[PaymentResponse]:
    payments = PaymentLookup(current_domain).for_user(identity.user_id)
    return [PaymentResponse.from_payment(payment) for payment in payments]


@payment_router.get("/order/{order_id}", response_model=PaymentResponse)
async def order_payment(order_id: str, identity: Identity = Depends(current_identity)) -> PaymentResponse:
    """The most recent payment attempt of an order."""
    order = OrderQueries(current_domain).get_for(order_id, identity.user_id, is_admin=True)
    if not identity.is_admin and not order.belongs_to(identity.user_id):
        raise HTTPException(status_code=403, detail="Access denied")

    payment = PaymentLookup(current_domain).latest_for_order(order_id)
    if payment is None:
        raise HTTPException(status_code=404, detail="No payment found for this order")
    return PaymentResponse.from_payment(payment)


@payment_router.post("/{reference}/refund", response_model=PaymentResponse)
async def refund_payment(reference: str, identity: Identity = Depends(require_admin)) -> PaymentResponse:
    """Refund a payment by transaction id or payment id."""
    payment = current_domain.process(RefundPayment(reference=reference), asynchronous=False)
    return PaymentResponse.from_payment(payment)
