from fastapi import APIRouter, Depends, Query, status

from travel_booking.api.dependencies import get_current_user_id, get_use_cases
from travel_booking.api.schemas.orders import (
    CancelOrderRequest,
    CreateOrderFromQuoteRequest,
    CreateOrderRequest,
    OrderListResponse,
    OrderResponse,
    SubBookingResponse,
    UpdateOrderStatusRequest,
)
from travel_booking.application.use_cases.create_order import CreateOrderCommand, OrderItemInput
from travel_booking.domain.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from travel_booking.infrastructure.db.retry import retry_on_deadlock

router = APIRouter()


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: CreateOrderRequest,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    """Crea una orden directa; los totales se recalculan en el servidor."""
    command = CreateOrderCommand(
        user_id=user_id,
        items=[OrderItemInput(**item.model_dump()) for item in payload.items],
        payment_method=payload.payment_method,
        payment_reference=payload.payment_reference,
        status_intent=payload.status,
        currency=payload.currency,
        promo_code=payload.promo_code,
    )
    return await retry_on_deadlock(lambda: use_cases["create_order"].execute(command))


@router.post(
    "/orders/from-quote/{quote_id}",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_order_from_quote(
    quote_id: str,
    payload: CreateOrderFromQuoteRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    payload = payload or CreateOrderFromQuoteRequest()
    command = CreateOrderCommand(
        user_id=user_id,
        quote_id=quote_id,
        payment_method=payload.payment_method,
        payment_reference=payload.payment_reference,
        status_intent=payload.status,
    )
    return await retry_on_deadlock(lambda: use_cases["create_order"].execute(command))


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
) -> OrderListResponse:
    result = await use_cases["list_orders"].execute(user_id=user_id, page=page, limit=limit)
    return OrderListResponse(
        items=[OrderResponse.model_validate(order) for order in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    return await use_cases["get_order"].execute(user_id=user_id, order_id=order_id)


@router.get("/orders/{order_id}/bookings/{booking_id}", response_model=SubBookingResponse)
async def get_sub_booking(
    order_id: str,
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    return await use_cases["get_sub_booking"].execute(
        user_id=user_id, order_id=order_id, booking_id=booking_id
    )


@router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    payload: CancelOrderRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    reason = payload.reason if payload else None
    return await retry_on_deadlock(
        lambda: use_cases["cancel_order"].execute(user_id=user_id, order_id=order_id, reason=reason)
    )


@router.post("/admin/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    payload: UpdateOrderStatusRequest,
    use_cases=Depends(get_use_cases),
):
    return await use_cases["update_order_status"].execute(order_id=order_id, action=payload.action)
