from fastapi import APIRouter, Depends, status

from travel_booking.api.dependencies import get_current_user_id, get_use_cases
from travel_booking.api.schemas.cart import (
    AddCartItemRequest,
    ApplyPromoRequest,
    CheckoutResponse,
    QuoteResponse,
)
from travel_booking.application.use_cases.add_cart_item import AddCartItemCommand
from travel_booking.infrastructure.db.retry import retry_on_deadlock

router = APIRouter()


@router.get("/cart", response_model=QuoteResponse)
async def get_cart(
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    return await use_cases["get_cart"].execute(user_id=user_id)


@router.post("/cart/items", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    payload: AddCartItemRequest,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    command = AddCartItemCommand(**payload.model_dump())
    return await retry_on_deadlock(
        lambda: use_cases["add_cart_item"].execute(user_id=user_id, command=command)
    )


@router.delete("/cart/items/{item_id}", response_model=QuoteResponse)
async def remove_cart_item(
    item_id: str,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    return await retry_on_deadlock(
        lambda: use_cases["remove_cart_item"].execute(user_id=user_id, item_id=item_id)
    )


@router.post("/cart/promo", response_model=QuoteResponse)
async def apply_cart_promo(
    payload: ApplyPromoRequest,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    return await retry_on_deadlock(
        lambda: use_cases["apply_cart_promo"].execute(user_id=user_id, code=payload.code)
    )


@router.delete("/cart/promo", response_model=QuoteResponse)
async def remove_cart_promo(
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    return await use_cases["remove_cart_promo"].execute(user_id=user_id)


@router.post("/cart/checkout", response_model=CheckoutResponse)
async def checkout_cart(
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
) -> CheckoutResponse:
    result = await use_cases["checkout_cart"].execute(user_id=user_id)
    return CheckoutResponse(
        order_id=result.quote.id,
        checkout_url=result.checkout_url,
        quote=QuoteResponse.model_validate(result.quote),
    )
