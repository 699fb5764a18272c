from fastapi import APIRouter, Depends, Header, status

from travel_booking.api.dependencies import get_use_cases
from travel_booking.api.schemas.promo_codes import (
    NULLABLE_PROMO_FIELDS,
    PromoCodeCreateRequest,
    PromoCodeResponse,
    PromoCodeUpdateRequest,
    PublicPromoCodeResponse,
    ValidatePromoRequest,
    ValidatePromoResponse,
)
from travel_booking.application.use_cases.manage_promo_codes import PromoCodeInput

router = APIRouter()


@router.post("/promo-codes/validate", response_model=ValidatePromoResponse)
async def validate_promo_code(
    payload: ValidatePromoRequest,
    user_id: str | None = Header(default=None, alias="X-User-Id"),
    use_cases=Depends(get_use_cases),
):
    """Evalúa un código sin consumirlo; el usuario es opcional."""
    return await use_cases["validate_promo"].execute(
        code=payload.code,
        subtotal=payload.subtotal,
        currency=payload.currency,
        service_type=payload.service_type.value if payload.service_type else None,
        user_id=user_id,
    )


@router.get("/promo-codes/active", response_model=list[PublicPromoCodeResponse])
async def list_active_promo_codes(use_cases=Depends(get_use_cases)):
    return await use_cases["list_active_promos"].execute()


@router.post(
    "/admin/promo-codes",
    response_model=PromoCodeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_promo_code(
    payload: PromoCodeCreateRequest,
    use_cases=Depends(get_use_cases),
):
    return await use_cases["create_promo"].execute(PromoCodeInput(**payload.model_dump()))


@router.patch("/admin/promo-codes/{promo_id}", response_model=PromoCodeResponse)
async def update_promo_code(
    promo_id: str,
    payload: PromoCodeUpdateRequest,
    use_cases=Depends(get_use_cases),
):
    changes = {
        name: value
        for name, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or name in NULLABLE_PROMO_FIELDS
    }
    return await use_cases["update_promo"].execute(promo_id=promo_id, changes=changes)


@router.delete("/admin/promo-codes/{promo_id}", response_model=PromoCodeResponse)
async def deactivate_promo_code(
    promo_id: str,
    use_cases=Depends(get_use_cases),
):
    return await use_cases["deactivate_promo"].execute(promo_id=promo_id)
