from typing import Any

from travel_booking.application.interfaces.promo_code_repo import PromoCodeRepo
from travel_booking.application.use_cases.get_cart import CartMutation
from travel_booking.application.use_cases.validate_promo_code import ValidatePromoCodeUseCase
from travel_booking.domain.entities.promo_code import normalize_code
from travel_booking.domain.entities.quote import Quote
from travel_booking.domain.errors import PromoCodeNotApplicableError


class ApplyCartPromoUseCase(CartMutation):
    """
    Aplica un código al borrador.

    Valida contra el subtotal actual, la moneda del carrito y cada tipo de
    servicio del carrito. No consume el código: eso ocurre al crear la orden.
    """

    def __init__(
        self,
        *args: Any,
        promo_code_repo: PromoCodeRepo,
        validator: ValidatePromoCodeUseCase,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._promo_code_repo = promo_code_repo
        self._validator = validator

    async def execute(self, user_id: str, code: str) -> Quote:
        code = normalize_code(code)
        async with self._transaction_manager.start():
            quote = await self._draft_loader.load(user_id)
            quote.recalculate(self._tax_rate)
            promo = await self._promo_code_repo.get_by_code(code)
            evaluation = await self._validator.evaluate_loaded(
                promo,
                subtotal=quote.subtotal,
                currency=quote.currency,
                service_types=quote.service_types,
                user_id=user_id,
            )
            if not evaluation.valid:
                raise PromoCodeNotApplicableError(evaluation.reason, evaluation.min_order_amount)

            quote.attach_promo(
                code=promo.code,
                promo_type=promo.type,
                value=promo.value,
                max_discount=promo.max_discount_amount,
            )
            quote = await self._recalculate_and_save(quote)

        self._logger.info(
            "Promo code applied to cart",
            extra={"quote_id": quote.id, "promo_code": code, "discount": str(quote.discount)},
        )
        return quote
