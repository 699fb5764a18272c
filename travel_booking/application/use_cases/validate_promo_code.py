import logging
from collections.abc import Sequence
from decimal import Decimal

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.application.interfaces.promo_code_repo import PromoCodeRepo
from travel_booking.domain.entities.promo_code import PromoCode, normalize_code
from travel_booking.domain.services.promo_evaluator import PromoEvaluation, evaluate_promo_code


class ValidatePromoCodeUseCase:
    """
    Evalúa un código sin consumirlo.

    Solo lee: el código, el conteo de redenciones del usuario y si tiene
    órdenes previas. Nunca modifica usage_count ni el ledger.
    """

    def __init__(
        self,
        promo_code_repo: PromoCodeRepo,
        order_repo: OrderRepo,
        clock: Clock,
    ) -> None:
        self._promo_code_repo = promo_code_repo
        self._order_repo = order_repo
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        code: str,
        subtotal: Decimal,
        currency: str | None = None,
        service_type: str | None = None,
        user_id: str | None = None,
    ) -> PromoEvaluation:
        promo = await self._promo_code_repo.get_by_code(normalize_code(code))
        return await self.evaluate_loaded(
            promo,
            subtotal=subtotal,
            currency=currency,
            service_types=[service_type] if service_type else [],
            user_id=user_id,
        )

    async def evaluate_loaded(
        self,
        promo: PromoCode | None,
        subtotal: Decimal,
        currency: str | None,
        service_types: Sequence[str],
        user_id: str | None,
        exclude_order_id: str | None = None,
    ) -> PromoEvaluation:
        """
        Evalúa un código ya leído contra cada tipo de servicio.

        Gana el primer tipo de servicio que falla; sin tipos se omite esa regla.
        """
        user_usage_count = None
        has_previous_orders = None
        if promo is not None and user_id:
            user_usage_count = await self._promo_code_repo.count_user_usages(user_id, promo.id)
            if promo.first_order_only:
                has_previous_orders = await self._order_repo.has_previous_orders(
                    user_id, exclude_order_id=exclude_order_id
                )

        now = self._clock.now()
        evaluation: PromoEvaluation | None = None
        for service_type in list(service_types) or [None]:
            evaluation = evaluate_promo_code(
                promo,
                subtotal=subtotal,
                now=now,
                currency=currency,
                service_type=service_type,
                user_usage_count=user_usage_count,
                has_previous_orders=has_previous_orders,
            )
            if not evaluation.valid:
                self._logger.info(
                    "Promo code rejected",
                    extra={
                        "promo_code": promo.code if promo else None,
                        "user_id": user_id,
                        "reason": evaluation.reason,
                    },
                )
                break
        return evaluation
