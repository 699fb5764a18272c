import logging
from collections.abc import Sequence
from decimal import Decimal

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.id_generator import IdGenerator
from travel_booking.application.interfaces.promo_code_repo import PromoCodeRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.application.use_cases.validate_promo_code import ValidatePromoCodeUseCase
from travel_booking.domain.entities.promo_code import PromoCodeUsage, normalize_code
from travel_booking.domain.errors import PromoCodeNotApplicableError
from travel_booking.domain.services.promo_evaluator import INVALID_CODE, USAGE_LIMIT_REACHED


class RedeemPromoCodeUseCase:
    """
    Consume un uso de un código para una orden.

    Es el único camino que escribe en el ledger. Dentro de una transacción
    bloquea la fila del código, recuenta, re-evalúa, inserta el uso e
    incrementa usage_count con un update condicionado; así dos redenciones
    concurrentes del mismo usuario no pueden superar per_user_limit.
    """

    def __init__(
        self,
        promo_code_repo: PromoCodeRepo,
        validator: ValidatePromoCodeUseCase,
        transaction_manager: TransactionManager,
        clock: Clock,
        id_generator: IdGenerator,
    ) -> None:
        self._promo_code_repo = promo_code_repo
        self._validator = validator
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._id_generator = id_generator
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        code: str,
        user_id: str,
        order_id: str,
        subtotal: Decimal,
        currency: str,
        service_types: Sequence[str] = (),
        discount_amount: Decimal | None = None,
    ) -> PromoCodeUsage:
        """
        discount_amount es el descuento efectivamente cobrado en la orden; si
        falta se registra el que resulta de re-evaluar el código ahora.
        """
        async with self._transaction_manager.start():
            promo = await self._promo_code_repo.get_by_code(normalize_code(code), for_update=True)
            evaluation = await self._validator.evaluate_loaded(
                promo,
                subtotal=subtotal,
                currency=currency,
                service_types=service_types,
                user_id=user_id,
                exclude_order_id=order_id,
            )
            if promo is None or not evaluation.valid:
                raise PromoCodeNotApplicableError(
                    evaluation.reason or INVALID_CODE, evaluation.min_order_amount
                )

            if discount_amount is None:
                discount_amount = evaluation.discount_amount

            usage = await self._promo_code_repo.add_usage(
                PromoCodeUsage(
                    id=self._id_generator.new_id(),
                    user_id=user_id,
                    promo_code_id=promo.id,
                    order_id=order_id,
                    discount_amount=discount_amount,
                    order_amount=subtotal,
                    currency=currency,
                    applied_at=self._clock.now(),
                )
            )
            if not await self._promo_code_repo.increment_usage(promo.id):
                raise PromoCodeNotApplicableError(USAGE_LIMIT_REACHED)

            self._logger.info(
                "Promo code redeemed",
                extra={
                    "promo_code": promo.code,
                    "user_id": user_id,
                    "order_id": order_id,
                    "discount_amount": str(discount_amount),
                },
            )
            return usage
