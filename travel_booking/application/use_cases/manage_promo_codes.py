"""Administración de códigos promocionales."""

import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import Any

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.id_generator import IdGenerator
from travel_booking.application.interfaces.promo_code_repo import PromoCodeRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.domain.entities.promo_code import PromoCode, PromoCodeStatus, normalize_code
from travel_booking.domain.errors import (
    DuplicatePromoCodeError,
    PromoCodeNotFoundError,
    ValidationError,
)
from travel_booking.domain.value_objects.money import round_money
from travel_booking.domain.value_objects.promo_type import PromoCodeType

logger = logging.getLogger(__name__)


@dataclass
class PromoCodeInput:
    code: str
    name: str
    type: PromoCodeType
    value: Decimal
    description: str | None = None
    min_order_amount: Decimal | None = None
    max_discount_amount: Decimal | None = None
    usage_limit: int | None = None
    per_user_limit: int | None = 1
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    status: PromoCodeStatus = PromoCodeStatus.ACTIVE
    applicable_services: list[str] | None = None
    applicable_currencies: list[str] | None = None
    first_order_only: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


UPDATABLE_FIELDS = frozenset(f.name for f in fields(PromoCodeInput))


def _validate(promo: PromoCode) -> None:
    if not promo.code:
        raise ValidationError("code", "Code is required")
    if promo.value is None or promo.value <= 0:
        raise ValidationError("value", "Value must be greater than 0")
    if PromoCodeType(promo.type) == PromoCodeType.PERCENTAGE and promo.value > 100:
        raise ValidationError("value", "Percentage value cannot exceed 100")
    if promo.min_order_amount is not None and promo.min_order_amount < 0:
        raise ValidationError("min_order_amount", "Must be 0 or greater")
    if promo.max_discount_amount is not None and promo.max_discount_amount <= 0:
        raise ValidationError("max_discount_amount", "Must be greater than 0")
    if promo.usage_limit is not None and promo.usage_limit < 1:
        raise ValidationError("usage_limit", "Must be at least 1")
    if promo.per_user_limit is not None and promo.per_user_limit < 1:
        raise ValidationError("per_user_limit", "Must be at least 1")
    if promo.valid_from and promo.valid_until and promo.valid_from >= promo.valid_until:
        raise ValidationError("valid_until", "Must be after valid_from")


def _normalize_money(promo: PromoCode) -> None:
    promo.value = round_money(promo.value)
    if promo.min_order_amount is not None:
        promo.min_order_amount = round_money(promo.min_order_amount)
    if promo.max_discount_amount is not None:
        promo.max_discount_amount = round_money(promo.max_discount_amount)
    if promo.applicable_currencies:
        promo.applicable_currencies = [c.upper() for c in promo.applicable_currencies]


class CreatePromoCodeUseCase:
    def __init__(
        self,
        promo_code_repo: PromoCodeRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        id_generator: IdGenerator,
    ) -> None:
        self._promo_code_repo = promo_code_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._id_generator = id_generator

    async def execute(self, data: PromoCodeInput) -> PromoCode:
        now = self._clock.now()
        promo = PromoCode(
            id=self._id_generator.new_id(),
            created_at=now,
            updated_at=now,
            **{f.name: getattr(data, f.name) for f in fields(PromoCodeInput)},
        )
        _normalize_money(promo)
        _validate(promo)

        async with self._transaction_manager.start():
            if await self._promo_code_repo.get_by_code(promo.code):
                raise DuplicatePromoCodeError(promo.code)
            created = await self._promo_code_repo.create(promo)

        logger.info("Promo code created", extra={"promo_code": created.code, "promo_id": created.id})
        return created


class UpdatePromoCodeUseCase:
    """Actualización parcial; el código se vuelve a normalizar a mayúsculas."""

    def __init__(
        self,
        promo_code_repo: PromoCodeRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._promo_code_repo = promo_code_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, promo_id: str, changes: dict[str, Any]) -> PromoCode:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(sorted(unknown)[0], "Field cannot be updated")

        async with self._transaction_manager.start():
            promo = await self._promo_code_repo.get(promo_id)
            if promo is None:
                raise PromoCodeNotFoundError(promo_id)

            for name, value in changes.items():
                setattr(promo, name, value)
            if "code" in changes:
                promo.code = normalize_code(promo.code)
                existing = await self._promo_code_repo.get_by_code(promo.code)
                if existing and existing.id != promo.id:
                    raise DuplicatePromoCodeError(promo.code)

            _normalize_money(promo)
            _validate(promo)
            promo.updated_at = self._clock.now()
            updated = await self._promo_code_repo.update(promo)

        logger.info(
            "Promo code updated",
            extra={"promo_id": promo_id, "fields": sorted(changes)},
        )
        return updated


class DeactivatePromoCodeUseCase:
    def __init__(
        self,
        promo_code_repo: PromoCodeRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._promo_code_repo = promo_code_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, promo_id: str) -> PromoCode:
        async with self._transaction_manager.start():
            promo = await self._promo_code_repo.get(promo_id)
            if promo is None:
                raise PromoCodeNotFoundError(promo_id)
            promo.deactivate()
            promo.updated_at = self._clock.now()
            updated = await self._promo_code_repo.update(promo)

        logger.info("Promo code deactivated", extra={"promo_id": promo_id})
        return updated


class ListActivePromoCodesUseCase:
    """Códigos activos y vigentes ahora, más recientes primero."""

    def __init__(self, promo_code_repo: PromoCodeRepo, clock: Clock) -> None:
        self._promo_code_repo = promo_code_repo
        self._clock = clock

    async def execute(self) -> list[PromoCode]:
        return await self._promo_code_repo.list_active(self._clock.now())
