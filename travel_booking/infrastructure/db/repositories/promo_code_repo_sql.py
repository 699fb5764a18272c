from datetime import datetime

from sqlalchemy import func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.application.interfaces.promo_code_repo import PromoCodeRepo
from travel_booking.domain.entities.promo_code import PromoCode, PromoCodeStatus, PromoCodeUsage
from travel_booking.domain.errors import DuplicatePromoCodeError
from travel_booking.domain.value_objects.promo_type import PromoCodeType
from travel_booking.infrastructure.db.mapping import as_decimal, row_values
from travel_booking.infrastructure.db.tables import promo_code_usages, promo_codes

PROMO_DATETIMES = ("valid_from", "valid_until", "created_at", "updated_at")


class PromoCodeRepoSQL(PromoCodeRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_code(self, code: str, for_update: bool = False) -> PromoCode | None:
        stmt = select(promo_codes).where(promo_codes.c.code == code)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_promo(row) if row else None

    async def get(self, promo_id: str) -> PromoCode | None:
        stmt = select(promo_codes).where(promo_codes.c.id == promo_id)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_promo(row) if row else None

    async def create(self, promo: PromoCode) -> PromoCode:
        try:
            async with self._session.begin_nested():
                await self._session.execute(insert(promo_codes).values(**self._promo_values(promo)))
        except IntegrityError:
            raise DuplicatePromoCodeError(promo.code) from None
        return promo

    async def update(self, promo: PromoCode) -> PromoCode:
        values = self._promo_values(promo)
        values.pop("id")
        values.pop("created_at")
        # usage_count solo cambia por increment_usage
        values.pop("usage_count")
        stmt = update(promo_codes).where(promo_codes.c.id == promo.id).values(**values)
        try:
            async with self._session.begin_nested():
                await self._session.execute(stmt)
        except IntegrityError:
            raise DuplicatePromoCodeError(promo.code) from None
        return promo

    async def list_active(self, now: datetime) -> list[PromoCode]:
        stmt = (
            select(promo_codes)
            .where(
                promo_codes.c.status == PromoCodeStatus.ACTIVE.value,
                or_(promo_codes.c.valid_from.is_(None), promo_codes.c.valid_from <= now),
                or_(promo_codes.c.valid_until.is_(None), promo_codes.c.valid_until >= now),
            )
            .order_by(promo_codes.c.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._map_promo(row) for row in result.mappings().all()]

    async def count_user_usages(self, user_id: str, promo_code_id: str) -> int:
        stmt = select(func.count()).select_from(promo_code_usages).where(
            promo_code_usages.c.user_id == user_id,
            promo_code_usages.c.promo_code_id == promo_code_id,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def add_usage(self, usage: PromoCodeUsage) -> PromoCodeUsage:
        stmt = insert(promo_code_usages).values(
            id=usage.id,
            user_id=usage.user_id,
            promo_code_id=usage.promo_code_id,
            order_id=usage.order_id,
            discount_amount=usage.discount_amount,
            order_amount=usage.order_amount,
            currency=usage.currency,
            applied_at=usage.applied_at,
        )
        await self._session.execute(stmt)
        return usage

    async def increment_usage(self, promo_code_id: str) -> bool:
        stmt = (
            update(promo_codes)
            .where(
                promo_codes.c.id == promo_code_id,
                or_(
                    promo_codes.c.usage_limit.is_(None),
                    promo_codes.c.usage_count < promo_codes.c.usage_limit,
                ),
            )
            .values(usage_count=promo_codes.c.usage_count + 1)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    def _map_promo(self, row) -> PromoCode:
        data = row_values(row, PROMO_DATETIMES)
        return PromoCode(
            id=data["id"],
            code=data["code"],
            name=data["name"],
            description=data["description"],
            type=PromoCodeType(data["type"]),
            value=as_decimal(data["value"]),
            min_order_amount=as_decimal(data["min_order_amount"]),
            max_discount_amount=as_decimal(data["max_discount_amount"]),
            usage_limit=data["usage_limit"],
            usage_count=data["usage_count"] or 0,
            per_user_limit=data["per_user_limit"],
            valid_from=data["valid_from"],
            valid_until=data["valid_until"],
            status=PromoCodeStatus(data["status"]),
            applicable_services=data["applicable_services"],
            applicable_currencies=data["applicable_currencies"],
            first_order_only=bool(data["first_order_only"]),
            metadata=data["metadata_json"] or {},
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )

    @staticmethod
    def _promo_values(promo: PromoCode) -> dict:
        return {
            "id": promo.id,
            "code": promo.code,
            "name": promo.name,
            "description": promo.description,
            "type": PromoCodeType(promo.type).value,
            "value": promo.value,
            "min_order_amount": promo.min_order_amount,
            "max_discount_amount": promo.max_discount_amount,
            "usage_limit": promo.usage_limit,
            "usage_count": promo.usage_count,
            "per_user_limit": promo.per_user_limit,
            "valid_from": promo.valid_from,
            "valid_until": promo.valid_until,
            "status": PromoCodeStatus(promo.status).value,
            "applicable_services": promo.applicable_services,
            "applicable_currencies": promo.applicable_currencies,
            "first_order_only": promo.first_order_only,
            "metadata_json": promo.metadata,
            "created_at": promo.created_at,
            "updated_at": promo.updated_at,
        }
