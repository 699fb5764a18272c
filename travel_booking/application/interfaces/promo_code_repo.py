from datetime import datetime

from travel_booking.domain.entities.promo_code import PromoCode, PromoCodeUsage


class PromoCodeRepo:
    async def get_by_code(self, code: str, for_update: bool = False) -> PromoCode | None:
        raise NotImplementedError

    async def get(self, promo_id: str) -> PromoCode | None:
        raise NotImplementedError

    async def create(self, promo: PromoCode) -> PromoCode:
        """Raises DuplicatePromoCodeError si el código ya existe."""
        raise NotImplementedError

    async def update(self, promo: PromoCode) -> PromoCode:
        raise NotImplementedError

    async def list_active(self, now: datetime) -> list[PromoCode]:
        raise NotImplementedError

    async def count_user_usages(self, user_id: str, promo_code_id: str) -> int:
        raise NotImplementedError

    async def add_usage(self, usage: PromoCodeUsage) -> PromoCodeUsage:
        raise NotImplementedError

    async def increment_usage(self, promo_code_id: str) -> bool:
        """
        Incrementa usage_count solo si queda cupo.

        Returns:
            False si el límite global ya se alcanzó.
        """
        raise NotImplementedError
