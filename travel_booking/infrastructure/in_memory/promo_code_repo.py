import copy
from datetime import datetime

from travel_booking.application.interfaces.promo_code_repo import PromoCodeRepo
from travel_booking.domain.entities.promo_code import PromoCode, PromoCodeStatus, PromoCodeUsage
from travel_booking.domain.errors import DuplicatePromoCodeError
from travel_booking.infrastructure.in_memory.store import SnapshotStore


class InMemoryPromoCodeRepo(SnapshotStore, PromoCodeRepo):
    _state_attrs = ("_promos", "_usages")

    def __init__(self) -> None:
        self._promos: dict[str, PromoCode] = {}
        self._usages: list[PromoCodeUsage] = []

    async def get_by_code(self, code: str, for_update: bool = False) -> PromoCode | None:
        for promo in self._promos.values():
            if promo.code == code:
                return copy.deepcopy(promo)
        return None

    async def get(self, promo_id: str) -> PromoCode | None:
        promo = self._promos.get(promo_id)
        return copy.deepcopy(promo) if promo else None

    async def create(self, promo: PromoCode) -> PromoCode:
        if any(existing.code == promo.code for existing in self._promos.values()):
            raise DuplicatePromoCodeError(promo.code)
        self._promos[promo.id] = copy.deepcopy(promo)
        return promo

    async def update(self, promo: PromoCode) -> PromoCode:
        if any(p.code == promo.code and p.id != promo.id for p in self._promos.values()):
            raise DuplicatePromoCodeError(promo.code)
        self._promos[promo.id] = copy.deepcopy(promo)
        return promo

    async def list_active(self, now: datetime) -> list[PromoCode]:
        active = [
            copy.deepcopy(p)
            for p in self._promos.values()
            if p.status == PromoCodeStatus.ACTIVE
            and (p.valid_from is None or p.valid_from <= now)
            and (p.valid_until is None or p.valid_until >= now)
        ]
        return sorted(active, key=lambda p: p.created_at or now, reverse=True)

    async def count_user_usages(self, user_id: str, promo_code_id: str) -> int:
        return sum(
            1 for u in self._usages if u.user_id == user_id and u.promo_code_id == promo_code_id
        )

    async def add_usage(self, usage: PromoCodeUsage) -> PromoCodeUsage:
        self._usages.append(copy.deepcopy(usage))
        return usage

    async def increment_usage(self, promo_code_id: str) -> bool:
        promo = self._promos.get(promo_code_id)
        if promo is None or not promo.has_usage_left:
            return False
        promo.usage_count += 1
        return True

    # Helpers para tests
    def usages(self) -> list[PromoCodeUsage]:
        return copy.deepcopy(self._usages)
