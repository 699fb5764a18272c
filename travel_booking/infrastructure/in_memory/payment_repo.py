import copy

from travel_booking.application.interfaces.payment_repo import PaymentRepo
from travel_booking.domain.entities.payment import Payment
from travel_booking.domain.errors import DuplicateIdempotencyKeyError
from travel_booking.infrastructure.in_memory.store import SnapshotStore


class InMemoryPaymentRepo(SnapshotStore, PaymentRepo):
    _state_attrs = ("_by_id", "_by_idem_key")

    def __init__(self) -> None:
        self._by_id: dict[str, Payment] = {}
        self._by_idem_key: dict[str, str] = {}

    async def create(self, payment: Payment) -> Payment:
        if payment.idempotency_key in self._by_idem_key:
            raise DuplicateIdempotencyKeyError(payment.idempotency_key)
        self._by_id[payment.id] = copy.deepcopy(payment)
        self._by_idem_key[payment.idempotency_key] = payment.id
        return payment

    async def get(self, payment_id: str, for_update: bool = False) -> Payment | None:
        payment = self._by_id.get(payment_id)
        return copy.deepcopy(payment) if payment else None

    async def get_by_idempotency_key(self, idem_key: str) -> Payment | None:
        payment_id = self._by_idem_key.get(idem_key)
        return await self.get(payment_id) if payment_id else None

    async def save(self, payment: Payment) -> None:
        self._by_id[payment.id] = copy.deepcopy(payment)

    # Helpers para tests
    def count(self) -> int:
        return len(self._by_id)
