from travel_booking.domain.entities.payment import Payment


class PaymentRepo:
    async def create(self, payment: Payment) -> Payment:
        """Raises DuplicateIdempotencyKeyError si la key ya existe."""
        raise NotImplementedError

    async def get(self, payment_id: str, for_update: bool = False) -> Payment | None:
        raise NotImplementedError

    async def get_by_idempotency_key(self, idem_key: str) -> Payment | None:
        raise NotImplementedError

    async def save(self, payment: Payment) -> None:
        raise NotImplementedError
