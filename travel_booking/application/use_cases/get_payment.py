from travel_booking.application.interfaces.payment_repo import PaymentRepo
from travel_booking.domain.entities.payment import Payment
from travel_booking.domain.errors import PaymentNotFoundError


class GetPaymentUseCase:
    def __init__(self, payment_repo: PaymentRepo) -> None:
        self._payment_repo = payment_repo

    async def execute(self, user_id: str, payment_id: str) -> Payment:
        payment = await self._payment_repo.get(payment_id)
        if payment is None or payment.user_id != user_id:
            raise PaymentNotFoundError(payment_id)
        return payment
