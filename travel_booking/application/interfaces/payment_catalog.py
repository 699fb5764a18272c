from travel_booking.domain.entities.payment import PaymentMethod
from travel_booking.domain.entities.payment_option import BankAccount, PaymentMethodConfig


class PaymentCatalog:
    """Métodos de pago y cuentas bancarias que el servicio ofrece."""

    async def list_methods(self) -> list[PaymentMethodConfig]:
        """Solo métodos habilitados, ordenados por sort_order."""
        raise NotImplementedError

    async def get_method(self, method: PaymentMethod) -> PaymentMethodConfig | None:
        raise NotImplementedError

    async def list_bank_accounts(self) -> list[BankAccount]:
        """Cuentas habilitadas; la principal primero."""
        raise NotImplementedError
