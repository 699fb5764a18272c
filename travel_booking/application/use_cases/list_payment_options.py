from travel_booking.application.interfaces.payment_catalog import PaymentCatalog
from travel_booking.domain.entities.payment_option import BankAccount, PaymentMethodConfig


class ListPaymentMethodsUseCase:
    def __init__(self, payment_catalog: PaymentCatalog) -> None:
        self._payment_catalog = payment_catalog

    async def execute(self) -> list[PaymentMethodConfig]:
        return await self._payment_catalog.list_methods()


class ListBankAccountsUseCase:
    """Cuentas para transferencias manuales (método bank_transfer)."""

    def __init__(self, payment_catalog: PaymentCatalog) -> None:
        self._payment_catalog = payment_catalog

    async def execute(self) -> list[BankAccount]:
        return await self._payment_catalog.list_bank_accounts()
