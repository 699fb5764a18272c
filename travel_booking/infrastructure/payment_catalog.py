"""Catálogo de métodos de pago y cuentas bancarias definido por configuración."""

from travel_booking.application.interfaces.payment_catalog import PaymentCatalog
from travel_booking.config import Settings
from travel_booking.domain.entities.payment import PaymentMethod
from travel_booking.domain.entities.payment_option import (
    BankAccount,
    PaymentMethodConfig,
    ProcessingFee,
)


class StaticPaymentCatalog(PaymentCatalog):
    def __init__(
        self,
        methods: list[PaymentMethodConfig],
        bank_accounts: list[BankAccount] | None = None,
    ) -> None:
        self._methods = {PaymentMethod(m.method): m for m in methods}
        self._bank_accounts = list(bank_accounts or [])

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaticPaymentCatalog":
        methods = [
            PaymentMethodConfig(
                method=m.method,
                name=m.name,
                description=m.description,
                icon=m.icon,
                enabled=m.enabled,
                requires_verification=m.requires_verification,
                min_amount=m.min_amount,
                max_amount=m.max_amount,
                processing_fee=ProcessingFee(m.processing_fee_type, m.processing_fee_value)
                if m.processing_fee_type and m.processing_fee_value is not None
                else None,
                sort_order=m.sort_order,
            )
            for m in settings.payment_methods
        ]
        accounts = [BankAccount(**a.model_dump()) for a in settings.bank_accounts]
        return cls(methods, accounts)

    async def list_methods(self) -> list[PaymentMethodConfig]:
        enabled = [m for m in self._methods.values() if m.enabled]
        return sorted(enabled, key=lambda m: m.sort_order)

    async def get_method(self, method: PaymentMethod) -> PaymentMethodConfig | None:
        return self._methods.get(PaymentMethod(method))

    async def list_bank_accounts(self) -> list[BankAccount]:
        enabled = [a for a in self._bank_accounts if a.enabled]
        return sorted(enabled, key=lambda a: (not a.is_primary, a.sort_order))
