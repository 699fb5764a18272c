"""Configuración de métodos de pago y cuentas bancarias para transferencias."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from travel_booking.domain.entities.payment import PaymentMethod
from travel_booking.domain.errors import ValidationError
from travel_booking.domain.value_objects.money import round_money


class ProcessingFeeType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class ProcessingFee:
    type: ProcessingFeeType
    value: Decimal

    def amount_for(self, amount: Decimal) -> Decimal:
        if self.type == ProcessingFeeType.PERCENTAGE:
            return round_money(amount * self.value / Decimal("100"))
        return round_money(self.value)


@dataclass(frozen=True)
class PaymentMethodConfig:
    """
    Método de pago ofrecido al cliente.

    Los límites min/max se aplican al iniciar el pago. Los métodos con
    requires_verification (transferencia bancaria) se confirman manualmente.
    """

    method: PaymentMethod
    name: str
    description: str | None = None
    icon: str | None = None
    enabled: bool = True
    requires_verification: bool = False
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    processing_fee: ProcessingFee | None = None
    sort_order: int = 0

    def check_amount(self, amount: Decimal) -> None:
        label = PaymentMethod(self.method).value
        if self.min_amount is not None and amount < self.min_amount:
            raise ValidationError(
                "amount", f"Minimum amount for {label} is {round_money(self.min_amount)}"
            )
        if self.max_amount is not None and amount > self.max_amount:
            raise ValidationError(
                "amount", f"Maximum amount for {label} is {round_money(self.max_amount)}"
            )


@dataclass(frozen=True)
class BankAccount:
    id: str
    bank_name: str
    account_name: str
    iban: str
    swift_code: str | None = None
    instructions: str | None = None
    is_primary: bool = False
    enabled: bool = True
    sort_order: int = 0
