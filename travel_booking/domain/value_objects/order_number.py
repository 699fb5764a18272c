"""Value Object OrderNumber - número legible y único de una orden."""

import secrets
import string
import time
from dataclasses import dataclass

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    """Convierte un entero no negativo a base 36 en mayúsculas."""
    if value < 0:
        raise ValueError("to_base36 solo acepta enteros no negativos")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


@dataclass(frozen=True)
class OrderNumber:
    """
    Value Object inmutable con el número de orden visible para el cliente.

    Formato: ORD-<timestamp en ms base36>-<4 caracteres aleatorios base36>
    (ej: ORD-LZ8K2Q1A-7F3K).
    """

    value: str

    PREFIX = "ORD"
    RANDOM_LENGTH = 4

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("order_number no puede estar vacío")
        if len(self.value) > 50:
            raise ValueError(f"order_number excede 50 caracteres: {len(self.value)}")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls, timestamp_ms: int | None = None) -> "OrderNumber":
        """Genera un número de orden nuevo a partir del timestamp actual."""
        if timestamp_ms is None:
            timestamp_ms = time.time_ns() // 1_000_000
        suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(cls.RANDOM_LENGTH))
        return cls(value=f"{cls.PREFIX}-{to_base36(timestamp_ms)}-{suffix}")
