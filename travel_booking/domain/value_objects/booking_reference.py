"""Value Object BookingReference - referencia de proveedor de una sub-reserva."""

import time
from dataclasses import dataclass

SERVICE_PREFIXES = {
    "flight": "FLT",
    "hotel": "HTL",
    "visa": "VSA",
    "hajj": "HJJ",
    "package": "PKG",
}


@dataclass(frozen=True)
class BookingReference:
    """
    Referencia de reserva del proveedor.

    Cuando el proveedor no entrega una, se genera con el formato
    <prefijo de 3 letras>-<últimos 6 dígitos del timestamp en ms> (ej: FLT-482913).
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("booking_reference no puede estar vacío")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls, service_type: str, timestamp_ms: int | None = None) -> "BookingReference":
        # Acepta el enum ServiceType o su valor
        key = getattr(service_type, "value", service_type)
        prefix = SERVICE_PREFIXES.get(str(key).lower())
        if prefix is None:
            raise ValueError(f"Tipo de servicio sin prefijo de referencia: {service_type}")
        if timestamp_ms is None:
            timestamp_ms = time.time_ns() // 1_000_000
        return cls(value=f"{prefix}-{str(timestamp_ms)[-6:].zfill(6)}")
