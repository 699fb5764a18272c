"""Interface IdGenerator - Puerto para generación de identificadores."""

import uuid
from abc import ABC, abstractmethod
from collections import deque

from travel_booking.domain.value_objects.booking_reference import BookingReference
from travel_booking.domain.value_objects.order_number import OrderNumber


class IdGenerator(ABC):
    """
    Puerto para generación de identificadores únicos.

    Permite inyectar implementaciones fake para testing determinista.
    """

    @abstractmethod
    def new_id(self) -> str:
        """Genera el id interno (UUID v4) de una entidad."""
        raise NotImplementedError

    @abstractmethod
    def order_number(self, timestamp_ms: int) -> str:
        """Genera un número de orden ORD-<base36 ts>-<4 aleatorios>."""
        raise NotImplementedError

    @abstractmethod
    def booking_reference(self, service_type: str, timestamp_ms: int) -> str:
        """Genera la referencia de proveedor <PREFIJO>-<6 dígitos>."""
        raise NotImplementedError

    @abstractmethod
    def idempotency_key(self) -> str:
        raise NotImplementedError


class RealIdGenerator(IdGenerator):
    """Implementación real basada en uuid4 y secrets."""

    def new_id(self) -> str:
        return str(uuid.uuid4())

    def order_number(self, timestamp_ms: int) -> str:
        return OrderNumber.generate(timestamp_ms).value

    def booking_reference(self, service_type: str, timestamp_ms: int) -> str:
        return BookingReference.generate(service_type, timestamp_ms).value

    def idempotency_key(self) -> str:
        return str(uuid.uuid4())


class FakeIdGenerator(IdGenerator):
    """
    Implementación fake para testing.

    Genera valores predecibles; `queue_order_numbers` fuerza colisiones.
    """

    def __init__(self, prefix: str = "test"):
        self._prefix = prefix
        self._id_counter = 0
        self._order_counter = 0
        self._idem_counter = 0
        self._queued_order_numbers: deque[str] = deque()

    def new_id(self) -> str:
        self._id_counter += 1
        hex_value = f"{self._id_counter:032x}"
        return f"{hex_value[:8]}-{hex_value[8:12]}-{hex_value[12:16]}-{hex_value[16:20]}-{hex_value[20:]}"

    def order_number(self, timestamp_ms: int) -> str:
        if self._queued_order_numbers:
            return self._queued_order_numbers.popleft()
        self._order_counter += 1
        return f"ORD-TEST-{self._order_counter:04d}"

    def booking_reference(self, service_type: str, timestamp_ms: int) -> str:
        return BookingReference.generate(service_type, timestamp_ms).value

    def idempotency_key(self) -> str:
        self._idem_counter += 1
        return f"idem-{self._prefix}-{self._idem_counter:06d}"

    def queue_order_numbers(self, *numbers: str) -> None:
        self._queued_order_numbers.extend(numbers)
