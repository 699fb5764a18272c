"""Value Object TravelerSnapshot - datos de un viajero asociados a un ítem."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from travel_booking.domain.errors import ValidationError


class TravelerType(str, Enum):
    """Clasificación del viajero según su edad en la fecha del servicio."""

    ADULT = "adult"
    CHILD = "child"
    INFANT = "infant"


INFANT_MAX_AGE = 2
CHILD_MAX_AGE = 12


@dataclass(frozen=True)
class TravelerSnapshot:
    """
    Copia inmutable de un viajero tal como llegó en el carrito.

    Los valores derivados (nombre completo, edad, tipo) se calculan al leer
    con las funciones de este módulo; nunca se persisten.
    """

    first_name: str
    last_name: str
    middle_name: str | None = None
    date_of_birth: date | None = None
    declared_type: TravelerType | None = None
    id: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any], field: str = "traveler") -> "TravelerSnapshot":
        """
        Construye un snapshot desde el JSON libre del cliente.

        `field` nombra al viajero en el error si la fecha de nacimiento no es ISO.
        """
        first_name = payload.get("first_name") or payload.get("firstName") or ""
        last_name = payload.get("last_name") or payload.get("lastName") or ""
        if not first_name and payload.get("name"):
            parts = str(payload["name"]).split()
            first_name, last_name = parts[0], " ".join(parts[1:])

        raw_dob = payload.get("date_of_birth") or payload.get("dateOfBirth")
        dob = _parse_date_of_birth(raw_dob, f"{field}.date_of_birth") if raw_dob else None

        raw_type = payload.get("type")
        declared = TravelerType(raw_type) if raw_type in {t.value for t in TravelerType} else None

        return cls(
            id=payload.get("id"),
            first_name=first_name,
            last_name=last_name,
            middle_name=payload.get("middle_name") or payload.get("middleName"),
            date_of_birth=dob,
            declared_type=declared,
        )


def _parse_date_of_birth(raw: Any, field: str) -> date:
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        raise ValidationError(field, f"Invalid date, expected YYYY-MM-DD: {raw}") from None


def full_name(traveler: TravelerSnapshot) -> str:
    parts = [traveler.first_name, traveler.middle_name, traveler.last_name]
    return " ".join(part for part in parts if part)


def age_on(traveler: TravelerSnapshot, reference_date: date) -> int | None:
    """Edad cumplida en reference_date, o None si no hay fecha de nacimiento."""
    dob = traveler.date_of_birth
    if dob is None:
        return None
    age = reference_date.year - dob.year
    if (reference_date.month, reference_date.day) < (dob.month, dob.day):
        age -= 1
    return age


def traveler_type_on(traveler: TravelerSnapshot, reference_date: date) -> TravelerType:
    """
    Tipo de viajero en la fecha del servicio.

    Regla de negocio: menor de 2 años = infante, menor de 12 = niño.
    Sin fecha de nacimiento se respeta el tipo declarado (adulto por defecto).
    """
    age = age_on(traveler, reference_date)
    if age is None:
        return traveler.declared_type or TravelerType.ADULT
    if age < INFANT_MAX_AGE:
        return TravelerType.INFANT
    if age < CHILD_MAX_AGE:
        return TravelerType.CHILD
    return TravelerType.ADULT


def describe_travelers(
    travelers: list[dict[str, Any]] | None, reference_date: date
) -> list[dict[str, Any]]:
    """
    Normaliza la lista de viajeros de un ítem con el tipo calculado.

    Retorna una lista nueva; el payload original no se modifica.
    """
    described = []
    for index, payload in enumerate(travelers or []):
        snapshot = TravelerSnapshot.from_payload(payload, field=f"travelers[{index}]")
        described.append(
            {
                **payload,
                "name": full_name(snapshot) or payload.get("name"),
                "type": traveler_type_on(snapshot, reference_date).value,
            }
        )
    return described
