"""Value Object PromoCodeType - forma de calcular un descuento."""

from enum import Enum


class PromoCodeType(str, Enum):
    """Tipo de descuento de un código promocional."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"
