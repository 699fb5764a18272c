"""Servicios de dominio puros: precios y evaluación de códigos."""

from travel_booking.domain.services.pricing import (
    PriceBreakdown,
    PromoTerms,
    calculate_breakdown,
    compute_discount,
)
from travel_booking.domain.services.promo_evaluator import PromoEvaluation, evaluate_promo_code

__all__ = [
    "PriceBreakdown",
    "PromoTerms",
    "PromoEvaluation",
    "calculate_breakdown",
    "compute_discount",
    "evaluate_promo_code",
]
