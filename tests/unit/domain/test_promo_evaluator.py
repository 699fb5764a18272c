from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from travel_booking.domain.entities.promo_code import PromoCode, PromoCodeStatus
from travel_booking.domain.services.promo_evaluator import (
    ALREADY_USED,
    EXPIRED,
    FIRST_ORDER_ONLY,
    INVALID_CODE,
    INVALID_CURRENCY,
    INVALID_SERVICE,
    NOT_YET_ACTIVE,
    USAGE_LIMIT_REACHED,
    evaluate_promo_code,
)
from travel_booking.domain.value_objects.promo_type import PromoCodeType

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def _promo(**overrides) -> PromoCode:
    data = {
        "id": "promo-1",
        "code": "travel20",
        "name": "Travel 20",
        "type": PromoCodeType.PERCENTAGE,
        "value": Decimal("20"),
        "max_discount_amount": Decimal("200"),
    }
    data.update(overrides)
    return PromoCode(**data)


def test_code_is_normalized_to_upper_case():
    assert _promo().code == "TRAVEL20"


def test_valid_code_returns_discount_and_terms():
    result = evaluate_promo_code(_promo(), Decimal("1000"), NOW, currency="SAR", service_type="flight")

    assert result.valid is True
    assert result.discount_amount == Decimal("200.00")
    assert result.code == "TRAVEL20"
    assert result.type == PromoCodeType.PERCENTAGE
    assert result.message == "Travel 20 applied!"


def test_unknown_code_is_invalid():
    result = evaluate_promo_code(None, Decimal("100"), NOW)
    assert result.valid is False
    assert result.reason == INVALID_CODE


def test_inactive_code_reads_as_invalid():
    result = evaluate_promo_code(_promo(status=PromoCodeStatus.INACTIVE), Decimal("100"), NOW)
    assert result.reason == INVALID_CODE


def test_not_yet_active():
    promo = _promo(valid_from=NOW + timedelta(days=1))
    assert evaluate_promo_code(promo, Decimal("100"), NOW).reason == NOT_YET_ACTIVE


def test_expired():
    promo = _promo(valid_until=NOW - timedelta(seconds=1))
    assert evaluate_promo_code(promo, Decimal("100"), NOW).reason == EXPIRED


def test_usage_limit_reached():
    promo = _promo(usage_limit=10, usage_count=10)
    assert evaluate_promo_code(promo, Decimal("100"), NOW).reason == USAGE_LIMIT_REACHED


def test_per_user_limit():
    result = evaluate_promo_code(_promo(per_user_limit=1), Decimal("100"), NOW, user_usage_count=1)
    assert result.reason == ALREADY_USED


def test_per_user_limit_skipped_without_user():
    result = evaluate_promo_code(_promo(per_user_limit=1), Decimal("100"), NOW, user_usage_count=None)
    assert result.valid is True


def test_min_order_amount_message_and_value():
    promo = _promo(min_order_amount=Decimal("500"))
    result = evaluate_promo_code(promo, Decimal("499.99"), NOW)

    assert result.valid is False
    assert result.reason == "Minimum order amount is 500.00"
    assert result.min_order_amount == Decimal("500.00")


def test_service_restriction_and_wildcard():
    promo = _promo(applicable_services=["hotel"])
    assert evaluate_promo_code(promo, Decimal("100"), NOW, service_type="flight").reason == INVALID_SERVICE
    assert evaluate_promo_code(promo, Decimal("100"), NOW, service_type="HOTEL").valid is True

    wildcard = _promo(applicable_services=["all"])
    assert evaluate_promo_code(wildcard, Decimal("100"), NOW, service_type="visa").valid is True


def test_currency_restriction():
    promo = _promo(applicable_currencies=["SAR"])
    assert evaluate_promo_code(promo, Decimal("100"), NOW, currency="USD").reason == INVALID_CURRENCY
    assert evaluate_promo_code(promo, Decimal("100"), NOW, currency="sar").valid is True


def test_first_order_only():
    promo = _promo(first_order_only=True)
    assert (
        evaluate_promo_code(promo, Decimal("100"), NOW, has_previous_orders=True).reason
        == FIRST_ORDER_ONLY
    )
    assert evaluate_promo_code(promo, Decimal("100"), NOW, has_previous_orders=False).valid is True


@pytest.mark.parametrize(
    "overrides, kwargs, expected",
    [
        # Expirado y agotado: gana la vigencia
        ({"valid_until": NOW - timedelta(days=1), "usage_limit": 1, "usage_count": 1}, {}, EXPIRED),
        # Agotado y ya usado por el usuario: gana el límite global
        ({"usage_limit": 1, "usage_count": 1}, {"user_usage_count": 1}, USAGE_LIMIT_REACHED),
        # Ya usado y monto mínimo: gana el límite por usuario
        ({"min_order_amount": Decimal("500")}, {"user_usage_count": 1}, ALREADY_USED),
        # Monto mínimo y servicio: gana el monto mínimo
        (
            {"min_order_amount": Decimal("500"), "applicable_services": ["hotel"]},
            {"service_type": "flight"},
            "Minimum order amount is 500.00",
        ),
        # Servicio y moneda: gana el servicio
        (
            {"applicable_services": ["hotel"], "applicable_currencies": ["USD"]},
            {"service_type": "flight", "currency": "SAR"},
            INVALID_SERVICE,
        ),
    ],
)
def test_first_failing_rule_wins(overrides, kwargs, expected):
    result = evaluate_promo_code(_promo(**overrides), Decimal("100"), NOW, **kwargs)
    assert result.reason == expected


def test_evaluation_does_not_mutate_the_code():
    promo = _promo(usage_limit=5, usage_count=2)
    for _ in range(3):
        evaluate_promo_code(promo, Decimal("100"), NOW)
    assert promo.usage_count == 2
