import pytest

PROMO = {
    "code": "travel20",
    "name": "Travel 20",
    "type": "percentage",
    "value": "20",
    "max_discount_amount": "200.00",
    "min_order_amount": "500.00",
    "applicable_services": ["flight", "hotel"],
}


def _create(client, **overrides):
    return client.post("/api/v1/admin/promo-codes", json={**PROMO, **overrides})


def test_create_promo_code(client):
    res = _create(client)

    assert res.status_code == 201
    body = res.json()
    assert body["code"] == "TRAVEL20"
    assert body["usage_count"] == 0
    assert body["per_user_limit"] == 1
    assert body["status"] == "active"


def test_duplicate_code_conflicts(client):
    _create(client)
    res = _create(client, code="TRAVEL20")

    assert res.status_code == 409
    assert res.json()["code"] == "DUPLICATE_PROMO_CODE"


@pytest.mark.parametrize(
    "overrides",
    [
        {"value": "0"},
        {"type": "percentage", "value": "150"},
        {"usage_limit": 0},
        {"valid_from": "2030-01-01T00:00:00Z", "valid_until": "2029-01-01T00:00:00Z"},
    ],
)
def test_invalid_promo_code(client, overrides):
    assert _create(client, **overrides).status_code == 422


def test_validate_does_not_consume(client):
    promo_id = _create(client).json()["id"]
    payload = {"code": "travel20", "subtotal": "3000.00", "service_type": "flight"}

    for _ in range(3):
        res = client.post("/api/v1/promo-codes/validate", json=payload)
        assert res.status_code == 200
        assert res.json()["valid"] is True
        assert res.json()["discount_amount"] == "200.00"

    current = client.patch(f"/api/v1/admin/promo-codes/{promo_id}", json={}).json()
    assert current["usage_count"] == 0


def test_validate_reports_reason(client):
    _create(client)

    below = client.post("/api/v1/promo-codes/validate", json={"code": "TRAVEL20", "subtotal": "100.00"})
    assert below.json()["valid"] is False
    assert below.json()["reason"] == "Minimum order amount is 500.00"
    assert below.json()["min_order_amount"] == "500.00"

    wrong_service = client.post(
        "/api/v1/promo-codes/validate",
        json={"code": "TRAVEL20", "subtotal": "1000.00", "service_type": "car"},
    )
    assert wrong_service.status_code == 422

    unknown = client.post("/api/v1/promo-codes/validate", json={"code": "NOPE", "subtotal": "100.00"})
    assert unknown.json()["valid"] is False
    assert unknown.json()["reason"] == "Invalid promo code"
    assert unknown.json()["code"] is None


def test_active_list_hides_counters(client):
    _create(client)
    _create(client, code="LATER", valid_from="2099-01-01T00:00:00Z")

    res = client.get("/api/v1/promo-codes/active")

    assert res.status_code == 200
    assert [p["code"] for p in res.json()] == ["TRAVEL20"]
    assert "usage_count" not in res.json()[0]


def test_update_promo_code(client):
    promo_id = _create(client).json()["id"]

    res = client.patch(
        f"/api/v1/admin/promo-codes/{promo_id}",
        json={"code": "summer25", "value": "25", "min_order_amount": None},
    )

    assert res.status_code == 200
    body = res.json()
    assert body["code"] == "SUMMER25"
    assert body["value"] == "25.00"
    assert body["min_order_amount"] is None
    assert body["max_discount_amount"] == "200.00"


def test_update_rejects_usage_count(client):
    promo_id = _create(client).json()["id"]
    res = client.patch(f"/api/v1/admin/promo-codes/{promo_id}", json={"usage_count": 99})
    assert res.status_code == 422


def test_update_unknown_promo(client):
    res = client.patch("/api/v1/admin/promo-codes/missing", json={"name": "x"})
    assert res.status_code == 404
    assert res.json()["code"] == "PROMO_CODE_NOT_FOUND"


def test_deactivate_promo_code(client):
    promo_id = _create(client).json()["id"]

    res = client.delete(f"/api/v1/admin/promo-codes/{promo_id}")

    assert res.status_code == 200
    assert res.json()["status"] == "inactive"
    assert client.get("/api/v1/promo-codes/active").json() == []


def test_naive_validity_window_is_read_as_utc(client):
    created = _create(client, valid_from="2020-01-01T00:00:00", valid_until="2020-12-31T00:00:00")
    assert created.status_code == 201
    _create(client, code="FUTURE", valid_from="2099-01-01T00:00:00")

    res = client.post("/api/v1/promo-codes/validate", json={"code": "TRAVEL20", "subtotal": "1000.00"})

    assert res.status_code == 200
    assert res.json()["valid"] is False
    assert res.json()["reason"] == "This promo code has expired"
    assert client.get("/api/v1/promo-codes/active").json() == []
