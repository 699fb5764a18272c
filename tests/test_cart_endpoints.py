def _add(client, auth_headers, payload):
    return client.post("/api/v1/cart/items", json=payload, headers=auth_headers)


def test_cart_requires_user(client):
    res = client.get("/api/v1/cart")
    assert res.status_code == 401
    assert res.json()["detail"] == "X-User-Id header is required"


def test_get_empty_cart(client, auth_headers):
    res = client.get("/api/v1/cart", headers=auth_headers)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "draft"
    assert body["items"] == []
    assert body["total"] == "0.00"


def test_add_item(client, auth_headers, flight_item_payload):
    res = _add(client, auth_headers, flight_item_payload)

    assert res.status_code == 201
    body = res.json()
    assert body["subtotal"] == "1000.00"
    assert body["taxes"] == "150.00"
    assert body["total"] == "1150.00"
    traveler = body["items"][0]["travelers"][0]
    assert traveler["type"] == "adult"
    assert traveler["name"] == "Sara Ali"


def test_add_item_rejects_unknown_fields(client, auth_headers, flight_item_payload):
    res = _add(client, auth_headers, {**flight_item_payload, "discount": "999.00"})
    assert res.status_code == 422


def test_add_item_rejects_negative_price(client, auth_headers, flight_item_payload):
    res = _add(client, auth_headers, {**flight_item_payload, "price": "-5.00"})
    assert res.status_code == 422


def test_remove_item(client, auth_headers, flight_item_payload):
    item_id = _add(client, auth_headers, flight_item_payload).json()["items"][0]["id"]

    res = client.delete(f"/api/v1/cart/items/{item_id}", headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["items"] == []

    missing = client.delete(f"/api/v1/cart/items/{item_id}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["code"] == "QUOTE_ITEM_NOT_FOUND"


def test_apply_and_remove_promo(client, auth_headers, flight_item_payload):
    client.post(
        "/api/v1/admin/promo-codes",
        json={"code": "save50", "name": "Save 50", "type": "fixed", "value": "50.00"},
    )
    _add(client, auth_headers, flight_item_payload)

    applied = client.post("/api/v1/cart/promo", json={"code": "save50"}, headers=auth_headers)
    assert applied.status_code == 200
    assert applied.json()["promo_code"] == "SAVE50"
    assert applied.json()["discount"] == "50.00"
    assert applied.json()["total"] == "1092.50"

    removed = client.delete("/api/v1/cart/promo", headers=auth_headers)
    assert removed.json()["promo_code"] is None
    assert removed.json()["total"] == "1150.00"


def test_apply_unknown_promo(client, auth_headers, flight_item_payload):
    _add(client, auth_headers, flight_item_payload)

    res = client.post("/api/v1/cart/promo", json={"code": "NOPE"}, headers=auth_headers)

    assert res.status_code == 400
    assert res.json() == {"detail": "Invalid promo code", "code": "PROMO_CODE_NOT_APPLICABLE"}


def test_checkout(client, auth_headers, flight_item_payload):
    _add(client, auth_headers, flight_item_payload)

    res = client.post("/api/v1/cart/checkout", headers=auth_headers)

    assert res.status_code == 200
    body = res.json()
    assert body["quote"]["status"] == "pending_payment"
    assert body["checkout_url"] == f"/payment/{body['order_id']}"

    fresh = client.get("/api/v1/cart", headers=auth_headers).json()
    assert fresh["id"] != body["order_id"]
    assert fresh["items"] == []


def test_checkout_empty_cart(client, auth_headers):
    res = client.post("/api/v1/cart/checkout", headers=auth_headers)
    assert res.status_code == 400
    assert res.json()["code"] == "EMPTY_CART"


def test_carts_are_per_user(client, auth_headers, flight_item_payload):
    _add(client, auth_headers, flight_item_payload)

    other = client.get("/api/v1/cart", headers={"X-User-Id": "user-2"})
    assert other.json()["items"] == []


def test_naive_expiry_is_read_as_utc(client, auth_headers, flight_item_payload):
    added = _add(client, auth_headers, {**flight_item_payload, "expires_at": "2020-01-01T00:00:00"})
    assert added.status_code == 201
    assert added.json()["items"][0]["expires_at"] in ("2020-01-01T00:00:00Z", "2020-01-01T00:00:00+00:00")

    res = client.post("/api/v1/cart/checkout", headers=auth_headers)

    assert res.status_code == 400
    assert res.json()["code"] == "EXPIRED_CART_ITEMS"
    assert client.get("/api/v1/cart", headers=auth_headers).json()["status"] == "draft"


def test_malformed_date_of_birth_is_rejected(client, auth_headers, flight_item_payload):
    payload = {
        **flight_item_payload,
        "travelers": [{"first_name": "Sara", "last_name": "Ali", "date_of_birth": "02/04/1990"}],
    }

    res = _add(client, auth_headers, payload)

    assert res.status_code == 422
    assert res.json()["code"] == "VALIDATION_ERROR"
    assert "travelers[0].date_of_birth" in res.json()["detail"]
    assert client.get("/api/v1/cart", headers=auth_headers).json()["items"] == []
