ORDER = {
    "items": [
        {
            "service_type": "flight",
            "title": "Riyadh to Jeddah",
            "price": "600.00",
            "details": {"flight_number": "SV1020"},
            "travelers": [{"first_name": "Sara", "last_name": "Ali"}],
        },
        {"service_type": "hotel", "title": "Al Haram View Suites", "price": "400.00"},
    ],
    "payment_method": "card",
}


def _create(client, auth_headers, **overrides):
    return client.post("/api/v1/orders", json={**ORDER, **overrides}, headers=auth_headers)


def test_create_order(client, auth_headers):
    res = _create(client, auth_headers)

    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "pending"
    assert body["order_number"].startswith("ORD-")
    assert body["total"] == "1150.00"
    assert [b["provider_booking_reference"][:4] for b in body["bookings"]] == ["FLT-", "HTL-"]
    assert {b["status"] for b in body["bookings"]} == {"pending"}


def test_client_totals_are_rejected(client, auth_headers):
    res = _create(client, auth_headers, total="1.00")
    assert res.status_code == 422


def test_create_confirmed_order(client, auth_headers):
    body = _create(client, auth_headers, status="confirmed").json()

    assert body["status"] == "confirmed"
    assert all(b["status"] == "confirmed" for b in body["bookings"])


def test_create_order_without_items(client, auth_headers):
    assert _create(client, auth_headers, items=[]).status_code == 422


def test_create_order_with_invalid_promo(client, auth_headers):
    res = _create(client, auth_headers, promo_code="NOPE")

    assert res.status_code == 400
    assert res.json()["code"] == "PROMO_CODE_NOT_APPLICABLE"
    assert client.get("/api/v1/orders", headers=auth_headers).json()["total"] == 0


def test_order_from_cart(client, auth_headers, flight_item_payload):
    client.post("/api/v1/cart/items", json=flight_item_payload, headers=auth_headers)
    quote_id = client.post("/api/v1/cart/checkout", headers=auth_headers).json()["order_id"]

    res = client.post(f"/api/v1/orders/from-quote/{quote_id}", headers=auth_headers)

    assert res.status_code == 201
    assert res.json()["quote_id"] == quote_id
    assert res.json()["total"] == "1150.00"

    again = client.post(f"/api/v1/orders/from-quote/{quote_id}", headers=auth_headers)
    assert again.status_code == 400
    assert again.json()["code"] == "INVALID_QUOTE_STATUS"


def test_list_orders_paginates(client, auth_headers):
    for _ in range(3):
        _create(client, auth_headers)

    res = client.get("/api/v1/orders", params={"page": 2, "limit": 2}, headers=auth_headers)

    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert body["page"] == 2
    assert len(body["items"]) == 1


def test_list_orders_limit_is_capped(client, auth_headers):
    res = client.get("/api/v1/orders", params={"limit": 500}, headers=auth_headers)
    assert res.status_code == 422


def test_get_order_and_booking(client, auth_headers):
    order = _create(client, auth_headers).json()
    booking = order["bookings"][0]

    assert client.get(f"/api/v1/orders/{order['id']}", headers=auth_headers).json()["id"] == order["id"]
    res = client.get(f"/api/v1/orders/{order['id']}/bookings/{booking['id']}", headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["details"] == {"flight_number": "SV1020"}


def test_orders_are_scoped_to_owner(client, auth_headers):
    order = _create(client, auth_headers).json()

    res = client.get(f"/api/v1/orders/{order['id']}", headers={"X-User-Id": "user-2"})

    assert res.status_code == 404
    assert res.json()["code"] == "ORDER_NOT_FOUND"


def test_cancel_order(client, auth_headers):
    order = _create(client, auth_headers).json()

    res = client.post(
        f"/api/v1/orders/{order['id']}/cancel", json={"reason": "Change of plans"}, headers=auth_headers
    )

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "cancelled"
    assert body["cancellation_reason"] == "Change of plans"
    assert all(b["status"] == "cancelled" for b in body["bookings"])

    again = client.post(f"/api/v1/orders/{order['id']}/cancel", headers=auth_headers)
    assert again.status_code == 400
    assert again.json()["code"] == "INVALID_ORDER_TRANSITION"


def test_fulfilment_transitions(client, auth_headers):
    order = _create(client, auth_headers).json()
    url = f"/api/v1/admin/orders/{order['id']}/status"

    assert client.post(url, json={"action": "complete"}).status_code == 400
    assert client.post(url, json={"action": "confirm"}).json()["status"] == "confirmed"
    assert client.post(url, json={"action": "complete"}).json()["status"] == "completed"
    assert client.post(url, json={"action": "ship"}).status_code == 422
