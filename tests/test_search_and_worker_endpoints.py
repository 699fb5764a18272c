def test_search_flights_uses_fallback(client):
    res = client.post("/api/v1/search/flights", json={"origin": "RUH", "destination": "JED"})

    assert res.status_code == 200
    body = res.json()
    assert body["kind"] == "flights"
    assert body["source"] == "fallback"
    assert len(body["offers"]) == 3


def test_search_without_criteria(client):
    res = client.post("/api/v1/search/hotels")
    assert res.status_code == 200
    assert res.json()["offers"][0]["city"] == "Makkah"


def test_search_unsupported_kind(client):
    res = client.post("/api/v1/search/cars", json={})
    assert res.status_code == 422
    assert res.json()["code"] == "VALIDATION_ERROR"


def test_worker_processes_outbox(client, auth_headers):
    client.post(
        "/api/v1/orders",
        json={
            "items": [{"service_type": "hotel", "title": "City Center Inn", "price": "250.00"}],
            "status": "confirmed",
        },
        headers=auth_headers,
    )

    first = client.post("/api/v1/workers/outbox/process")
    second = client.post("/api/v1/workers/outbox/process")

    assert first.status_code == 200
    assert first.json() == {"claimed": 1, "succeeded": 1, "retried": 0, "failed": 0}
    assert second.json()["claimed"] == 0
