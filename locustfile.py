import uuid

from locust import HttpUser, between, task


class TravelerUser(HttpUser):
    # Wait between 1 and 3 seconds between tasks
    wait_time = between(1, 3)

    def on_start(self):
        """
        Called when a Locust user starts.
        Each simulated user gets its own X-User-Id, so carts do not collide.
        """
        self.headers = {"X-User-Id": f"load-{uuid.uuid4().hex[:12]}"}

    @task(3)
    def search_flights(self):
        self.client.post(
            "/api/v1/search/flights",
            json={"origin": "RUH", "destination": "JED", "date": "2025-03-01"},
            name="/api/v1/search/[kind]",
        )

    @task(2)
    def build_cart(self):
        self.client.get("/api/v1/cart", headers=self.headers)
        self.client.post(
            "/api/v1/cart/items",
            json={
                "service_type": "hotel",
                "service_id": "mock-htl-1",
                "service_name": "Grand Plaza Hotel",
                "price": "450.00",
            },
            headers=self.headers,
        )

    @task(1)
    def order_and_pay(self):
        """
        Direct order followed by a payment.
        A unique Idempotency-Key is generated for each payment.
        """
        res = self.client.post(
            "/api/v1/orders",
            json={"items": [{"service_type": "flight", "title": "RUH - JED", "price": "100.00"}]},
            headers=self.headers,
        )
        if res.status_code != 201:
            return
        order = res.json()
        self.client.post(
            "/api/v1/payments",
            json={
                "order_id": order["id"],
                "amount": order["total"],
                "currency": order["currency"],
                "method": "card",
            },
            headers={**self.headers, "Idempotency-Key": str(uuid.uuid4())},
            name="/api/v1/payments",
        )
