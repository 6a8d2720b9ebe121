from __future__ import annotations

from locust import HttpUser, between, task


class Nl2SqlUser(HttpUser):
    wait_time = between(1, 5)

    @task(3)
    def translate(self) -> None:
        payload = {"text": "List customers who ordered in the last 30 days", "queryType": "select"}
        self.client.post("/api/translate", json=payload)

    @task(1)
    def optimize(self) -> None:
        payload = {"text": "SELECT * FROM orders WHERE YEAR(created_at) = 2024", "optimize": True}
        self.client.post("/api/translate", json=payload)

    @task(1)
    def generate_schema(self) -> None:
        self.client.post("/api/business-model/schema", json={"modelName": "Online bookstore"})
