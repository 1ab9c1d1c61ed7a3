
import uuid
from datetime import date, timedelta

from locust import HttpUser, between, task

# Matches the catalog created by scripts/seed_db.py
LISTING_ID = "listing-tent"


class RenterUser(HttpUser):
    # Wait between 1 and 3 seconds between tasks
    wait_time = between(1, 3)

    def on_start(self):
        """
        Called when a Locust user starts.
        Each simulated renter gets its own user id.
        """
        self.user_id = f"load-renter-{uuid.uuid4().hex[:8]}"
        self.booking_ids: list[str] = []

    @task(3)
    def create_booking(self):
        """
        POST /api/bookings with a unique Idempotency-Key per request.
        """
        start = date.today() + timedelta(days=14)
        headers = {
            "X-User-Id": self.user_id,
            "Idempotency-Key": str(uuid.uuid4()),
        }
        payload = {
            "listing_id": LISTING_ID,
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=2)).isoformat(),
            "quantity": 1,
        }
        with self.client.post(
            "/api/bookings",
            json=payload,
            headers=headers,
            name="/api/bookings",  # Group all requests under this name in the stats
            catch_response=True,
        ) as response:
            if response.status_code == 201:
                self.booking_ids.append(response.json()["id"])
            else:
                response.failure(f"Unexpected status {response.status_code}")

    @task(2)
    def list_bookings(self):
        self.client.get(
            "/api/bookings?role=renter",
            headers={"X-User-Id": self.user_id},
            name="/api/bookings [list]",
        )

    @task(1)
    def get_booking(self):
        if not self.booking_ids:
            return
        self.client.get(
            f"/api/bookings/{self.booking_ids[-1]}",
            headers={"X-User-Id": self.user_id},
            name="/api/bookings/{id}",
        )
