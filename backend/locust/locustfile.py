"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags browse      # Catalog reads (cache)
  locust -f locustfile.py --tags booking     # Book / cancel churn
  locust -f locustfile.py --tags duplicate   # Double-submit the same booking
  locust -f locustfile.py                    # All tests

Admin credentials for seeding events come from EVENTY_ADMIN_EMAIL and
EVENTY_ADMIN_PASSWORD (see `eventy-admin create-admin`).
"""

import os
import random
import string
from datetime import datetime, timezone, timedelta

import httpx
from locust import HttpUser, task, between, tag, events

CATEGORIES = [
    "Arts & Entertainment",
    "Sports & Outdoors",
    "Learning & Career",
    "Community & Causes",
]
SEARCH_TERMS = ["jazz", "run", "career", "charity", "night", "workshop"]

# Shared state
EVENT_IDS = []


def random_email():
    return f"load_{random.randint(100000, 999999)}@test.com"


def random_password():
    return "".join(random.choices(string.ascii_lowercase, k=8)) + str(random.randint(0, 9))


def register(client) -> dict:
    response = client.post("/api/auth/register", json={
        "name": "Load Tester",
        "email": random_email(),
        "password": random_password(),
    }, name="/api/auth/register")
    if response.status_code != 201:
        return {}
    return {"Authorization": f"Bearer {response.json()['token']}"}


@events.test_start.add_listener
def seed_events(environment, **kwargs):
    """Create a handful of events as admin so every scenario has targets."""
    email = os.environ.get("EVENTY_ADMIN_EMAIL")
    password = os.environ.get("EVENTY_ADMIN_PASSWORD")
    host = environment.host
    if not (email and password and host):
        print("No admin credentials; relying on existing events")
        return

    with httpx.Client(base_url=host) as client:
        login = client.post("/api/auth/login", json={"email": email, "password": password})
        login.raise_for_status()
        headers = {"Authorization": f"Bearer {login.json()['token']}"}
        for i in range(10):
            response = client.post("/api/events", headers=headers, json={
                "name": f"Load {random.choice(SEARCH_TERMS)} event {i}",
                "description": "Seeded by locust",
                "category": random.sample(CATEGORIES, k=random.randint(1, 2)),
                "date": (datetime.now(timezone.utc) + timedelta(days=30 + i)).isoformat(),
                "venue": "Load Hall",
                "price": random.choice([0, 10, 25]),
                "image": "https://example.com/load.jpg",
            })
            if response.status_code == 201:
                EVENT_IDS.append(response.json()["id"])
    print(f"Seeded {len(EVENT_IDS)} events")


def _refresh_event_ids(client):
    response = client.get("/api/events", name="/api/events")
    if response.status_code == 200:
        EVENT_IDS[:] = [e["id"] for e in response.json()["events"]]


class BrowsingUser(HttpUser):
    """
    Anonymous visitors: landing page, catalog pages, search, event detail.
    These are the cached reads.
    """
    wait_time = between(0.5, 2)

    @tag("browse")
    @task(3)
    def landing_page(self):
        self.client.get("/api/events/top-booked")
        self.client.get("/api/events/categories")

    @tag("browse")
    @task(5)
    def list_page(self):
        self.client.get(
            f"/api/events?page={random.randint(1, 3)}&page_size=12",
            name="/api/events?page=[n]",
        )

    @tag("browse")
    @task(3)
    def search(self):
        self.client.get(f"/api/events?search={random.choice(SEARCH_TERMS)}", name="/api/events?search=[term]")

    @tag("browse")
    @task(2)
    def detail(self):
        if not EVENT_IDS:
            _refresh_event_ids(self.client)
        if EVENT_IDS:
            self.client.get(f"/api/events/{random.choice(EVENT_IDS)}", name="/api/events/[id]")


class BookingUser(HttpUser):
    """Registered users booking, listing and cancelling."""
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register(self.client)
        if not EVENT_IDS:
            _refresh_event_ids(self.client)

    @tag("booking")
    @task(3)
    def book(self):
        if not (self.headers and EVENT_IDS):
            return
        with self.client.post(
            "/api/bookings",
            json={"eventId": random.choice(EVENT_IDS)},
            headers=self.headers,
            name="/api/bookings",
            catch_response=True,
        ) as response:
            # 409 is the expected answer once this user holds the booking
            if response.status_code in (201, 409):
                response.success()

    @tag("booking")
    @task(2)
    def my_bookings(self):
        if self.headers:
            self.client.get("/api/bookings", headers=self.headers)

    @tag("booking")
    @task(1)
    def cancel_one(self):
        if not self.headers:
            return
        response = self.client.get("/api/bookings", headers=self.headers)
        confirmed = [b["id"] for b in response.json() if b["status"] == "confirmed"] if response.ok else []
        if confirmed:
            self.client.put(
                f"/api/bookings/{random.choice(confirmed)}/cancel",
                headers=self.headers,
                name="/api/bookings/[id]/cancel",
            )


class DoubleSubmitUser(HttpUser):
    """
    Every user fires the same booking repeatedly with no wait.

    After a run, verify no (user, event) pair holds two confirmed bookings:
      SELECT user_id, event_id, COUNT(*) FROM bookings
      WHERE status = 'confirmed' GROUP BY 1, 2 HAVING COUNT(*) > 1;
    Should return no rows.
    """
    wait_time = between(0, 0.05)

    def on_start(self):
        self.headers = register(self.client)
        if not EVENT_IDS:
            _refresh_event_ids(self.client)
        self.event_id = EVENT_IDS[0] if EVENT_IDS else None

    @tag("duplicate")
    @task
    def double_submit(self):
        if not (self.headers and self.event_id):
            return
        with self.client.post(
            "/api/bookings",
            json={"eventId": self.event_id},
            headers=self.headers,
            name="/api/bookings [double submit]",
            catch_response=True,
        ) as response:
            if response.status_code in (201, 409):
                response.success()
            else:
                response.failure(f"unexpected {response.status_code}")
