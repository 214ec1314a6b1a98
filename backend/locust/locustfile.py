"""
Locust Load Test Suite

Tokens are minted locally with the same secret the API verifies
(JWT_SECRET, default matches the API settings), so no identity provider is needed.

Run scenarios:
  locust -f locustfile.py --tags throughput   # Published list cache, join tab
  locust -f locustfile.py --tags organizer    # Create / edit / publish
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import os
import random
import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt
from locust import HttpUser, between, events, tag, task

JWT_SECRET = os.getenv("JWT_SECRET", "super-secret-key-change-in-production")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")

CATEGORIES = ["all", "social", "networking", "business", "workshop", "conference"]
SEARCH_TERMS = ["meetup", "night", "guild", "workshop", "party", ""]

# Shared state
EVENT_IDS = []


def auth_headers(name: str = "Load Tester") -> dict:
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "name": name, "aud": JWT_AUDIENCE},
        JWT_SECRET,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


def event_form() -> dict:
    start = datetime.now(timezone.utc) + timedelta(hours=random.randint(-2, 24 * 30))
    return {
        "eventName": f"Event {random.randint(1, 10000)}",
        "description": "Load test event",
        "eventDate": start.date().isoformat(),
        "eventTime": start.strftime("%H:%M"),
        "location": "Venue",
        "estimatedGuests": random.randint(10, 500),
        "attractions": "DJ, Photography",
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Event Hub load test against {environment.host}")
    print("=" * 60)


class ThroughputUser(HttpUser):
    """
    TEST 1: Throughput - published list cache and join tab filtering

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. With REDIS_ENABLED=false, run again

    Compare avg response time, requests/sec and P95/P99 latency.
    """

    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_published(self):
        resp = self.client.get("/api/v1/events/published", name="/api/v1/events/published [cached]")
        if resp.status_code == 200:
            for event in resp.json()[:50]:
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("throughput", "read")
    @task(6)
    def join_tab(self):
        self.client.get(
            "/api/v1/events/join-tab",
            params={"category": random.choice(CATEGORIES), "search": random.choice(SEARCH_TERMS)},
            name="/api/v1/events/join-tab",
        )

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}", name="/api/v1/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class OrganizerUser(HttpUser):
    """
    TEST 2: Organizer writes - create, edit, publish, book services

    Run: locust -f locustfile.py --tags organizer -u 50 -r 10 --run-time 60s

    Every publish invalidates the published list cache, so this also shows
    how the read path behaves under churn.
    """

    wait_time = between(0.5, 2)

    def on_start(self):
        self.headers = auth_headers()
        self.my_events = []

    @tag("organizer")
    @task(3)
    def create_event(self):
        resp = self.client.post("/api/v1/events/", json=event_form(), headers=self.headers)
        if resp.status_code == 201:
            self.my_events.append(resp.json()["event"]["id"])

    @tag("organizer")
    @task(3)
    def publish_event(self):
        if self.my_events:
            event_id = random.choice(self.my_events)
            self.client.post(f"/api/v1/events/{event_id}/publish", headers=self.headers,
                name="/api/v1/events/{id}/publish")

    @tag("organizer")
    @task(2)
    def edit_event(self):
        if self.my_events:
            event_id = random.choice(self.my_events)
            self.client.patch(f"/api/v1/events/{event_id}",
                json={"location": f"Room {random.randint(1, 40)}"},
                headers=self.headers,
                name="/api/v1/events/{id}")

    @tag("organizer")
    @task(2)
    def my_events_list(self):
        self.client.get("/api/v1/events/mine", headers=self.headers)

    @tag("organizer")
    @task(1)
    def book_services(self):
        if not self.my_events:
            return
        event_id = random.choice(self.my_events)
        self.client.post(f"/api/v1/events/{event_id}/service-bookings",
            json={"bookings": [{
                "providerId": f"prov-{random.randint(1, 20)}",
                "providerName": "Sound Co",
                "providerCategory": "audio",
                "quantity": random.randint(1, 3),
                "basePrice": 150,
            }]},
            headers=self.headers,
            name="/api/v1/events/{id}/service-bookings")
        self.client.get(f"/api/v1/events/{event_id}/service-bookings/total", headers=self.headers,
            name="/api/v1/events/{id}/service-bookings/total")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """

    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = auth_headers()

    @tag("edge")
    @task
    def unknown_category(self):
        with self.client.get("/api/v1/events/join-tab", params={"category": "concerts"},
            catch_response=True
        ) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

    @tag("edge")
    @task
    def zero_quantity(self):
        with self.client.post(f"/api/v1/events/{uuid.uuid4()}/service-bookings",
            json={"bookings": [{"providerId": "p", "providerName": "P", "providerCategory": "c",
                                "quantity": 0, "basePrice": 10}]},
            headers=self.headers,
            catch_response=True,
            name="/api/v1/events/{id}/service-bookings [bad]"
        ) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

    @tag("edge")
    @task
    def booking_unknown_event(self):
        with self.client.post(f"/api/v1/events/{uuid.uuid4()}/service-bookings",
            json={"bookings": [{"providerId": "p", "providerName": "P", "providerCategory": "c",
                                "quantity": 1, "basePrice": 10}]},
            headers=self.headers,
            catch_response=True,
            name="/api/v1/events/{id}/service-bookings [unknown]"
        ) as resp:
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Expected 400, got {resp.status_code}")

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/events/",
            data="not json at all",
            headers=self.headers,
            catch_response=True
        ) as resp:
            if resp.status_code in [400, 422]:
                resp.success()
            else:
                resp.failure(f"Expected 400/422, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post("/api/v1/events/", json=event_form(), catch_response=True) as resp:
            if resp.status_code == 401:
                resp.success()
            else:
                resp.failure(f"Expected 401, got {resp.status_code}")

    @tag("edge")
    @task
    def not_a_uuid(self):
        with self.client.get("/api/v1/events/12345", catch_response=True) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")
