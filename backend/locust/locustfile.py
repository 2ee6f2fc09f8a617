"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test double booking
  locust -f locustfile.py --tags throughput   # Test seat cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests

Expects a seeded database (deskbooking-seed) so that the admin account and
the seat map exist.
"""

import random
import string
from datetime import date, timedelta

from locust import HttpUser, task, between, tag, events

ADMIN_CREDENTIALS = {"username": "admin", "password": "password"}

# Shared state
SEAT_IDS = []
CONTESTED_SEAT_ID = None
CONTESTED_DATE = (date.today() + timedelta(days=30)).isoformat()


def random_username():
    return "u_" + "".join(random.choices(string.ascii_lowercase, k=8))


def future_day(max_days: int = 90) -> str:
    return (date.today() + timedelta(days=random.randint(1, max_days))).isoformat()


def register_and_login(client) -> dict:
    username = random_username()
    client.post("/api/v1/auth/register", json={"username": username, "password": "loadtest123"})
    resp = client.post("/api/v1/auth/login", json={"username": username, "password": "loadtest123"})
    if resp.status_code == 200:
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return {}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: contested date is {CONTESTED_DATE}")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - many employees, one seat, one date

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify no half-day is claimed twice:
      SELECT seat_id, date, half, COUNT(*) FROM slot_claims
      GROUP BY seat_id, date, half HAVING COUNT(*) > 1;
    Should return no rows.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = register_and_login(self.client)

        if not CONTESTED_SEAT_ID:
            resp = self.client.post("/api/v1/auth/login", json=ADMIN_CREDENTIALS)
            if resp.status_code != 200:
                return
            admin_headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}
            resp = self.client.post(
                "/api/v1/seats/",
                json={"label": f"LOAD-{random.randint(1000, 9999)}", "type": "with_monitor"},
                headers=admin_headers,
            )
            if resp.status_code == 201:
                globals()["CONTESTED_SEAT_ID"] = resp.json()["id"]
                print(f"\nCreated contested seat {CONTESTED_SEAT_ID}\n")

    @tag("concurrency")
    @task
    def book_contested_seat(self):
        """Everyone fights for the same seat and date with mixed slots."""
        if not CONTESTED_SEAT_ID or not self.headers:
            return

        with self.client.post(
            "/api/v1/bookings/",
            json={"seatId": CONTESTED_SEAT_ID, "dates": [CONTESTED_DATE], "slot": random.choice(["AM", "PM", "FULL"])},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Seat cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.headers = register_and_login(self.client)

    @tag("throughput", "read")
    @task(10)
    def list_seats_cached(self):
        resp = self.client.get("/api/v1/seats/", headers=self.headers, name="/api/v1/seats/ [cached]")
        if resp.status_code == 200 and not SEAT_IDS:
            SEAT_IDS.extend(seat["id"] for seat in resp.json())

    @tag("throughput", "read")
    @task(3)
    def check_availability(self):
        if SEAT_IDS:
            self.client.get(
                f"/api/v1/seats/{random.choice(SEAT_IDS)}/availability",
                params={"date": future_day(), "slot": random.choice(["AM", "PM", "FULL"])},
                headers=self.headers,
                name="/api/v1/seats/{id}/availability",
            )

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register_and_login(self.client)

    def _expect(self, payload, expected, **kwargs):
        with self.client.post(
            "/api/v1/bookings/", json=payload, catch_response=True, **kwargs
        ) as resp:
            if resp.status_code in expected:
                resp.success()
            else:
                resp.failure(f"Expected {expected}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_seat(self):
        self._expect({"seatId": 999999, "dates": [future_day()], "slot": "AM"}, (404,), headers=self.headers)

    @tag("edge")
    @task
    def bad_slot(self):
        self._expect({"seatId": 1, "dates": [future_day()], "slot": "EVENING"}, (422,), headers=self.headers)

    @tag("edge")
    @task
    def bad_date(self):
        self._expect({"seatId": 1, "dates": ["31/12/2030"], "slot": "AM"}, (422,), headers=self.headers)

    @tag("edge")
    @task
    def too_many_occurrences(self):
        self._expect(
            {"seatId": 1, "startDate": future_day(), "occurrences": 9999, "slot": "AM"}, (422,), headers=self.headers
        )

    @tag("edge")
    @task
    def missing_auth(self):
        self._expect({"seatId": 1, "dates": [future_day()], "slot": "AM"}, (401,))


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates an office morning:
      - Mostly browsing the seat map and own bookings
      - Some single-day and weekly bookings
      - Occasional cancellations
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register_and_login(self.client)
        self.booking_ids = []

    @task(30)
    def browse_seats(self):
        resp = self.client.get("/api/v1/seats/", headers=self.headers)
        if resp.status_code == 200 and not SEAT_IDS:
            SEAT_IDS.extend(seat["id"] for seat in resp.json())

    @task(15)
    def my_bookings(self):
        self.client.get("/api/v1/bookings/", params={"start": date.today().isoformat()}, headers=self.headers)

    @task(10)
    def book_day(self):
        if SEAT_IDS and self.headers:
            resp = self.client.post(
                "/api/v1/bookings/",
                json={"seatId": random.choice(SEAT_IDS), "dates": [future_day()], "slot": random.choice(["AM", "PM", "FULL"])},
                headers=self.headers,
            )
            if resp.status_code == 201:
                self.booking_ids.extend(b["id"] for b in resp.json())

    @task(3)
    def book_weekly(self):
        if SEAT_IDS and self.headers:
            resp = self.client.post(
                "/api/v1/bookings/",
                json={
                    "seatId": random.choice(SEAT_IDS),
                    "startDate": future_day(30),
                    "occurrences": random.randint(2, 8),
                    "slot": "FULL",
                },
                headers=self.headers,
            )
            if resp.status_code == 201:
                self.booking_ids.extend(b["id"] for b in resp.json())

    @task(2)
    def cancel(self):
        if self.booking_ids:
            booking_id = self.booking_ids.pop(random.randrange(len(self.booking_ids)))
            self.client.delete(f"/api/v1/bookings/{booking_id}", headers=self.headers, name="/api/v1/bookings/{id}")
