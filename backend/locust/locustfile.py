"""
Locust Load Test Suite

Run scenarios against a running server:
  locust -f locustfile.py --tags contention   # Race schedule/unschedule on shared events
  locust -f locustfile.py --tags capacity     # Race creates into one venue
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests

After any run, verify nothing broke:
  curl http://localhost:4000/api/v1/admin/consistency
"""

import random

import requests
from locust import HttpUser, task, between, tag, events

# Shared state
VENUE_IDS = []
EVENT_IDS = []
CAPACITY_VENUE_ID = None


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: venues and events are created by the first users")
    print("=" * 60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Print the consistency report so a broken invariant is impossible to miss."""
    host = environment.host or "http://localhost:4000"
    report = requests.get(f"{host}/api/v1/admin/consistency").json()
    print(f"\nConsistent: {report['consistent']}, violations: {len(report['violations'])}\n")


class ContentionUser(HttpUser):
    """
    TEST 1: Contention - many users move a handful of events between venues

    Run: locust -f locustfile.py --tags contention -u 100 -r 50 --run-time 30s

    Expected: only 200/400 responses, and a consistent report at the end.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        if len(VENUE_IDS) < 10:
            resp = self.client.post("/api/v1/venues/", json={"name": f"Venue {len(VENUE_IDS)}"})
            if resp.status_code == 201:
                venue_id = resp.json()["id"]
                VENUE_IDS.append(venue_id)
                resp = self.client.post(f"/api/v1/venues/{venue_id}/events", json={"name": "Shared Gig"})
                if resp.status_code == 201:
                    EVENT_IDS.append(resp.json()["id"])

    @tag("contention")
    @task(3)
    def schedule(self):
        if not VENUE_IDS or not EVENT_IDS:
            return
        venue_id, event_id = random.choice(VENUE_IDS), random.choice(EVENT_IDS)
        with self.client.put(
            f"/api/v1/venues/{venue_id}/events/{event_id}",
            name="/api/v1/venues/{id}/events/{id} [schedule]",
            catch_response=True,
        ) as resp:
            if resp.status_code in (200, 400):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("contention")
    @task(3)
    def unschedule(self):
        if not EVENT_IDS:
            return
        event_id = random.choice(EVENT_IDS)
        resp = self.client.get(f"/api/v1/events/{event_id}/venue", name="/api/v1/events/{id}/venue")
        if resp.status_code != 200:
            return
        venue_id = resp.json()["venue_id"]
        with self.client.delete(
            f"/api/v1/venues/{venue_id}/events/{event_id}",
            name="/api/v1/venues/{id}/events/{id} [unschedule]",
            catch_response=True,
        ) as resp:
            if resp.status_code in (200, 400):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("contention", "read")
    @task(1)
    def list_venues(self):
        self.client.get("/api/v1/venues/")


class CapacityUser(HttpUser):
    """
    TEST 2: Capacity - everyone creates events in the same venue

    Run: locust -f locustfile.py --tags capacity -u 50 -r 50 --run-time 10s

    Expected: exactly five 201s; every other create is a 400 "venue is full".
    """
    wait_time = between(0, 0.05)

    def on_start(self):
        global CAPACITY_VENUE_ID
        if not CAPACITY_VENUE_ID:
            resp = self.client.post("/api/v1/venues/", json={"name": "Capacity Test"})
            if resp.status_code == 201:
                CAPACITY_VENUE_ID = resp.json()["id"]

    @tag("capacity")
    @task
    def create_event(self):
        if not CAPACITY_VENUE_ID:
            return
        with self.client.post(
            f"/api/v1/venues/{CAPACITY_VENUE_ID}/events",
            json={"name": "Crowded Gig", "price": 10},
            name="/api/v1/venues/{id}/events",
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 400):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    @tag("edge")
    @task
    def unknown_venue(self):
        with self.client.post("/api/v1/venues/missing/events", json={"name": "Gig"},
                              name="/api/v1/venues/{missing}/events", catch_response=True) as resp:
            if resp.status_code == 404:
                resp.success()
            else:
                resp.failure(f"Expected 404, got {resp.status_code}")

    @tag("edge")
    @task
    def negative_price(self):
        if not VENUE_IDS:
            return
        with self.client.post(f"/api/v1/venues/{VENUE_IDS[0]}/events", json={"name": "Gig", "price": -5},
                              name="/api/v1/venues/{id}/events [negative]", catch_response=True) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

    @tag("edge")
    @task
    def edit_status(self):
        if not EVENT_IDS:
            return
        with self.client.put(f"/api/v1/events/{random.choice(EVENT_IDS)}", json={"status": "Unscheduled"},
                             name="/api/v1/events/{id} [status]", catch_response=True) as resp:
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Expected 400, got {resp.status_code}")
