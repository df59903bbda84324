"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test overselling
  locust -f locustfile.py --tags checkin      # Test double check-in
  locust -f locustfile.py --tags throughput   # Test cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string
import uuid
from datetime import datetime, timezone, timedelta

from locust import HttpUser, task, between, tag, events

# Shared state
EVENT_IDS = []
HOST_ID = None
CONCURRENCY_EVENT_ID = None
CHECKIN_TICKET = None

CONCURRENCY_SEATS = 10


def random_email():
    return f"load_{uuid.uuid4().hex[:12]}@test.com"


def random_wallet():
    return "0x" + "".join(random.choices("0123456789abcdef", k=40))


def random_tx_hash():
    return "0x" + uuid.uuid4().hex + uuid.uuid4().hex


def random_name():
    return "u_" + "".join(random.choices(string.ascii_lowercase, k=8))


def event_payload(host_id, title, seats, price=0.05):
    start = datetime.now(timezone.utc) + timedelta(days=random.randint(1, 90))
    return {
        "hostId": host_id,
        "title": title,
        "description": "Load test event",
        "category": "TECHNOLOGY",
        "venue": "Venue",
        "address": "1 Test St",
        "city": random.choice(["Berlin", "Lisbon", "Austin", "Lagos"]),
        "country": "Nowhere",
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(hours=6)).isoformat(),
        "status": "published",
        "ticketTypes": [{"name": "General", "price": price, "quantity": seats}],
    }


def register(client, role="attendee"):
    resp = client.post("/api/users", json={
        "email": random_email(),
        "name": random_name(),
        "role": role,
        "walletAddress": random_wallet(),
    }, name="/api/users")
    if resp.status_code == 201:
        return resp.json()["data"]["id"]
    return None


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: the first user creates a {CONCURRENCY_SEATS}-seat event")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users → 10 seats

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT sold, quantity FROM ticket_types WHERE event_id = X;
    sold should be ≤ 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global HOST_ID, CONCURRENCY_EVENT_ID

        self.user_id = register(self.client)

        if HOST_ID is None:
            HOST_ID = register(self.client, role="host")
        if CONCURRENCY_EVENT_ID is None and HOST_ID is not None:
            resp = self.client.post(
                "/api/events",
                json=event_payload(HOST_ID, "Concurrency Test Event", CONCURRENCY_SEATS),
            )
            if resp.status_code == 201:
                CONCURRENCY_EVENT_ID = resp.json()["data"]["id"]
                print(f"\n✓ Created event {CONCURRENCY_EVENT_ID} with {CONCURRENCY_SEATS} seats\n")

    @tag("concurrency")
    @task
    def buy_limited_seats(self):
        """All users fight for the same seats."""
        if not CONCURRENCY_EVENT_ID or not self.user_id:
            return

        with self.client.post("/api/tickets",
            json={
                "eventId": CONCURRENCY_EVENT_ID,
                "userId": self.user_id,
                "ticketType": "General",
                "quantity": 1,
                "transactionHash": random_tx_hash(),
            },
            name="/api/tickets",
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 400 and resp.json().get("error") == "CapacityExceeded":
                resp.success()  # Expected: sold out
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class CheckInUser(HttpUser):
    """
    TEST 2: Double check-in - many scanners, one ticket

    Run: locust -f locustfile.py --tags checkin -u 50 -r 50 --run-time 15s

    Exactly one verify request should return 200; the rest AlreadyUsed.
    """
    wait_time = between(0, 0.05)

    def on_start(self):
        global HOST_ID, CHECKIN_TICKET

        if CHECKIN_TICKET is not None:
            return
        if HOST_ID is None:
            HOST_ID = register(self.client, role="host")
        buyer = register(self.client)
        if HOST_ID is None or buyer is None:
            return

        resp = self.client.post("/api/events", json=event_payload(HOST_ID, "Check-in Test Event", 1))
        if resp.status_code != 201:
            return
        resp = self.client.post("/api/tickets", json={
            "eventId": resp.json()["data"]["id"],
            "userId": buyer,
            "ticketType": "General",
            "quantity": 1,
            "transactionHash": random_tx_hash(),
        })
        if resp.status_code == 201:
            ticket = resp.json()["data"]["ticket"]
            CHECKIN_TICKET = (ticket["id"], ticket["qrCode"])

    @tag("checkin")
    @task
    def scan_ticket(self):
        if CHECKIN_TICKET is None:
            return
        ticket_id, qr_code = CHECKIN_TICKET

        with self.client.put(f"/api/tickets/{ticket_id}/verify",
            json={"qrCode": qr_code},
            name="/api/tickets/{id}/verify",
            catch_response=True
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            elif resp.status_code == 400 and resp.json().get("error") == "AlreadyUsed":
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 3: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        """Hammer the cached endpoint."""
        page = random.randint(1, 5)
        resp = self.client.get(f"/api/events?page={page}&limit=20",
            name="/api/events [cached]")
        if resp.status_code == 200:
            for event in resp.json()["data"]["events"]:
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        """Read individual events (bumps the view counter)."""
        if EVENT_IDS:
            event_id = random.choice(EVENT_IDS)
            self.client.get(f"/api/events/{event_id}",
                name="/api/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 4: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.user_id = register(self.client) or 1

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    def _purchase(self, name, **overrides):
        body = {
            "eventId": 1,
            "userId": self.user_id,
            "ticketType": "General",
            "quantity": 1,
            "transactionHash": random_tx_hash(),
        }
        body.update(overrides)
        return self.client.post("/api/tickets", json=body, name=name, catch_response=True)

    @tag("edge")
    @task
    def invalid_event_id(self):
        with self._purchase("/api/tickets [missing event]", eventId=999999) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def zero_quantity(self):
        with self._purchase("/api/tickets [zero]", quantity=0) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def huge_quantity(self):
        with self._purchase("/api/tickets [huge]", quantity=999999) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/tickets",
            data="not json at all",
            headers={"Content-Type": "application/json"},
            name="/api/tickets [garbage]",
            catch_response=True
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def wrong_qr_code(self):
        with self.client.put("/api/tickets/1/verify",
            json={"qrCode": "definitely-not-it"},
            name="/api/tickets/{id}/verify [wrong code]",
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 404])


class RealisticUser(HttpUser):
    """
    TEST 5: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing
      - Some purchases
      - Rare event creation
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.user_id = register(self.client)
        self.host_id = register(self.client, role="host")

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/events?page=1&limit=20")
        if resp.status_code == 200:
            for event in resp.json()["data"]["events"]:
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/events/{random.choice(EVENT_IDS)}", name="/api/events/{id}")

    @task(10)
    def buy_tickets(self):
        if EVENT_IDS and self.user_id:
            self.client.post("/api/tickets",
                json={
                    "eventId": random.choice(EVENT_IDS),
                    "userId": self.user_id,
                    "ticketType": "General",
                    "quantity": random.randint(1, 3),
                    "transactionHash": random_tx_hash(),
                },
                name="/api/tickets")

    @task(3)
    def create_event(self):
        if self.host_id:
            resp = self.client.post("/api/events",
                json=event_payload(self.host_id, f"Event {random.randint(1, 10000)}", random.randint(10, 500)))
            if resp.status_code == 201:
                EVENT_IDS.append(resp.json()["data"]["id"])
