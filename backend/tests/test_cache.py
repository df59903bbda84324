"""
Tests for the event-listing cache helpers and the service endpoints.
"""

import pytest
from httpx import AsyncClient

from app.api.routes import tickets as ticket_routes
from app.api.routes import transactions as transaction_routes
from app.models import Event
from app.services import cache_service
from tests.helpers import purchase_body


def test_event_list_key_ignores_order_and_empty_filters():
    a = cache_service.make_event_list_key(page=1, limit=20, city="Berlin", category=None)
    b = cache_service.make_event_list_key(city="Berlin", limit=20, page=1)
    assert a == b
    assert a.startswith(cache_service.EVENT_LIST_PREFIX)


def test_event_list_key_differs_per_filter():
    a = cache_service.make_event_list_key(page=1, limit=20, city="Berlin")
    b = cache_service.make_event_list_key(page=1, limit=20, city="Lisbon")
    assert a != b


@pytest.mark.asyncio
async def test_cache_disabled_is_a_no_op():
    """With Redis disabled the cache answers nothing and accepts writes silently."""
    key = cache_service.make_event_list_key(page=1)
    await cache_service.set_cached_events(key, {"events": []})
    assert await cache_service.get_cached_events(key) is None
    await cache_service.invalidate_event_cache()
    assert await cache_service.get_cache_stats() == {"status": "disabled"}


@pytest.mark.asyncio
async def test_health_reports_cache_disabled(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_metrics_endpoint_exposes_purchase_counters(client: AsyncClient, vip_event, attendee):
    await client.post("/api/tickets", json=purchase_body(vip_event, attendee, "General", 1, "0xmetrics"))
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "ticket_purchase_attempts_total" in response.text


@pytest.mark.asyncio
async def test_request_id_header_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


def _record_committed_sold(monkeypatch, module, session_factory, event_id: int) -> list:
    """Replace the route's cache invalidation with a read of committed state."""
    seen = []

    async def read_committed():
        async with session_factory() as session:
            seen.append((await session.get(Event, event_id)).sold_tickets)

    monkeypatch.setattr(module, "invalidate_event_cache", read_committed)
    return seen


@pytest.mark.asyncio
async def test_sale_is_committed_before_cache_invalidation(
    client: AsyncClient, vip_event, attendee, session_factory, monkeypatch
):
    seen = _record_committed_sold(monkeypatch, ticket_routes, session_factory, vip_event.id)

    bought = await client.post("/api/tickets", json=purchase_body(vip_event, attendee, "General", 2, "0xc1"))
    ticket_id = bought.json()["data"]["ticket"]["id"]
    await client.put(f"/api/tickets/{ticket_id}/cancel", json={"userId": attendee.id})

    assert seen == [5, 3]


@pytest.mark.asyncio
async def test_refund_is_committed_before_cache_invalidation(
    client: AsyncClient, vip_event, attendee, session_factory, monkeypatch
):
    await client.post("/api/tickets", json=purchase_body(vip_event, attendee, "General", 2, "0xc2"))
    tx = (await client.get(f"/api/transactions/user/{attendee.id}")).json()["data"][0]
    seen = _record_committed_sold(monkeypatch, transaction_routes, session_factory, vip_event.id)

    response = await client.put(f"/api/transactions/{tx['id']}/status", json={"status": "refunded"})
    assert response.status_code == 200
    assert seen == [3]
