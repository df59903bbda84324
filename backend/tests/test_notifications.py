"""
Tests for notification reads and the one-way read flag.
"""

import pytest
from httpx import AsyncClient

from tests.helpers import purchase_body


async def _buy_twice(client: AsyncClient, event, user) -> None:
    for tx_hash in ("0xn1", "0xn2"):
        response = await client.post("/api/tickets", json=purchase_body(event, user, "General", 1, tx_hash))
        assert response.status_code == 201


@pytest.mark.asyncio
async def test_purchase_notifies_buyer(client: AsyncClient, vip_event, attendee):
    await client.post("/api/tickets", json=purchase_body(vip_event, attendee, "VIP", 1, "0xnote"))

    response = await client.get(f"/api/notifications/user/{attendee.id}")
    assert response.status_code == 200
    notes = response.json()["data"]
    assert len(notes) == 1
    assert notes[0]["type"] == "ticket"
    assert notes[0]["read"] is False
    assert notes[0]["data"]["eventId"] == str(vip_event.id)


@pytest.mark.asyncio
async def test_mark_as_read_is_one_way(client: AsyncClient, vip_event, attendee):
    await _buy_twice(client, vip_event, attendee)
    note = (await client.get(f"/api/notifications/user/{attendee.id}")).json()["data"][0]

    first = await client.put(f"/api/notifications/{note['id']}/read")
    second = await client.put(f"/api/notifications/{note['id']}/read")
    assert first.json()["data"]["read"] is True
    assert second.status_code == 200
    assert second.json()["data"]["read"] is True

    unread = (await client.get(f"/api/notifications/user/{attendee.id}?read=false")).json()["data"]
    assert len(unread) == 1


@pytest.mark.asyncio
async def test_mark_all_as_read(client: AsyncClient, vip_event, attendee):
    await _buy_twice(client, vip_event, attendee)

    response = await client.put(f"/api/notifications/user/{attendee.id}/read-all")
    assert response.status_code == 200
    assert response.json()["data"]["modified"] == 2

    again = await client.put(f"/api/notifications/user/{attendee.id}/read-all")
    assert again.json()["data"]["modified"] == 0

    unread = (await client.get(f"/api/notifications/user/{attendee.id}?read=false")).json()["data"]
    assert unread == []


@pytest.mark.asyncio
async def test_mark_unknown_notification(client: AsyncClient):
    response = await client.put("/api/notifications/99999/read")
    assert response.status_code == 404
