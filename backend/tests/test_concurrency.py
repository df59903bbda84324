"""
Race tests for the purchase and check-in paths.

Requests are fired together with asyncio.gather; each runs in its own
session and database transaction, so the capacity check is exercised
under real contention rather than sequentially.
"""

import asyncio

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.models import Event, Ticket, TicketType, Transaction
from tests.helpers import purchase_body, ticket_type_id


@pytest.mark.asyncio
async def test_two_concurrent_purchases_cannot_oversell(client: AsyncClient, fresh_vip_event, attendee, other_attendee, reload):
    """VIP 5/0, two buyers of 3 at once: exactly one wins, sold ends at 3, never 6."""
    responses = await asyncio.gather(
        client.post("/api/tickets", json=purchase_body(fresh_vip_event, attendee, "VIP", 3, "0xrace-a")),
        client.post("/api/tickets", json=purchase_body(fresh_vip_event, other_attendee, "VIP", 3, "0xrace-b")),
    )
    codes = sorted(r.status_code for r in responses)
    assert codes == [201, 400]

    loser = next(r for r in responses if r.status_code == 400)
    assert loser.json()["error"] == "CapacityExceeded"

    assert (await reload(TicketType, ticket_type_id(fresh_vip_event, "VIP"))).sold == 3
    assert (await reload(Event, fresh_vip_event.id)).sold_tickets == 3


@pytest.mark.asyncio
async def test_many_concurrent_purchases_respect_capacity(
    client: AsyncClient, make_event, attendee, session_factory, reload
):
    """12 single-ticket buyers against 5 remaining seats: exactly 5 succeed."""
    event = await make_event([{"name": "Floor", "price": 40.0, "quantity": 8, "sold": 3}])
    remaining = 8 - 3

    responses = await asyncio.gather(*[
        client.post("/api/tickets", json=purchase_body(event, attendee, "Floor", 1, f"0xmany-{i}"))
        for i in range(12)
    ])

    succeeded = [r for r in responses if r.status_code == 201]
    rejected = [r for r in responses if r.status_code == 400]
    assert len(succeeded) == remaining
    assert len(rejected) == 12 - remaining
    assert all(r.json()["error"] == "CapacityExceeded" for r in rejected)

    floor = await reload(TicketType, ticket_type_id(event, "Floor"))
    assert floor.sold == floor.quantity == 8

    async with session_factory() as session:
        issued = (await session.execute(
            select(func.coalesce(func.sum(Ticket.quantity), 0)).where(Ticket.event_id == event.id)
        )).scalar()
    assert issued == remaining


@pytest.mark.asyncio
async def test_concurrent_replays_sell_once(client: AsyncClient, vip_event, attendee, session_factory, reload):
    """The same purchase submitted twice at once issues one ticket and increments sold once."""
    body = purchase_body(vip_event, attendee, "General", 2, "0xdouble-submit")
    responses = await asyncio.gather(
        client.post("/api/tickets", json=body),
        client.post("/api/tickets", json=body),
    )

    assert sorted(r.status_code for r in responses) == [200, 201]
    ticket_ids = {r.json()["data"]["ticket"]["id"] for r in responses}
    assert len(ticket_ids) == 1

    assert (await reload(TicketType, ticket_type_id(vip_event, "General"))).sold == 2
    async with session_factory() as session:
        assert (await session.execute(select(func.count()).select_from(Ticket))).scalar() == 1
        assert (await session.execute(select(func.count()).select_from(Transaction))).scalar() == 1


@pytest.mark.asyncio
async def test_concurrent_check_in_succeeds_once(client: AsyncClient, vip_event, attendee):
    """Two scanners on the same ticket: one verifies, the other gets AlreadyUsed."""
    bought = await client.post("/api/tickets", json=purchase_body(vip_event, attendee, "General", 1, "0xscan"))
    ticket = bought.json()["data"]["ticket"]
    url = f"/api/tickets/{ticket['id']}/verify"

    responses = await asyncio.gather(
        client.put(url, json={"qrCode": ticket["qrCode"]}),
        client.put(url, json={"qrCode": ticket["qrCode"]}),
    )
    assert sorted(r.status_code for r in responses) == [200, 400]
    loser = next(r for r in responses if r.status_code == 400)
    assert loser.json()["error"] == "AlreadyUsed"
