"""
Tests for transaction reads and the status funnel.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from app.models import Event, Ticket, TicketType, Transaction
from tests.helpers import purchase_body, ticket_type_id


@pytest_asyncio.fixture
async def pending_transaction(db_session, vip_event, attendee) -> Transaction:
    tx = Transaction(
        user_id=attendee.id,
        event_id=vip_event.id,
        type="purchase",
        amount=25.0,
        currency="ETH",
        status="pending",
        payment_method="crypto",
        transaction_hash="0xpending",
        network="sepolia",
    )
    db_session.add(tx)
    await db_session.commit()
    await db_session.refresh(tx)
    return tx


@pytest.mark.asyncio
async def test_pending_to_completed(client: AsyncClient, pending_transaction):
    response = await client.put(
        f"/api/transactions/{pending_transaction.id}/status",
        json={"status": "completed", "blockNumber": 123456},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "completed"
    assert data["blockNumber"] == 123456


@pytest.mark.asyncio
async def test_pending_to_failed_records_error(client: AsyncClient, pending_transaction):
    response = await client.put(
        f"/api/transactions/{pending_transaction.id}/status",
        json={"status": "failed", "errorMessage": "execution reverted"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "failed"
    assert response.json()["data"]["errorMessage"] == "execution reverted"


@pytest.mark.asyncio
async def test_failed_is_terminal(client: AsyncClient, pending_transaction):
    url = f"/api/transactions/{pending_transaction.id}/status"
    await client.put(url, json={"status": "failed"})

    response = await client.put(url, json={"status": "completed"})
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidTransition"


@pytest.mark.asyncio
async def test_pending_cannot_be_refunded(client: AsyncClient, pending_transaction):
    """refunded is only reachable from completed."""
    response = await client.put(
        f"/api/transactions/{pending_transaction.id}/status",
        json={"status": "refunded"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidTransition"


@pytest.mark.asyncio
async def test_completed_to_refunded_then_terminal(client: AsyncClient, vip_event, attendee):
    await client.post("/api/tickets", json=purchase_body(vip_event, attendee, "General", 1, "0xrefund"))
    tx = (await client.get(f"/api/transactions/user/{attendee.id}")).json()["data"][0]
    assert tx["status"] == "completed"

    url = f"/api/transactions/{tx['id']}/status"
    refunded = await client.put(url, json={"status": "refunded"})
    assert refunded.status_code == 200
    assert refunded.json()["data"]["status"] == "refunded"

    back = await client.put(url, json={"status": "completed"})
    assert back.status_code == 400


@pytest.mark.asyncio
async def test_invalid_status_value(client: AsyncClient, pending_transaction):
    response = await client.put(
        f"/api/transactions/{pending_transaction.id}/status",
        json={"status": "settled"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_status_change_notifies_user(client: AsyncClient, pending_transaction, attendee):
    await client.put(f"/api/transactions/{pending_transaction.id}/status", json={"status": "completed"})

    notes = (await client.get(f"/api/notifications/user/{attendee.id}?type=transaction")).json()["data"]
    assert len(notes) == 1
    assert notes[0]["data"]["transactionId"] == str(pending_transaction.id)


@pytest.mark.asyncio
async def test_get_transaction(client: AsyncClient, pending_transaction):
    response = await client.get(f"/api/transactions/{pending_transaction.id}")
    assert response.status_code == 200
    assert response.json()["data"]["transactionHash"] == "0xpending"


@pytest.mark.asyncio
async def test_get_transaction_not_found(client: AsyncClient):
    response = await client.get("/api/transactions/99999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_user_transactions_filters(client: AsyncClient, pending_transaction, vip_event, attendee):
    await client.post("/api/tickets", json=purchase_body(vip_event, attendee, "General", 1, "0xlisted"))

    everything = (await client.get(f"/api/transactions/user/{attendee.id}")).json()["data"]
    completed = (await client.get(f"/api/transactions/user/{attendee.id}?status=completed")).json()["data"]
    pending = (await client.get(f"/api/transactions/user/{attendee.id}?type=purchase&status=pending")).json()["data"]

    assert len(everything) == 2
    assert [t["transactionHash"] for t in completed] == ["0xlisted"]
    assert [t["transactionHash"] for t in pending] == ["0xpending"]


@pytest.mark.asyncio
async def test_list_event_transactions(client: AsyncClient, pending_transaction, vip_event):
    response = await client.get(f"/api/transactions/event/{vip_event.id}")
    assert [t["id"] for t in response.json()["data"]] == [pending_transaction.id]


async def _purchase_transaction(client: AsyncClient, event, user, tx_hash: str) -> tuple[dict, dict]:
    bought = await client.post("/api/tickets", json=purchase_body(event, user, "General", 2, tx_hash))
    assert bought.status_code == 201
    ticket = bought.json()["data"]["ticket"]
    txs = (await client.get(f"/api/transactions/user/{user.id}?type=purchase")).json()["data"]
    tx = next(t for t in txs if t["transactionHash"] == tx_hash)
    return ticket, tx


@pytest.mark.asyncio
async def test_refund_cancels_ticket_and_releases_seats(client: AsyncClient, vip_event, attendee, reload):
    ticket, tx = await _purchase_transaction(client, vip_event, attendee, "0xrefundable")
    general_id = ticket_type_id(vip_event, "General")
    assert (await reload(TicketType, general_id)).sold == 2

    response = await client.put(f"/api/transactions/{tx['id']}/status", json={"status": "refunded"})
    assert response.status_code == 200

    assert (await reload(Ticket, ticket["id"])).status == "cancelled"
    assert (await reload(TicketType, general_id)).sold == 0
    assert (await reload(Event, vip_event.id)).sold_tickets == 3

    verify = await client.put(f"/api/tickets/{ticket['id']}/verify", json={"qrCode": ticket["qrCode"]})
    assert verify.status_code == 400
    assert verify.json()["error"] == "InvalidState"


@pytest.mark.asyncio
async def test_refund_after_check_in_is_rejected(client: AsyncClient, vip_event, attendee, reload):
    ticket, tx = await _purchase_transaction(client, vip_event, attendee, "0xcheckedin")
    await client.put(f"/api/tickets/{ticket['id']}/verify", json={"qrCode": ticket["qrCode"]})

    response = await client.put(f"/api/transactions/{tx['id']}/status", json={"status": "refunded"})
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidState"

    assert (await reload(Transaction, tx["id"])).status == "completed"
    assert (await reload(TicketType, ticket_type_id(vip_event, "General"))).sold == 2


@pytest.mark.asyncio
async def test_refund_after_transfer_cancels_recipient_ticket(
    client: AsyncClient, vip_event, attendee, other_attendee, reload
):
    ticket, tx = await _purchase_transaction(client, vip_event, attendee, "0xgifted")
    moved = await client.put(f"/api/tickets/{ticket['id']}/transfer", json={
        "fromUserId": attendee.id,
        "toUserId": other_attendee.id,
        "transactionHash": "0xgift",
    })
    new_ticket = moved.json()["data"]["ticket"]

    response = await client.put(f"/api/transactions/{tx['id']}/status", json={"status": "refunded"})
    assert response.status_code == 200

    assert (await reload(Ticket, new_ticket["id"])).status == "cancelled"
    assert (await reload(Ticket, ticket["id"])).status == "transferred"
    assert (await reload(TicketType, ticket_type_id(vip_event, "General"))).sold == 0
