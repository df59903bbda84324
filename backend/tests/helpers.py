"""Request builders shared by the test modules."""

from app.models import Event, User


def ticket_type_id(event: Event, name: str) -> int:
    return next(t.id for t in event.ticket_types if t.name == name)


def purchase_body(event: Event, user: User, ticket_type: str, quantity: int, tx_hash: str) -> dict:
    return {
        "eventId": event.id,
        "userId": user.id,
        "ticketType": ticket_type,
        "quantity": quantity,
        "transactionHash": tx_hash,
        "contractAddress": "0xcontract",
    }
