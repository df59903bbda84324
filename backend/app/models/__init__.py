from app.models.user import User, UserRole
from app.models.event import Event, EventStatus, TicketType
from app.models.ticket import Ticket, TicketStatus
from app.models.transaction import Transaction, TransactionStatus, TransactionType, PaymentMethod
from app.models.notification import Notification, NotificationType

__all__ = [
    "User", "UserRole",
    "Event", "EventStatus", "TicketType",
    "Ticket", "TicketStatus",
    "Transaction", "TransactionStatus", "TransactionType", "PaymentMethod",
    "Notification", "NotificationType",
]
