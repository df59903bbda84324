from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.user import UserCreate, UserResponse
from app.schemas.event import EventCreate, EventResponse, EventListResponse, TicketTypeCreate, TicketTypeResponse
from app.schemas.ticket import (
    TicketPurchase, TicketVerify, TicketCancel, TicketTransfer,
    TicketResponse, PurchaseResult, TransferResult, TicketStats, EventTicketList,
)
from app.schemas.transaction import TransactionResponse, TransactionStatusUpdate
from app.schemas.notification import NotificationResponse, ReadAllResult
from app.schemas.analytics import (
    DailySales, DashboardAnalytics, EventAnalytics, EventsByStatus, HostAnalytics, TopEvent,
)

__all__ = [
    "ApiResponse", "ErrorResponse",
    "UserCreate", "UserResponse",
    "EventCreate", "EventResponse", "EventListResponse", "TicketTypeCreate", "TicketTypeResponse",
    "TicketPurchase", "TicketVerify", "TicketCancel", "TicketTransfer",
    "TicketResponse", "PurchaseResult", "TransferResult", "TicketStats", "EventTicketList",
    "TransactionResponse", "TransactionStatusUpdate",
    "NotificationResponse", "ReadAllResult",
    "DailySales", "DashboardAnalytics", "EventAnalytics", "EventsByStatus", "HostAnalytics", "TopEvent",
]
