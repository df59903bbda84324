"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from app.api.routes import users, events, tickets, transactions, notifications, analytics
from app.schemas.common import ErrorResponse

# Every domain error is rendered as ErrorResponse by the handlers in app.main
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Rejected by a business rule or invalid input"},
    403: {"model": ErrorResponse, "description": "Not the owner of the resource"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    409: {"model": ErrorResponse, "description": "Duplicate transaction hash, email or wallet"},
    500: {"model": ErrorResponse, "description": "Internal error"},
}

api_router = APIRouter(prefix="/api", responses=ERROR_RESPONSES)
api_router.include_router(users.router)
api_router.include_router(events.router)
api_router.include_router(tickets.router)
api_router.include_router(transactions.router)
api_router.include_router(notifications.router)
api_router.include_router(analytics.router)
