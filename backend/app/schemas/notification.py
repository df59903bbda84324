from datetime import datetime
from typing import Any, Optional

from app.schemas.common import CamelModel


class NotificationResponse(CamelModel):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    read: bool
    data: Optional[dict[str, Any]]
    created_at: datetime


class ReadAllResult(CamelModel):
    modified: int
