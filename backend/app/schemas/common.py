"""
Shared schema plumbing: camelCase wire format and the response envelope
the mobile client unwraps (`{success, data, message}`).
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    data: T
    message: Optional[str] = None


class ErrorResponse(CamelModel):
    success: bool = False
    message: str
    error: Optional[str] = None
