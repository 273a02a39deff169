"""
Pydantic schemas for event-related request/response validation.

Category membership is checked by the event service against the shared
category list; here a bare string is only coerced to a one-element list.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


def _coerce_category(value: Any) -> Any:
    if isinstance(value, str):
        return [value]
    return value


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: list[str]
    date: datetime
    venue: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    image: str = Field(..., min_length=1, max_length=1024)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value: Any) -> Any:
        return _coerce_category(value)


class EventUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[list[str]] = None
    date: Optional[datetime] = None
    venue: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = Field(None, min_length=1, max_length=1024)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value: Any) -> Any:
        return _coerce_category(value)


class EventResponse(BaseModel):
    id: int
    name: str
    description: str
    category: list[str]
    date: datetime
    venue: str
    price: float
    image: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TopBookedEventResponse(EventResponse):
    booking_count: int


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    pages: int
    cached: bool = False


class CategoryListResponse(BaseModel):
    categories: list[str]


class EventDeleteResponse(BaseModel):
    message: str
    event_id: int
    bookings_deleted: int
