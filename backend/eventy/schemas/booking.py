"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import AliasChoices, BaseModel, Field

from eventy.schemas.event import EventResponse
from eventy.schemas.user import UserSummary


class BookingCreate(BaseModel):
    # The SPA posts camelCase {"eventId": ...}
    event_id: int = Field(..., validation_alias=AliasChoices("eventId", "event_id"))


class BookingResponse(BaseModel):
    id: int
    user_id: int
    event_id: int
    quantity: int
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingWithEventResponse(BookingResponse):
    event: Optional[EventResponse]


class BookingWithUserResponse(BookingResponse):
    user: UserSummary


class BookingCancelResponse(BaseModel):
    message: str
    booking_id: int
    status: str
