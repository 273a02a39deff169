from eventy.schemas.user import UserCreate, UserLogin, UserSummary, UserResponse, AuthResponse
from eventy.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventListResponse,
    TopBookedEventResponse,
    CategoryListResponse,
    EventDeleteResponse,
)
from eventy.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingWithEventResponse,
    BookingWithUserResponse,
    BookingCancelResponse,
)

__all__ = [
    "UserCreate", "UserLogin", "UserSummary", "UserResponse", "AuthResponse",
    "EventCreate", "EventUpdate", "EventResponse", "EventListResponse",
    "TopBookedEventResponse", "CategoryListResponse", "EventDeleteResponse",
    "BookingCreate", "BookingResponse", "BookingWithEventResponse",
    "BookingWithUserResponse", "BookingCancelResponse",
]
