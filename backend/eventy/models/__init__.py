from eventy.models.user import User
from eventy.models.event import Event
from eventy.models.booking import Booking

__all__ = ["User", "Event", "Booking"]
