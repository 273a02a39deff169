"""
Booking model representing a user's claim on an event.

Key design decisions:
- Partial unique index on (user_id, event_id) WHERE status = 'confirmed':
  at most one active booking per user per event, while cancelled rows stay
  as history and do not block rebooking
- ON DELETE CASCADE from events, so removing an event removes its bookings
- Status field allows cancellation without deleting records
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Index, CheckConstraint, text
from sqlalchemy.orm import relationship

from eventy.db.base import Base, TimestampMixin

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"

CONFIRMED_ONLY = text("status = 'confirmed'")


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    status = Column(String(20), nullable=False, default=STATUS_CONFIRMED)

    user = relationship("User", back_populates="bookings")
    event = relationship("Event", back_populates="bookings")

    __table_args__ = (
        Index(
            "uq_bookings_user_event_confirmed",
            "user_id",
            "event_id",
            unique=True,
            postgresql_where=CONFIRMED_ONLY,
            sqlite_where=CONFIRMED_ONLY,
        ),
        CheckConstraint("quantity > 0", name="check_booking_quantity_positive"),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="check_booking_status"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, event={self.event_id}, status={self.status})>"
