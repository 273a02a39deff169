"""
Event model.

- `category` is a JSON list of names from eventy.core.categories; the
  service layer validates membership before every write
- Index on `created_at` backs the newest-first catalog listing
"""

from sqlalchemy import Column, Integer, String, Text, Float, DateTime, JSON, Index, CheckConstraint
from sqlalchemy.orm import relationship

from eventy.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(JSON, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    venue = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    image = Column(String(1024), nullable=False)

    bookings = relationship("Booking", back_populates="event", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_event_price_non_negative"),
        Index("ix_events_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name})>"
