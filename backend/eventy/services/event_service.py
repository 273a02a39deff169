"""
Event catalog service: CRUD, search, pagination and the top-booked ranking.
"""

from typing import Optional

from sqlalchemy import select, func, delete, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from eventy.models.event import Event
from eventy.models.booking import Booking, STATUS_CONFIRMED
from eventy.schemas.event import EventCreate, EventUpdate
from eventy.core.categories import EVENT_CATEGORIES, normalize_categories
from eventy.core.exceptions import NotFoundError, ValidationError
from eventy.core.metrics import record_event_operation
from eventy.core.logging import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("name", "description", "category", "date", "venue", "price", "image")


def list_categories() -> list[str]:
    return list(EVENT_CATEGORIES)


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    """Create a new event after checking its categories."""
    fields = event_data.model_dump()
    fields["category"] = normalize_categories(fields["category"])

    event = Event(**fields)
    db.add(event)
    await db.flush()
    await db.refresh(event)

    record_event_operation("create")
    logger.info("event_created", event_id=event.id, name=event.name, category=event.category)
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    event = await db.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    return event


async def list_events(
    db: AsyncSession,
    search: Optional[str] = None,
    page: Optional[int] = None,
    page_size: int = 20,
) -> tuple[list[Event], int]:
    """
    List events newest-first, optionally filtered and paginated.

    `search` is matched as a literal, case-insensitive substring of name,
    description or venue. Without `page` every matching event is returned.
    """
    query = select(Event)

    term = (search or "").strip()
    if term:
        query = query.where(
            or_(
                Event.name.icontains(term, autoescape=True),
                Event.description.icontains(term, autoescape=True),
                Event.venue.icontains(term, autoescape=True),
            )
        )

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = query.order_by(Event.created_at.desc(), Event.id.desc())
    if page is not None:
        events_query = events_query.offset((page - 1) * page_size).limit(page_size)

    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total


async def update_event(db: AsyncSession, event_id: int, event_data: EventUpdate) -> Event:
    """Apply a partial update. Categories are checked as on create."""
    event = await get_event(db, event_id)

    changes = event_data.model_dump(exclude_unset=True)
    nulled = [name for name, value in changes.items() if value is None and name in REQUIRED_FIELDS and name != "category"]
    if nulled:
        raise ValidationError(
            "Required fields cannot be cleared",
            errors=[{"field": name, "message": f"{name} is required"} for name in nulled],
        )
    if "category" in changes:
        changes["category"] = normalize_categories(changes["category"])

    for name, value in changes.items():
        setattr(event, name, value)
    await db.flush()
    await db.refresh(event)

    record_event_operation("update")
    logger.info("event_updated", event_id=event.id, fields=sorted(changes))
    return event


async def delete_event(db: AsyncSession, event_id: int) -> int:
    """
    Delete an event and every booking that references it.

    Both statements run in the request's transaction (see get_db), so either
    both apply or neither does. Returns the number of bookings removed.
    """
    await get_event(db, event_id)

    bookings_result = await db.execute(delete(Booking).where(Booking.event_id == event_id))
    await db.execute(delete(Event).where(Event.id == event_id))
    await db.flush()

    bookings_deleted = bookings_result.rowcount or 0
    record_event_operation("delete")
    logger.info("event_deleted", event_id=event_id, bookings_deleted=bookings_deleted)
    return bookings_deleted


async def top_booked_events(
    db: AsyncSession,
    limit: int = 3,
    confirmed_only: bool = False,
) -> list[tuple[Event, int]]:
    """
    Rank events by how many bookings reference them.

    Events without bookings are included with a count of 0. Equal counts are
    ordered newest event first, then by id.
    """
    join_on = Booking.event_id == Event.id
    if confirmed_only:
        join_on = and_(join_on, Booking.status == STATUS_CONFIRMED)

    booking_count = func.count(Booking.id).label("booking_count")
    query = (
        select(Event, booking_count)
        .outerjoin(Booking, join_on)
        .group_by(Event.id)
        .order_by(booking_count.desc(), Event.created_at.desc(), Event.id.desc())
        .limit(limit)
    )
    result = await db.execute(query)
    return [(event, count) for event, count in result.all()]
