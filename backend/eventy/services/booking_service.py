"""
Booking service: create, cancel and list bookings.

DUPLICATE BOOKINGS
==================

Rule:
  A user holds at most one `confirmed` booking per event. Cancelled rows are
  kept as history and do not block booking the same event again.

Enforcement happens in two places:
  1. A read before the insert, which produces the friendly 409 in the
     common case (double click, second tab).
  2. The partial unique index uq_bookings_user_event_confirmed on
     (user_id, event_id) WHERE status = 'confirmed'. Two concurrent requests
     can both pass step 1; the database then rejects the second insert with
     an IntegrityError, which is reported as the same 409.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eventy.models.event import Event
from eventy.models.booking import Booking, STATUS_CONFIRMED, STATUS_CANCELLED
from eventy.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from eventy.core.logging import get_logger

logger = get_logger(__name__)

ALREADY_BOOKED = "You have already booked this event"


async def _has_confirmed_booking(db: AsyncSession, user_id: int, event_id: int) -> bool:
    result = await db.execute(
        select(Booking.id).where(
            Booking.user_id == user_id,
            Booking.event_id == event_id,
            Booking.status == STATUS_CONFIRMED,
        )
    )
    return result.first() is not None


async def create_booking(db: AsyncSession, user_id: int, event_id: int) -> Booking:
    """Book one place on an event for the user."""
    event = await db.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")

    if await _has_confirmed_booking(db, user_id, event_id):
        logger.info("booking_conflict", user_id=user_id, event_id=event_id, reason="already_booked")
        raise ConflictError(ALREADY_BOOKED)

    booking = Booking(
        user_id=user_id,
        event_id=event_id,
        quantity=1,
        status=STATUS_CONFIRMED,
    )
    db.add(booking)
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("booking_conflict", user_id=user_id, event_id=event_id, reason="unique_index")
        raise ConflictError(ALREADY_BOOKED) from exc
    await db.refresh(booking)

    logger.info("booking_created", booking_id=booking.id, user_id=user_id, event_id=event_id)
    return booking


async def cancel_booking(db: AsyncSession, user_id: int, booking_id: int) -> tuple[Booking, bool]:
    """
    Cancel one of the caller's bookings.

    Returns the booking and whether its status changed. Cancelling an
    already-cancelled booking is a no-op that still succeeds.
    """
    booking = await db.get(Booking, booking_id)

    if not booking:
        raise NotFoundError("Booking not found")

    if booking.user_id != user_id:
        logger.warning("booking_cancel_denied", booking_id=booking_id, user_id=user_id, owner_id=booking.user_id)
        raise AuthorizationError("Not authorized")

    if booking.status == STATUS_CANCELLED:
        logger.info("booking_already_cancelled", booking_id=booking_id, user_id=user_id)
        return booking, False

    booking.status = STATUS_CANCELLED
    await db.flush()
    await db.refresh(booking)

    logger.info("booking_cancelled", booking_id=booking.id, user_id=user_id, event_id=booking.event_id)
    return booking, True


async def list_user_bookings(db: AsyncSession, user_id: int) -> list[Booking]:
    """Get all bookings for a user, any status, with their events."""
    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.event))
        .where(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def list_event_bookings(db: AsyncSession, event_id: int) -> list[Booking]:
    """Confirmed bookings for one event, with their owners."""
    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.user))
        .where(Booking.event_id == event_id, Booking.status == STATUS_CONFIRMED)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())
