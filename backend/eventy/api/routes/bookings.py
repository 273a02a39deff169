"""
Booking endpoints: book, cancel, list own bookings, admin roster.
"""

import time

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventy.db.session import get_db
from eventy.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingWithEventResponse,
    BookingWithUserResponse,
    BookingCancelResponse,
)
from eventy.services import booking_service
from eventy.services.cache_service import invalidate_event_cache
from eventy.core.exceptions import ConflictError, NotFoundError
from eventy.core.metrics import booking_latency, record_booking_attempt, record_booking_cancellation
from eventy.core.security import get_current_user_id, require_admin

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.get("", response_model=list[BookingWithEventResponse])
async def list_user_bookings(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """All of the caller's bookings, newest first, with their events."""
    return await booking_service.list_user_bookings(db, user_id)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Book an event. Returns 409 if the caller already holds a confirmed
    booking for it.
    """
    start = time.perf_counter()
    try:
        booking = await booking_service.create_booking(db, user_id, booking_data.event_id)
    except ConflictError:
        record_booking_attempt("conflict")
        raise
    except NotFoundError:
        record_booking_attempt("not_found")
        raise
    except Exception:
        record_booking_attempt("error")
        raise
    finally:
        booking_latency.observe(time.perf_counter() - start)

    record_booking_attempt("success")
    # Top-booked counts changed; clear only once the booking is committed
    await db.commit()
    await invalidate_event_cache()
    return booking


@router.put("/{booking_id}/cancel", response_model=BookingCancelResponse)
async def cancel_booking_endpoint(
    booking_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Cancel one of the caller's bookings."""
    booking, changed = await booking_service.cancel_booking(db, user_id, booking_id)
    if changed:
        await db.commit()
        record_booking_cancellation()
        await invalidate_event_cache()
    return BookingCancelResponse(
        message="Booking cancelled successfully",
        booking_id=booking.id,
        status=booking.status,
    )


@router.get(
    "/event/{event_id}",
    response_model=list[BookingWithUserResponse],
    dependencies=[Depends(require_admin)],
)
async def list_event_bookings(event_id: int, db: AsyncSession = Depends(get_db)):
    """Confirmed bookings for an event with attendee name and email. Admin only."""
    return await booking_service.list_event_bookings(db, event_id)
