"""
Event endpoints. Public reads are cached in Redis; admin writes commit and
then invalidate the cache, so a concurrent read cannot re-cache old rows.
"""

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventy.db.session import get_db
from eventy.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventListResponse,
    TopBookedEventResponse,
    CategoryListResponse,
    EventDeleteResponse,
)
from eventy.services import event_service
from eventy.services.cache_service import (
    get_cached,
    set_cached,
    invalidate_event_cache,
    make_event_list_key,
    make_top_booked_key,
)
from eventy.core.config import get_settings
from eventy.core.security import require_admin
from eventy.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=EventListResponse)
async def list_events_endpoint(
    search: Optional[str] = Query(None, max_length=200),
    page: Optional[int] = Query(None, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """
    List events newest-first, with optional search and pagination.
    Without `page` every matching event is returned in one page.
    """
    key = make_event_list_key(search, page, page_size)
    cached = await get_cached(key)
    if cached:
        logger.info("events_list_cache_hit", key=key)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await event_service.list_events(db, search, page, page_size)

    if page is None:
        effective_page, effective_size, pages = 1, max(total, 1), 1
    else:
        effective_page, effective_size = page, page_size
        pages = max(math.ceil(total / page_size), 1)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump(mode="json") for e in events],
        "total": total,
        "page": effective_page,
        "page_size": effective_size,
        "pages": pages,
        "cached": False,
    }
    await set_cached(key, response_data)

    return EventListResponse(**response_data)


@router.get("/top-booked", response_model=list[TopBookedEventResponse])
async def top_booked_endpoint(
    limit: Optional[int] = Query(None, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Events with the most bookings, for the landing page highlight."""
    limit = limit or settings.TOP_BOOKED_LIMIT
    confirmed_only = settings.TOP_BOOKED_CONFIRMED_ONLY

    key = make_top_booked_key(limit, confirmed_only)
    cached = await get_cached(key)
    if cached is not None:
        return [TopBookedEventResponse(**item) for item in cached]

    ranked = await event_service.top_booked_events(db, limit, confirmed_only)
    items = [
        TopBookedEventResponse(**EventResponse.model_validate(event).model_dump(), booking_count=count)
        for event, count in ranked
    ]
    await set_cached(key, [item.model_dump(mode="json") for item in items])
    return items


@router.get("/categories", response_model=CategoryListResponse)
async def categories_endpoint():
    """The fixed category list used by event forms and filters."""
    return CategoryListResponse(categories=event_service.list_categories())


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    return await event_service.get_event(db, event_id)


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_event_endpoint(event_data: EventCreate, db: AsyncSession = Depends(get_db)):
    """Create a new event. Admin only."""
    event = await event_service.create_event(db, event_data)
    await db.commit()
    await invalidate_event_cache()
    return event


@router.put("/{event_id}", response_model=EventResponse, dependencies=[Depends(require_admin)])
async def update_event_endpoint(
    event_id: int,
    event_data: EventUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Partially update an event. Admin only."""
    event = await event_service.update_event(db, event_id, event_data)
    await db.commit()
    await invalidate_event_cache()
    return event


@router.delete("/{event_id}", response_model=EventDeleteResponse, dependencies=[Depends(require_admin)])
async def delete_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Delete an event together with its bookings. Admin only."""
    bookings_deleted = await event_service.delete_event(db, event_id)
    await db.commit()
    await invalidate_event_cache()
    return EventDeleteResponse(
        message="Event and associated bookings removed",
        event_id=event_id,
        bookings_deleted=bookings_deleted,
    )
