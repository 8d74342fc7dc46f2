from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Query, status
from pymongo import ReturnDocument

from auth.auth_utils import CurrentUser, get_current_user
from auth.user_role_utils import verify_admin, verify_event_manager
from constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ROLE_ADMIN,
    SEARCH_EVENTS_LIMIT,
    UPCOMING_EVENTS_LIMIT,
    EventCategory,
    EventDifficulty,
    ListableEventStatus,
    LocationType,
)
from database import events_collection
from models.event import (
    EventCreate,
    EventEnvelope,
    EventFilters,
    EventListEnvelope,
    EventResponse,
    EventSearchEnvelope,
    EventStatistics,
    EventUpdate,
    PaginatedEventsEnvelope,
)
from utils.event_query import (
    build_event_query,
    featured_events_query,
    run_event_query,
    search_events_query,
    upcoming_events_query,
)
from utils.event_status import clamp_participants, display_status, duration_days, is_registration_open
from utils.exceptions import ForbiddenException, NotFoundException, ValidationException
from utils.pagination import create_pagination
from utils.registration import register_participant
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/events", tags=["events"])


def to_event_response(event: dict, now: datetime) -> EventResponse:
    doc = dict(event)
    doc["event_id"] = str(doc.pop("_id"))
    doc["organizers"] = [str(organizer) for organizer in doc.get("organizers", [])]
    return EventResponse(
        **doc,
        duration=duration_days(event),
        is_registration_open=is_registration_open(event, now),
        event_status=display_status(event, now),
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------------------
# LIST EVENTS (filtered, paginated)
# -------------------
@router.get("", response_model=PaginatedEventsEnvelope)
async def list_events(
        page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-indexed)"),
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Events per page"),
        category: Optional[EventCategory] = Query(None),
        difficulty: Optional[EventDifficulty] = Query(None),
        location: Optional[LocationType] = Query(None, description="Location type"),
        status: Optional[ListableEventStatus] = Query(None),
        featured: Optional[bool] = Query(None),
        search: Optional[str] = Query(None, max_length=200, description="Free-text search"),
) -> PaginatedEventsEnvelope:
    filters = EventFilters(
        category=category,
        difficulty=difficulty,
        location=location,
        status=status,
        featured=featured,
        search=search,
    )
    query = build_event_query(filters, page, limit)

    total = await events_collection.count_documents(query.filter)
    events = await run_event_query(events_collection, query)

    now = _utcnow()
    return PaginatedEventsEnvelope(
        events=[to_event_response(event, now) for event in events],
        pagination=create_pagination(total, query.page, query.limit),
    )


# -------------------
# FEATURED / UPCOMING / SEARCH
# -------------------
@router.get("/featured", response_model=EventListEnvelope)
async def featured_events() -> EventListEnvelope:
    events = await run_event_query(events_collection, featured_events_query())
    now = _utcnow()
    return EventListEnvelope(events=[to_event_response(event, now) for event in events])


@router.get("/upcoming", response_model=EventListEnvelope)
async def upcoming_events(
        limit: int = Query(UPCOMING_EVENTS_LIMIT, ge=1, le=MAX_PAGE_SIZE)
) -> EventListEnvelope:
    now = _utcnow()
    events = await run_event_query(events_collection, upcoming_events_query(now, limit))
    return EventListEnvelope(events=[to_event_response(event, now) for event in events])


@router.get("/search", response_model=EventSearchEnvelope)
async def search_events(
        q: str = Query(..., min_length=1, max_length=200, description="Search query"),
        category: Optional[EventCategory] = Query(None),
        difficulty: Optional[EventDifficulty] = Query(None),
        location: Optional[LocationType] = Query(None),
        limit: int = Query(SEARCH_EVENTS_LIMIT, ge=1, le=MAX_PAGE_SIZE),
) -> EventSearchEnvelope:
    q = q.strip()
    if not q:
        raise ValidationException("Validation failed", [{"field": "q", "message": "Search query must not be blank"}])

    filters = EventFilters(category=category, difficulty=difficulty, location=location)
    events = await run_event_query(events_collection, search_events_query(q, filters, limit))
    now = _utcnow()
    return EventSearchEnvelope(events=[to_event_response(event, now) for event in events], query=q)


# -------------------
# GET SINGLE EVENT
# -------------------
@router.get("/{event_id}", response_model=EventEnvelope)
async def get_event(event_id: str) -> EventEnvelope:
    # Every read counts as a view
    event = await events_collection.find_one_and_update(
        {"_id": ObjectId(event_id)},
        {"$inc": {"statistics.views": 1}},
        return_document=ReturnDocument.AFTER,
    )
    if not event:
        raise NotFoundException("Event")

    return EventEnvelope(event=to_event_response(event, _utcnow()))


# -------------------
# CREATE EVENT
# -------------------
@router.post("", response_model=EventEnvelope, status_code=status.HTTP_201_CREATED)
async def create_event(
        payload: EventCreate,
        current_user: CurrentUser = Depends(verify_event_manager)
) -> EventEnvelope:
    now = _utcnow()
    event_doc = payload.model_dump()
    event_doc.update({
        "current_participants": 0,
        "organizers": [ObjectId(current_user.user_id)],
        "statistics": EventStatistics().model_dump(),
        "created_at": now,
        "updated_at": now,
    })

    result = await events_collection.insert_one(event_doc)
    event_doc["_id"] = result.inserted_id

    logger.info(f"User {current_user.user_id} created event {result.inserted_id}")
    return EventEnvelope(message="Event created successfully", event=to_event_response(event_doc, now))


# -------------------
# UPDATE EVENT (partial)
# -------------------
@router.put("/{event_id}", response_model=EventEnvelope)
async def update_event(
        event_id: str,
        payload: EventUpdate,
        current_user: CurrentUser = Depends(verify_event_manager)
) -> EventEnvelope:
    event = await events_collection.find_one({"_id": ObjectId(event_id)})
    if not event:
        raise NotFoundException("Event")

    organizer_ids = [str(organizer) for organizer in event.get("organizers", [])]
    if current_user.user_id not in organizer_ids and current_user.role != ROLE_ADMIN:
        raise ForbiddenException("Not authorized to update this event")

    # Top-level fields the client sent; nested records are replaced whole, defaults filled
    updates = {name: value for name, value in payload.model_dump().items() if name in payload.model_fields_set}
    merged = {**event, **updates}

    # Re-validate the merged record against the creation rules before writing
    EventCreate.model_validate({name: merged[name] for name in EventCreate.model_fields if name in merged})

    current = merged.get("current_participants", 0)
    clamped = clamp_participants(current, merged.get("max_participants"))
    if "current_participants" in updates or clamped != current:
        updates["current_participants"] = clamped

    now = _utcnow()
    updates["updated_at"] = now

    updated = await events_collection.find_one_and_update(
        {"_id": event["_id"]},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise NotFoundException("Event")

    return EventEnvelope(message="Event updated successfully", event=to_event_response(updated, now))


# -------------------
# DELETE (HARD DELETE)
# -------------------
@router.delete("/{event_id}", dependencies=[Depends(verify_admin)])
async def delete_event(event_id: str) -> dict:
    result = await events_collection.delete_one({"_id": ObjectId(event_id)})
    if result.deleted_count == 0:
        raise NotFoundException("Event")

    logger.info(f"Event {event_id} deleted")
    return {"success": True, "message": "Event deleted successfully"}


# -------------------
# REGISTER FOR EVENT
# -------------------
@router.post("/{event_id}/register", response_model=EventEnvelope)
async def register_for_event(
        event_id: str,
        current_user: CurrentUser = Depends(get_current_user)
) -> EventEnvelope:
    now = _utcnow()
    event = await register_participant(events_collection, ObjectId(event_id), now)

    logger.info(f"User {current_user.user_id} registered for event {event_id}")
    return EventEnvelope(message="Successfully registered for event", event=to_event_response(event, now))
