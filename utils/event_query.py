"""
Event query builder.

Turns validated list/search parameters into a MongoDB filter, sort order,
projection and pagination window. Inputs are already checked against the
enumerations by the request layer, so nothing here rejects values.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import pymongo

from constants import (
    FEATURED_EVENTS_LIMIT,
    SEARCH_EVENTS_LIMIT,
    UPCOMING_EVENTS_LIMIT,
    VISIBLE_EVENT_STATUSES,
)
from models.event import EventFilters
from utils.pagination import get_pagination_params

TEXT_SCORE = {"$meta": "textScore"}
START_DATE_ASCENDING = [("start_date", pymongo.ASCENDING)]


@dataclass
class EventQuery:
    filter: dict
    sort: list
    limit: int
    skip: int = 0
    page: int = 1
    projection: Optional[dict] = field(default=None)


def build_event_filter(filters: EventFilters) -> dict:
    """AND together every filter that was supplied."""
    query = {}

    if filters.category:
        # Matches any event whose categories array contains the value
        query["categories"] = filters.category
    if filters.difficulty:
        query["difficulty"] = filters.difficulty
    if filters.location:
        query["location.type"] = filters.location
    if filters.status:
        query["status"] = filters.status
    if filters.featured:
        query["is_featured"] = True
    if filters.search:
        query["$text"] = {"$search": filters.search}

    return query


def _ordering(filters: EventFilters) -> tuple[list, Optional[dict]]:
    if filters.search:
        return [("score", TEXT_SCORE)], {"score": TEXT_SCORE}
    return list(START_DATE_ASCENDING), None


def build_event_query(filters: EventFilters, page: int = 1, limit: int = 10) -> EventQuery:
    """
    Build the paginated list query.

    Text searches rank by relevance; everything else is ordered by start date.
    """
    skip, limit = get_pagination_params(page, limit)
    sort, projection = _ordering(filters)

    return EventQuery(
        filter=build_event_filter(filters),
        sort=sort,
        projection=projection,
        skip=skip,
        limit=limit,
        page=page,
    )


def featured_events_query(limit: int = FEATURED_EVENTS_LIMIT) -> EventQuery:
    return EventQuery(
        filter={"is_featured": True, "status": {"$in": VISIBLE_EVENT_STATUSES}},
        sort=list(START_DATE_ASCENDING),
        limit=limit,
    )


def upcoming_events_query(now: datetime, limit: int = UPCOMING_EVENTS_LIMIT) -> EventQuery:
    return EventQuery(
        filter={"status": {"$in": VISIBLE_EVENT_STATUSES}, "start_date": {"$gt": now}},
        sort=list(START_DATE_ASCENDING),
        limit=limit,
    )


def search_events_query(text: str, filters: EventFilters, limit: int = SEARCH_EVENTS_LIMIT) -> EventQuery:
    """Relevance-ranked text search narrowed by category, difficulty and location."""
    scoped = EventFilters(
        category=filters.category,
        difficulty=filters.difficulty,
        location=filters.location,
        search=text,
    )
    sort, projection = _ordering(scoped)

    return EventQuery(
        filter=build_event_filter(scoped),
        sort=sort,
        projection=projection,
        limit=limit,
    )


async def run_event_query(collection, query: EventQuery) -> list:
    """Execute ``query`` and return the matching documents."""
    cursor = collection.find(query.filter, query.projection).sort(query.sort)
    if query.skip:
        cursor = cursor.skip(query.skip)
    return await cursor.limit(query.limit).to_list(length=query.limit)
