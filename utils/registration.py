"""
Event registration: admission check and the conditional participant increment.

The increment only matches while the event is still open, before its deadline
and below its capacity, so concurrent registrants can never push an event past
capacity. Other registrants landing first do not make the write miss while
seats remain; a miss means status, deadline or capacity really changed, and
the event is re-read and checked again.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument

from constants import (
    EventStatus,
    MESSAGE_DEADLINE_PASSED,
    MESSAGE_EVENT_FULL,
    MESSAGE_REGISTRATION_NOT_OPEN,
)
from utils.exceptions import NotFoundException, RegistrationRejectedException

logger = logging.getLogger(__name__)


class RegistrationRejection(str, Enum):
    NOT_OPEN = "registration-not-open"
    DEADLINE_PASSED = "deadline-passed"
    EVENT_FULL = "event-full"


REJECTION_MESSAGES = {
    RegistrationRejection.NOT_OPEN: MESSAGE_REGISTRATION_NOT_OPEN,
    RegistrationRejection.DEADLINE_PASSED: MESSAGE_DEADLINE_PASSED,
    RegistrationRejection.EVENT_FULL: MESSAGE_EVENT_FULL,
}

REGISTRATION_UPDATE = {"$inc": {"current_participants": 1, "statistics.registrations": 1}}


def check_registration(event: dict, now: datetime) -> Optional[RegistrationRejection]:
    """Return why ``event`` cannot admit a registrant at ``now``, or None if it can."""
    if event.get("status") != EventStatus.REGISTRATION_OPEN.value:
        return RegistrationRejection.NOT_OPEN

    deadline = event.get("registration_deadline")
    if deadline is None or now > deadline:
        return RegistrationRejection.DEADLINE_PASSED

    maximum = event.get("max_participants")
    if maximum and event.get("current_participants", 0) >= maximum:
        return RegistrationRejection.EVENT_FULL

    return None


def registration_filter(event: dict, now: datetime) -> dict:
    """Filter matching ``event`` only while it can still admit one more registrant."""
    query = {
        "_id": event["_id"],
        "status": EventStatus.REGISTRATION_OPEN.value,
        "registration_deadline": {"$gte": now},
    }
    maximum = event.get("max_participants")
    if maximum:
        query["max_participants"] = maximum
        query["current_participants"] = {"$lt": maximum}
    else:
        query["max_participants"] = maximum
    return query


async def register_participant(collection, event_id: ObjectId, now: datetime) -> dict:
    """
    Admit one participant to an event.

    Args:
        collection: Events collection (motor or compatible)
        event_id: Event ObjectId
        now: Current time, timezone-aware

    Returns:
        The event document after the increment

    Raises:
        NotFoundException: no event with this id
        RegistrationRejectedException: closed, past deadline or full
    """
    while True:
        event = await collection.find_one({"_id": event_id})
        if not event:
            raise NotFoundException("Event")

        rejection = check_registration(event, now)
        if rejection is not None:
            raise RegistrationRejectedException(rejection.value, REJECTION_MESSAGES[rejection])

        updated = await collection.find_one_and_update(
            registration_filter(event, now),
            REGISTRATION_UPDATE,
            return_document=ReturnDocument.AFTER,
        )
        if updated is not None:
            return updated

        # Capacity, status or deadline was edited in between; check the new values
        logger.info(f"Event {event_id} changed during registration, re-checking")
