"""
Application-wide constants.
Centralizes enumerations, limits and user-facing messages.
"""
from enum import Enum


class EventCategory(str, Enum):
    WEB_DEVELOPMENT = "web-development"
    MOBILE_DEVELOPMENT = "mobile-development"
    AI_ML = "ai-ml"
    BLOCKCHAIN = "blockchain"
    CYBERSECURITY = "cybersecurity"
    IOT = "iot"
    OTHER = "other"


class EventDifficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class LocationType(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    HYBRID = "hybrid"


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    REGISTRATION_OPEN = "registration-open"
    REGISTRATION_CLOSED = "registration-closed"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses accepted by the public list filter
class ListableEventStatus(str, Enum):
    PUBLISHED = "published"
    REGISTRATION_OPEN = "registration-open"
    REGISTRATION_CLOSED = "registration-closed"
    ONGOING = "ongoing"
    COMPLETED = "completed"


# Statuses shown on the featured and upcoming lists
VISIBLE_EVENT_STATUSES = [EventStatus.PUBLISHED.value, EventStatus.REGISTRATION_OPEN.value]


class PrizeRank(str, Enum):
    FIRST = "1st"
    SECOND = "2nd"
    THIRD = "3rd"
    HONORABLE_MENTION = "honorable-mention"


class ResourceType(str, Enum):
    DOCUMENTATION = "documentation"
    VIDEO = "video"
    TUTORIAL = "tutorial"
    API = "api"
    OTHER = "other"


class TimelineEntryType(str, Enum):
    REGISTRATION = "registration"
    KICKOFF = "kickoff"
    CHECKPOINT = "checkpoint"
    SUBMISSION = "submission"
    JUDGING = "judging"
    AWARDS = "awards"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


# User roles
ROLE_ADMIN = "admin"
ROLE_MODERATOR = "moderator"
ROLE_MEMBER = "member"

# Default pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50

# List presets
FEATURED_EVENTS_LIMIT = 5
UPCOMING_EVENTS_LIMIT = 10
SEARCH_EVENTS_LIMIT = 20

# Registration rejection messages
MESSAGE_REGISTRATION_NOT_OPEN = "Event registration is not open"
MESSAGE_DEADLINE_PASSED = "Registration deadline has passed"
MESSAGE_EVENT_FULL = "Event is full"
