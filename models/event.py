from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from constants import (
    EventCategory,
    EventDifficulty,
    EventStatus,
    ListableEventStatus,
    LocationType,
    PrizeRank,
    ResourceType,
    TimelineEntryType,
)
from utils.pagination import Pagination


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with stored values."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Coordinates(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class EventLocation(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    type: LocationType = LocationType.ONLINE
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class EventStatistics(BaseModel):
    views: int = 0
    registrations: int = 0
    submissions: int = 0


class Prize(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    rank: Optional[PrizeRank] = None
    amount: Optional[float] = Field(default=None, ge=0)
    currency: str = "USD"
    description: Optional[str] = None


class Sponsor(BaseModel):
    name: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    contribution: Optional[str] = None


class Mentor(BaseModel):
    name: Optional[str] = None
    expertise: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None


class Resource(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    type: Optional[ResourceType] = None


class AgeRestriction(BaseModel):
    min: Optional[int] = Field(default=None, ge=0)
    max: Optional[int] = Field(default=None, ge=0)


class Requirements(BaseModel):
    min_team_size: int = Field(default=1, ge=1)
    max_team_size: int = Field(default=4, ge=1)
    age_restriction: Optional[AgeRestriction] = None
    skills: List[str] = []
    equipment: List[str] = []

    @model_validator(mode="after")
    def check_team_size(self):
        if self.max_team_size < self.min_team_size:
            raise ValueError("Maximum team size must not be below minimum team size")
        return self


class TimelineEntry(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    type: Optional[TimelineEntryType] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value):
        return as_utc(value)


class EventContact(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


class EventSocialMedia(BaseModel):
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    linkedin: Optional[str] = None


class EventCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True, validate_default=True)

    title: str = Field(min_length=5, max_length=100)
    description: str = Field(min_length=20, max_length=2000)
    short_description: str = Field(min_length=10, max_length=200)
    start_date: datetime
    end_date: datetime
    registration_deadline: datetime
    location: EventLocation = Field(default_factory=EventLocation)
    max_participants: Optional[int] = Field(default=None, ge=1)
    categories: List[EventCategory] = Field(min_length=1)
    difficulty: EventDifficulty = EventDifficulty.INTERMEDIATE
    status: EventStatus = EventStatus.DRAFT
    is_featured: bool = False
    tags: List[str] = []
    rules: List[str] = []
    cover_image: Optional[str] = None
    registration_fee: float = Field(default=0, ge=0)
    currency: str = "USD"
    prizes: List[Prize] = []
    sponsors: List[Sponsor] = []
    mentors: List[Mentor] = []
    resources: List[Resource] = []
    timeline: List[TimelineEntry] = []
    requirements: Requirements = Field(default_factory=Requirements)
    contact: EventContact = Field(default_factory=EventContact)
    social_media: EventSocialMedia = Field(default_factory=EventSocialMedia)
    gallery: List[str] = []

    @field_validator("start_date", "end_date", "registration_deadline")
    @classmethod
    def normalize_dates(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def check_schedule(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must not be before start date")
        return self


class EventUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    title: Optional[str] = Field(default=None, min_length=5, max_length=100)
    description: Optional[str] = Field(default=None, min_length=20, max_length=2000)
    short_description: Optional[str] = Field(default=None, min_length=10, max_length=200)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    registration_deadline: Optional[datetime] = None
    location: Optional[EventLocation] = None
    max_participants: Optional[int] = Field(default=None, ge=1)
    current_participants: Optional[int] = Field(default=None, ge=0)
    categories: Optional[List[EventCategory]] = Field(default=None, min_length=1)
    difficulty: Optional[EventDifficulty] = None
    status: Optional[EventStatus] = None
    is_featured: Optional[bool] = None
    tags: Optional[List[str]] = None
    rules: Optional[List[str]] = None
    cover_image: Optional[str] = None
    registration_fee: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None
    prizes: Optional[List[Prize]] = None
    sponsors: Optional[List[Sponsor]] = None
    mentors: Optional[List[Mentor]] = None
    resources: Optional[List[Resource]] = None
    timeline: Optional[List[TimelineEntry]] = None
    requirements: Optional[Requirements] = None
    contact: Optional[EventContact] = None
    social_media: Optional[EventSocialMedia] = None
    gallery: Optional[List[str]] = None

    @field_validator("start_date", "end_date", "registration_deadline")
    @classmethod
    def normalize_dates(cls, value):
        return as_utc(value)


class EventFilters(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    category: Optional[EventCategory] = None
    difficulty: Optional[EventDifficulty] = None
    location: Optional[LocationType] = None
    status: Optional[ListableEventStatus] = None
    featured: Optional[bool] = None
    search: Optional[str] = None

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, value):
        if value is not None:
            value = value.strip()
        return value or None


class EventResponse(BaseModel):
    event_id: str
    title: str
    description: str
    short_description: str
    start_date: datetime
    end_date: datetime
    registration_deadline: datetime
    location: EventLocation
    max_participants: Optional[int] = None
    current_participants: int = 0
    categories: List[str]
    difficulty: str
    status: str
    is_featured: bool = False
    organizers: List[str] = []
    statistics: EventStatistics = Field(default_factory=EventStatistics)
    tags: List[str] = []
    rules: List[str] = []
    cover_image: Optional[str] = None
    registration_fee: float = 0
    currency: str = "USD"
    prizes: List[Prize] = []
    sponsors: List[Sponsor] = []
    mentors: List[Mentor] = []
    resources: List[Resource] = []
    timeline: List[TimelineEntry] = []
    requirements: Requirements = Field(default_factory=Requirements)
    contact: EventContact = Field(default_factory=EventContact)
    social_media: EventSocialMedia = Field(default_factory=EventSocialMedia)
    gallery: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Derived on read, never stored
    duration: Optional[int] = None
    is_registration_open: bool = False
    event_status: str
    score: Optional[float] = None


class EventEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    event: EventResponse


class EventListEnvelope(BaseModel):
    success: bool = True
    events: List[EventResponse]


class PaginatedEventsEnvelope(EventListEnvelope):
    pagination: Pagination


class EventSearchEnvelope(EventListEnvelope):
    query: str
