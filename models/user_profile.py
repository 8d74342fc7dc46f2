from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, HttpUrl

from constants import Theme
from utils.pagination import Pagination

# Validated as an http(s) URL, stored as a plain string
WebUrl = Annotated[HttpUrl, AfterValidator(str)]


class SocialLinks(BaseModel):
    github: Optional[WebUrl] = None
    linkedin: Optional[WebUrl] = None
    twitter: Optional[WebUrl] = None
    website: Optional[WebUrl] = None


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = False


class Preferences(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    theme: Theme = Theme.AUTO
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)


class UserProfile(BaseModel):
    """Constraints every stored profile must satisfy, on signup and after each update."""
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar: Optional[str] = None
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    preferences: Preferences = Field(default_factory=Preferences)


# Sparse update payloads: a field is applied only when it is present in the request

class SocialLinksUpdate(BaseModel):
    github: Optional[WebUrl] = None
    linkedin: Optional[WebUrl] = None
    twitter: Optional[WebUrl] = None
    website: Optional[WebUrl] = None


class NotificationPreferencesUpdate(BaseModel):
    email: Optional[bool] = None
    push: Optional[bool] = None


class PreferencesUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    theme: Optional[Theme] = None
    notifications: Optional[NotificationPreferencesUpdate] = None


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar: Optional[str] = None
    social_links: Optional[SocialLinksUpdate] = None
    preferences: Optional[PreferencesUpdate] = None


class UserProfileResponse(BaseModel):
    user_id: str
    first_name: str
    last_name: str
    email: EmailStr
    bio: Optional[str] = None
    avatar: Optional[str] = None
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    preferences: Preferences = Field(default_factory=Preferences)
    role: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class ProfileEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: UserProfileResponse


class PreferencesEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    preferences: Preferences


class UserSearchEnvelope(BaseModel):
    success: bool = True
    users: List[UserProfileResponse]
    pagination: Pagination
