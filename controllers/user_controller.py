import logging
import re
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Query
from pymongo import ReturnDocument

from auth.auth_utils import CurrentUser, get_current_user
from auth.user_role_utils import verify_admin
from constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ROLE_MEMBER
from database import users_collection
from models.user_profile import (
    PreferencesEnvelope,
    PreferencesUpdate,
    ProfileEnvelope,
    ProfileUpdate,
    UserProfileResponse,
    UserSearchEnvelope,
)
from utils.exceptions import NotFoundException
from utils.pagination import create_pagination, get_pagination_params
from utils.profile_update import merge_preferences_update, merge_profile_update

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/user", tags=["user"])

# Credentials never leave the database
PUBLIC_PROJECTION = {"password_hash": 0}


def to_profile_response(user: dict) -> UserProfileResponse:
    return UserProfileResponse(
        user_id=str(user["_id"]),
        first_name=user.get("first_name", ""),
        last_name=user.get("last_name", ""),
        email=user["email"],
        bio=user.get("bio"),
        avatar=user.get("avatar"),
        social_links=user.get("social_links") or {},
        preferences=user.get("preferences") or {},
        role=user.get("role", ROLE_MEMBER),
        is_active=user.get("is_active", True),
        created_at=user.get("created_at"),
        last_login=user.get("last_login"),
    )


def _active_user_filter(user_id: str) -> dict:
    return {"_id": ObjectId(user_id), "is_active": True}


async def load_active_user(user_id: str) -> dict:
    user = await users_collection.find_one(_active_user_filter(user_id), PUBLIC_PROJECTION)
    if not user:
        raise NotFoundException("User")
    return user


async def _apply_user_update(user_id: str, updates: dict) -> dict:
    """Write a dotted-path ``$set`` and return the updated user."""
    if not updates:
        return await load_active_user(user_id)

    user = await users_collection.find_one_and_update(
        _active_user_filter(user_id),
        {"$set": updates},
        projection=PUBLIC_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )
    if not user:
        raise NotFoundException("User")
    return user


# -------------------
# PROFILE
# -------------------
@router.get("/profile", response_model=ProfileEnvelope)
async def get_profile(current_user: CurrentUser = Depends(get_current_user)) -> ProfileEnvelope:
    user = await load_active_user(current_user.user_id)
    return ProfileEnvelope(user=to_profile_response(user))


@router.put("/profile", response_model=ProfileEnvelope)
async def update_profile(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user)
) -> ProfileEnvelope:
    user = await load_active_user(current_user.user_id)

    # Raises before any write if the merged profile is invalid
    updates = merge_profile_update(user, payload)
    user = await _apply_user_update(current_user.user_id, updates)

    return ProfileEnvelope(message="Profile updated successfully", user=to_profile_response(user))


@router.delete("/profile")
async def deactivate_account(current_user: CurrentUser = Depends(get_current_user)) -> dict:
    result = await users_collection.update_one(
        _active_user_filter(current_user.user_id),
        {"$set": {"is_active": False}}
    )
    if result.matched_count == 0:
        raise NotFoundException("User")

    logger.info(f"User {current_user.user_id} deactivated their account")
    return {"success": True, "message": "Account deactivated successfully"}


# -------------------
# PREFERENCES
# -------------------
@router.get("/preferences", response_model=PreferencesEnvelope)
async def get_preferences(current_user: CurrentUser = Depends(get_current_user)) -> PreferencesEnvelope:
    user = await load_active_user(current_user.user_id)
    return PreferencesEnvelope(preferences=user.get("preferences") or {})


@router.put("/preferences", response_model=PreferencesEnvelope)
async def update_preferences(
    payload: PreferencesUpdate,
    current_user: CurrentUser = Depends(get_current_user)
) -> PreferencesEnvelope:
    user = await load_active_user(current_user.user_id)

    updates = merge_preferences_update(user, payload)
    user = await _apply_user_update(current_user.user_id, updates)

    return PreferencesEnvelope(
        message="Preferences updated successfully",
        preferences=user.get("preferences") or {},
    )


# -------------------
# SEARCH (admin)
# -------------------
@router.get("/search", response_model=UserSearchEnvelope, dependencies=[Depends(verify_admin)])
async def search_users(
    q: Optional[str] = Query(None, max_length=100, description="Substring of first name, last name or email"),
    role: Optional[str] = Query(None, pattern="^(admin|moderator|member)$"),
    page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Number of users per page"),
) -> UserSearchEnvelope:
    query = {"is_active": True}
    if q:
        pattern = re.escape(q)
        query["$or"] = [
            {"first_name": {"$regex": pattern, "$options": "i"}},
            {"last_name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
        ]
    if role:
        query["role"] = role

    skip, limit = get_pagination_params(page, limit)
    total = await users_collection.count_documents(query)

    cursor = users_collection.find(query, PUBLIC_PROJECTION).sort("created_at", -1).skip(skip).limit(limit)
    users = [to_profile_response(user) async for user in cursor]

    return UserSearchEnvelope(users=users, pagination=create_pagination(total, page, limit))
