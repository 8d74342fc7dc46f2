# controllers/auth_controller.py
import logging
import os
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Request, status
from jose import jwt
from passlib.context import CryptContext
from pymongo.errors import DuplicateKeyError

from auth.auth_utils import ALGORITHM, SECRET_KEY, CurrentUser, get_current_user
from constants import ROLE_MEMBER
from controllers.user_controller import load_active_user, to_profile_response
from database import users_collection
from middleware.rate_limiter import limiter, RATE_LIMIT_LOGIN, RATE_LIMIT_SIGNUP
from models.user_model import TokenEnvelope, UserLogin, UserSignup
from models.user_profile import ProfileEnvelope, Preferences, SocialLinks
from utils.exceptions import ConflictException, UnauthorizedException

logger = logging.getLogger(__name__)

ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

router = APIRouter(prefix="/auth", tags=["Auth"])

# --------------------------------------------------------------------
# Use Argon2 (stronger and avoids bcrypt issues)
# --------------------------------------------------------------------
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


# --------------------------------------------------------------------
# Password utilities
# --------------------------------------------------------------------
def hash_password(password: str) -> str:
    """Hash password using Argon2 algorithm."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify plain password against hashed password."""
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # Malformed or missing stored hash
        return False


# --------------------------------------------------------------------
# JWT token creation
# --------------------------------------------------------------------
def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token with expiration."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def token_for_user(user: dict) -> str:
    return create_access_token(
        {"sub": str(user["_id"]), "email": user["email"], "role": user.get("role", ROLE_MEMBER)}
    )


# --------------------------------------------------------------------
# Routes
# --------------------------------------------------------------------
@router.post("/signup", response_model=TokenEnvelope, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT_SIGNUP)
async def signup(request: Request, user: UserSignup) -> TokenEnvelope:
    """Register a new member account."""
    email = user.email.lower()
    if await users_collection.find_one({"email": email}):
        raise ConflictException("Email already registered", error_code="EMAIL_TAKEN")

    now = datetime.now(timezone.utc)
    user_doc = {
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": email,
        "password_hash": hash_password(user.password),
        "bio": None,
        "avatar": None,
        "social_links": SocialLinks().model_dump(),
        "preferences": Preferences().model_dump(),
        "role": ROLE_MEMBER,
        "is_active": True,
        "created_at": now,
        "last_login": now,
    }
    try:
        result = await users_collection.insert_one(user_doc)
    except DuplicateKeyError:
        raise ConflictException("Email already registered", error_code="EMAIL_TAKEN")
    user_doc["_id"] = result.inserted_id

    logger.info(f"New account registered: {user_doc['_id']}")
    return TokenEnvelope(
        message="User registered successfully",
        token=token_for_user(user_doc),
        user=to_profile_response(user_doc),
    )


@router.post("/login", response_model=TokenEnvelope)
@limiter.limit(RATE_LIMIT_LOGIN)
async def login(request: Request, credentials: UserLogin) -> TokenEnvelope:
    """Authenticate user and return JWT token."""
    db_user = await users_collection.find_one({"email": credentials.email.lower()})
    if not db_user or not verify_password(credentials.password, db_user.get("password_hash")):
        raise UnauthorizedException("Invalid email or password")

    if not db_user.get("is_active", True):
        raise UnauthorizedException("Account has been deactivated")

    now = datetime.now(timezone.utc)
    await users_collection.update_one({"_id": db_user["_id"]}, {"$set": {"last_login": now}})
    db_user["last_login"] = now

    return TokenEnvelope(
        message="Login successful",
        token=token_for_user(db_user),
        user=to_profile_response(db_user),
    )


@router.get("/me", response_model=ProfileEnvelope)
async def me(current_user: CurrentUser = Depends(get_current_user)) -> ProfileEnvelope:
    user = await load_active_user(current_user.user_id)
    return ProfileEnvelope(user=to_profile_response(user))
