from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from pydantic import BaseModel
from bson import ObjectId
from dotenv import load_dotenv
import os

from constants import ROLE_MEMBER
from database import users_collection
from utils.exceptions import UnauthorizedException

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable is not set. Please set it in your .env file.")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

# Define OAuth2 scheme once
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


class CurrentUser(BaseModel):
    """Caller identity resolved from the bearer token and the stored account, scoped to one request."""
    user_id: str
    email: str
    role: str = ROLE_MEMBER


def decode_access_token(token: str) -> CurrentUser:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise UnauthorizedException("Invalid or expired token")

    user_id = payload.get("sub")
    email = payload.get("email")
    if user_id is None or email is None:
        raise UnauthorizedException("Invalid authentication token")
    return CurrentUser(user_id=user_id, email=email, role=payload.get("role") or ROLE_MEMBER)


# Dependency to get current user
async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    claims = decode_access_token(token)
    if not ObjectId.is_valid(claims.user_id):
        raise UnauthorizedException("Invalid authentication token")

    # Role and account state come from the database, not the token
    user = await users_collection.find_one(
        {"_id": ObjectId(claims.user_id), "is_active": True},
        {"email": 1, "role": 1},
    )
    if not user:
        raise UnauthorizedException("User not found or account deactivated")

    return CurrentUser(
        user_id=claims.user_id,
        email=user.get("email", claims.email),
        role=user.get("role") or ROLE_MEMBER,
    )
