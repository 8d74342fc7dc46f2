# models/user_model.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from models.user_profile import UserProfileResponse


class UserSignup(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class TokenEnvelope(BaseModel):
    success: bool = True
    message: str
    token: str
    token_type: str = "bearer"
    user: UserProfileResponse
