from pydantic import EmailStr, Field, field_validator
from typing import Optional, List
from datetime import date, datetime

from eventhub.config import settings
from eventhub.schemas import CamelModel, blank_to_none

class UserRegisterSchema(CamelModel):
    # Field rules are enforced by auth.validators.validate_register.
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    birthdate: Optional[date] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    location: Optional[str] = Field(default=None, max_length=255)
    interests: Optional[List[str]] = None

    @field_validator("birthdate", mode="before")
    @classmethod
    def empty_birthdate(cls, value):
        return blank_to_none(value)

class UserLoginSchema(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

class UserUpdateSchema(CamelModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=20, pattern="^[A-Za-z]+$")
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=settings.PASSWORD_MIN_LENGTH)
    birthdate: Optional[date] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    location: Optional[str] = Field(default=None, max_length=255)
    interests: Optional[List[str]] = None
    avatar: Optional[str] = Field(default=None, max_length=255)
    banner: Optional[str] = Field(default=None, max_length=255)

    @field_validator("birthdate", mode="before")
    @classmethod
    def empty_birthdate(cls, value):
        return blank_to_none(value)

class UserResponseSchema(CamelModel):
    id: int
    username: str
    email: str
    birthdate: Optional[date] = None
    description: Optional[str] = None
    location: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    warnings: int
    is_active: bool
    avatar: str
    banner: str
    created_at: datetime

class UserWithTokenResponse(UserResponseSchema):
    token: str
