from pydantic import Field, field_validator
from datetime import datetime
from typing import Optional, List

from eventhub.schemas import CamelModel, blank_to_none


class EventCreateSchema(CamelModel):
    # Required fields are checked by auth.validators.validate_event.
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    category: Optional[str] = Field(default=None, max_length=50)
    date: Optional[datetime] = None
    time: Optional[str] = Field(default=None, max_length=50)
    period: Optional[str] = Field(default=None, max_length=50)
    location: Optional[str] = Field(default=None, max_length=255)
    participants_number: Optional[int] = Field(default=None, ge=1)
    coordinates: Optional[List[float]] = None

    @field_validator("date", "participants_number", mode="before")
    @classmethod
    def empty_as_missing(cls, value):
        return blank_to_none(value)

class EventUpdateSchema(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    date: Optional[datetime] = None
    time: Optional[str] = Field(default=None, max_length=50)
    period: Optional[str] = Field(default=None, max_length=50)
    location: Optional[str] = Field(default=None, max_length=255)
    participants_number: Optional[int] = Field(default=None, ge=1)
    coordinates: Optional[List[float]] = None
    status: Optional[bool] = None

    @field_validator("date", "participants_number", mode="before")
    @classmethod
    def empty_as_missing(cls, value):
        return blank_to_none(value)

class EventResponseSchema(CamelModel):
    id: int
    title: str
    description: str
    category: str
    date: datetime
    time: Optional[str] = None
    period: Optional[str] = None
    location: Optional[str] = None
    owner: int = Field(validation_alias="owner_id")
    participants_number: Optional[int] = None
    participants: List[int] = Field(default_factory=list)
    waiting_list: List[int] = Field(default_factory=list)
    coordinates: List[float] = Field(default_factory=list)
    status: Optional[bool] = None
    warnings: int
    created_at: datetime

class ParticipationTargetSchema(CamelModel):
    user_id: int
