from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from dojo_events.schemas.events import as_utc


class ParticipantCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    event_id: str = Field(alias="eventId", min_length=1)
    first_name: str = Field(alias="firstName", min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, alias="lastName", max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=32)


class ParticipantUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, alias="firstName", min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, alias="lastName", max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=32)


class ParticipantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    event_id: str = Field(serialization_alias="eventId")
    first_name: str = Field(serialization_alias="firstName")
    last_name: Optional[str] = Field(default=None, serialization_alias="lastName")
    email: str
    phone: Optional[str] = None
    status: str
    created_at: datetime = Field(serialization_alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def attach_timezone(cls, value: datetime) -> datetime:
        return as_utc(value)
