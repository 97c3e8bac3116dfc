from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from dojo_events.schemas.events import as_utc


class EventRecord(BaseModel):
    """One event as last fetched from the backend."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    user_id: str = Field(alias="userId")
    name: str
    bio: str
    participantnbr: int
    registered_count: int = Field(default=0, alias="registeredCount")
    prix: float
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")

    @field_validator("start_date", "end_date")
    @classmethod
    def attach_timezone(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def capacity(self) -> int:
        return self.participantnbr

    @property
    def remaining_slots(self) -> int:
        return max(self.participantnbr - self.registered_count, 0)


class ParticipantRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    event_id: Optional[str] = Field(default=None, alias="eventId")
    first_name: str = Field(alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: str
    phone: Optional[str] = None
    status: Optional[str] = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
