from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------- Event ----------
class EventCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    user_id: str = Field(alias="userId", min_length=1)
    name: str = Field(min_length=3, max_length=100)
    bio: str = Field(min_length=10, max_length=500)
    participantnbr: int = Field(ge=0)
    prix: float = Field(ge=0)
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")

    @field_validator("start_date")
    @classmethod
    def check_start_in_future(cls, start_date: datetime) -> datetime:
        start_date = as_utc(start_date)
        if start_date <= datetime.now(timezone.utc):
            raise ValueError("Start date must be in the future")
        return start_date

    @field_validator("end_date")
    @classmethod
    def check_ends_after_start(cls, end_date: datetime, info: ValidationInfo) -> datetime:
        end_date = as_utc(end_date)
        start_date: datetime | None = info.data.get("start_date")
        if start_date and end_date <= start_date:
            raise ValueError("End date must be after start date")
        return end_date


class EventUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    bio: Optional[str] = Field(default=None, min_length=10, max_length=500)
    participantnbr: Optional[int] = Field(default=None, ge=0)
    prix: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")

    @field_validator("start_date")
    @classmethod
    def normalize_start(cls, start_date: datetime | None) -> datetime | None:
        return as_utc(start_date) if start_date else None

    @field_validator("end_date")
    @classmethod
    def check_ends_after_start(cls, end_date: datetime | None, info: ValidationInfo) -> datetime | None:
        if end_date is None:
            return None
        end_date = as_utc(end_date)
        start_date: datetime | None = info.data.get("start_date")
        if start_date and end_date <= start_date:
            raise ValueError("End date must be after start date")
        return end_date


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str = Field(serialization_alias="userId")
    name: str
    bio: str
    capacity: int = Field(serialization_alias="participantnbr")
    registered_count: int = Field(serialization_alias="registeredCount")
    remaining_slots: int = Field(serialization_alias="ticketrestant")
    prix: float
    start_date: datetime = Field(serialization_alias="startDate")
    end_date: datetime = Field(serialization_alias="endDate")

    @field_validator("start_date", "end_date")
    @classmethod
    def attach_timezone(cls, value: datetime) -> datetime:
        return as_utc(value)
