import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from dojo_events.client.api import BackendClient
from dojo_events.client.notifications import Notifier
from dojo_events.client.records import EventRecord
from dojo_events.client.result import Err, Ok, Result
from dojo_events.client.session import UserSession
from dojo_events.schemas.events import as_utc

logger = logging.getLogger(__name__)

EVENT_FIELDS = ("name", "bio", "participantnbr", "prix", "startDate", "endDate")

INVALID_FORM = "Please correct the highlighted fields"


@dataclass(frozen=True)
class ValidatedEvent:
    name: str
    bio: str
    participantnbr: int
    prix: float
    start_date: datetime
    end_date: datetime

    def to_payload(self, user_id: str) -> dict:
        return {
            "name": self.name,
            "bio": self.bio,
            "participantnbr": self.participantnbr,
            "prix": self.prix,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "userId": user_id,
        }


def parse_datetime(value: Any) -> Optional[datetime]:
    """Accept datetimes or ISO strings such as ``2026-10-17T18:30``; naive means UTC."""
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str) and value.strip():
        try:
            return as_utc(datetime.fromisoformat(_zulu_to_offset(value.strip())))
        except ValueError:
            return None
    return None


def _zulu_to_offset(value: str) -> str:
    # fromisoformat only accepts a trailing "Z" from Python 3.11
    return value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return int(number) if math.isfinite(number) and number.is_integer() else None


def _coerce_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def validate_event_draft(draft: dict, *, now: datetime, creating: bool = True) -> Result:
    """
    Check an event draft field by field.

    Returns ``Ok(ValidatedEvent)`` or an ``Err`` whose ``field_errors`` holds one
    message per failing field; every failing rule is reported in the same pass.
    """
    errors: dict[str, str] = {}

    name = str(draft.get("name") or "").strip()
    if len(name) < 3:
        errors["name"] = "Name must be at least 3 characters"
    elif len(name) > 100:
        errors["name"] = "Name must be less than 100 characters"

    bio = str(draft.get("bio") or "").strip()
    if len(bio) < 10:
        errors["bio"] = "Description must be at least 10 characters"
    elif len(bio) > 500:
        errors["bio"] = "Description must be less than 500 characters"

    participantnbr = _coerce_int(draft.get("participantnbr"))
    if participantnbr is None:
        errors["participantnbr"] = "Number of participants must be a whole number"
    elif participantnbr < 0:
        errors["participantnbr"] = "Number of participants cannot be negative"

    prix = _coerce_float(draft.get("prix"))
    if prix is None:
        errors["prix"] = "Price must be a number"
    elif prix < 0:
        errors["prix"] = "Price cannot be negative"

    start_date = parse_datetime(draft.get("startDate"))
    end_date = parse_datetime(draft.get("endDate"))
    if _is_blank(draft.get("startDate")):
        errors["startDate"] = "Start date is required"
    elif start_date is None:
        errors["startDate"] = "Start date is not a valid date"
    elif creating and start_date <= as_utc(now):
        errors["startDate"] = "Start date must be in the future"
    if _is_blank(draft.get("endDate")):
        errors["endDate"] = "End date is required"
    elif end_date is None:
        errors["endDate"] = "End date is not a valid date"
    elif start_date is not None and end_date <= start_date:
        errors["endDate"] = "End date must be after start date"

    if errors:
        return Err(INVALID_FORM, field_errors=errors)
    return Ok(
        ValidatedEvent(
            name=name,
            bio=bio,
            participantnbr=participantnbr,
            prix=prix,
            start_date=start_date,
            end_date=end_date,
        )
    )


class EventFormController:
    """Create or update an event: validate locally, then hand off to the backend."""

    def __init__(
        self,
        api: BackendClient,
        session: UserSession,
        notifier: Notifier,
        *,
        event_id: str | None = None,
        on_success: Callable[[EventRecord], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.api = api
        self.session = session
        self.notifier = notifier
        self.event_id = event_id
        self.on_success = on_success
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.draft: dict[str, Any] = {field: "" for field in EVENT_FIELDS}
        self.errors: dict[str, str] = {}
        self.is_loading = False
        self.saved: EventRecord | None = None

    @property
    def creating(self) -> bool:
        return self.event_id is None

    def update_field(self, name: str, value: Any) -> None:
        if name not in EVENT_FIELDS:
            raise KeyError(name)
        self.draft[name] = value
        self.errors.pop(name, None)

    def load(self, event_id: str) -> Result:
        """Pre-populate the draft from an existing event for editing."""
        self.event_id = event_id
        self.is_loading = True
        try:
            result = self.api.get_event(event_id)
        finally:
            self.is_loading = False
        if not result.ok:
            self.notifier.error("Failed to load event details")
            return result

        event = result.value
        self.draft = {
            "name": event.name,
            "bio": event.bio,
            "participantnbr": event.participantnbr,
            "prix": event.prix,
            "startDate": event.start_date,
            "endDate": event.end_date,
        }
        self.errors = {}
        return result

    def validate(self, draft: dict | None = None) -> Result:
        return validate_event_draft(
            self.draft if draft is None else draft,
            now=self.clock(),
            creating=self.creating,
        )

    def submit(self, draft: dict | None = None) -> Result:
        if draft is not None:
            self.draft = {**self.draft, **draft}
        if self.is_loading:
            return Err("Event is already being saved")

        validated = self.validate()
        if not validated.ok:
            self.errors = dict(validated.field_errors or {})
            return validated

        self.errors = {}
        payload = validated.value.to_payload(self.session.user_id)
        self.is_loading = True
        try:
            if self.creating:
                result = self.api.create_event(payload)
            else:
                result = self.api.update_event(self.event_id, payload)
        finally:
            self.is_loading = False

        if not result.ok:
            if result.field_errors:
                self.errors = {k: v for k, v in result.field_errors.items() if k in EVENT_FIELDS}
            self.notifier.error(result.message)
            return result

        self.saved = result.value
        self.notifier.success("Event created successfully!" if self.creating else "Event updated successfully")
        logger.info("Saved event %s", result.value.id)
        if self.on_success:
            self.on_success(result.value)
        return result
