import enum
import logging
from typing import TYPE_CHECKING, Any

from email_validator import EmailNotValidError, validate_email

from dojo_events.client.api import BackendClient
from dojo_events.client.notifications import Notifier
from dojo_events.client.result import Err, Result
from dojo_events.client.session import UserSession

if TYPE_CHECKING:
    from dojo_events.client.roster import ParticipantListView

logger = logging.getLogger(__name__)

PARTICIPANT_FIELDS = ("firstName", "lastName", "email", "phone")
REQUIRED_FIELDS = ("firstName", "email")

REQUIRED_MESSAGES = {
    "firstName": "First name is required",
    "email": "Email is required",
}


class RegistrationState(str, enum.Enum):
    IDLE = "IDLE"
    EDITING = "EDITING"
    SUBMITTING = "SUBMITTING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


def empty_participant_draft() -> dict[str, str]:
    return {field: "" for field in PARTICIPANT_FIELDS}


def check_participant_draft(draft: dict) -> dict[str, str]:
    """Local checks run before any request: required fields and email syntax."""
    errors: dict[str, str] = {}
    for field in REQUIRED_FIELDS:
        if not str(draft.get(field) or "").strip():
            errors[field] = REQUIRED_MESSAGES[field]
    email = str(draft.get("email") or "").strip()
    if email and "email" not in errors:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors["email"] = "Please enter a valid email address"
    return errors


def participant_payload(draft: dict) -> dict[str, Any]:
    payload = {field: str(draft.get(field) or "").strip() for field in PARTICIPANT_FIELDS}
    for optional in ("lastName", "phone"):
        if not payload[optional]:
            payload[optional] = None
    return payload


class ParticipantRegistrationController:
    """
    Drives the "Add Participant" dialog for one event.

    IDLE -> EDITING -> SUBMITTING -> SUCCESS (dialog closed, draft cleared,
    roster reloaded) or FAILED, which falls straight back to EDITING with the
    errors annotated and the draft kept.
    """

    def __init__(
        self,
        api: BackendClient,
        session: UserSession,
        notifier: Notifier,
        roster: "ParticipantListView | None" = None,
    ):
        self.api = api
        self.session = session
        self.notifier = notifier
        self.roster = roster
        self.state = RegistrationState.IDLE
        self.draft = empty_participant_draft()
        self.errors: dict[str, str] = {}
        self.last_error: Err | None = None

    @property
    def is_open(self) -> bool:
        return self.state in (RegistrationState.EDITING, RegistrationState.SUBMITTING)

    @property
    def is_submitting(self) -> bool:
        return self.state is RegistrationState.SUBMITTING

    @property
    def can_submit(self) -> bool:
        return not self.is_submitting and not self.errors

    def open(self) -> None:
        if self.state is not RegistrationState.SUBMITTING:
            self.state = RegistrationState.EDITING

    def close(self) -> None:
        self.state = RegistrationState.IDLE
        self.reset()

    def reset(self) -> None:
        self.draft = empty_participant_draft()
        self.errors = {}
        self.last_error = None

    def update_field(self, name: str, value: Any) -> None:
        if name not in PARTICIPANT_FIELDS:
            raise KeyError(name)
        if self.state in (RegistrationState.IDLE, RegistrationState.SUCCESS):
            self.state = RegistrationState.EDITING
        self.draft[name] = value
        self.errors.pop(name, None)

    def submit(self, event_id: str, draft: dict | None = None) -> Result:
        if self.is_submitting:
            return Err("A registration is already being submitted")
        if draft is not None:
            self.draft = {**self.draft, **draft}

        local_errors = check_participant_draft(self.draft)
        if local_errors:
            self.errors = local_errors
            self.state = RegistrationState.EDITING
            return Err("Please correct the highlighted fields", field_errors=local_errors)

        self.errors = {}
        self.state = RegistrationState.SUBMITTING
        try:
            result = self.api.register_participant(event_id, participant_payload(self.draft))
        except Exception:
            self.state = RegistrationState.EDITING
            raise

        if result.ok:
            self._succeeded(event_id)
        else:
            self._failed(result)
        return result

    def _succeeded(self, event_id: str) -> None:
        self.state = RegistrationState.SUCCESS
        self.reset()
        self.notifier.success("Registration successful!")
        if self.roster is not None:
            self.roster.load(event_id)

    def _failed(self, err: Err) -> None:
        self.state = RegistrationState.FAILED
        self.last_error = err
        # only form fields can carry inline errors
        field_errors = {k: v for k, v in (err.field_errors or {}).items() if k in PARTICIPANT_FIELDS}
        if field_errors:
            self.errors = {**self.errors, **field_errors}
        else:
            self.notifier.error(err.message or "Failed to register participant")
        logger.info("Registration by %s rejected: %s", self.session.user_id, err.message)
        self.state = RegistrationState.EDITING


class ParticipantEditController:
    """Edit one registered participant's contact fields."""

    def __init__(self, api: BackendClient, session: UserSession, notifier: Notifier):
        self.api = api
        self.session = session
        self.notifier = notifier
        self.participant_id: str | None = None
        self.draft = empty_participant_draft()
        self.errors: dict[str, str] = {}
        self.is_loading = False

    def load(self, participant_id: str) -> Result:
        self.participant_id = participant_id
        self.is_loading = True
        try:
            result = self.api.get_participant(participant_id)
        finally:
            self.is_loading = False
        if not result.ok:
            self.notifier.error("Failed to load participant details")
            return result
        participant = result.value
        self.draft = {
            "firstName": participant.first_name,
            "lastName": participant.last_name or "",
            "email": participant.email,
            "phone": participant.phone or "",
        }
        return result

    def update_field(self, name: str, value: Any) -> None:
        if name not in PARTICIPANT_FIELDS:
            raise KeyError(name)
        self.draft[name] = value
        self.errors.pop(name, None)

    def submit(self) -> Result:
        if self.participant_id is None:
            return Err("Invalid participant or event ID")
        local_errors = check_participant_draft(self.draft)
        if local_errors:
            self.errors = local_errors
            return Err("Please correct the highlighted fields", field_errors=local_errors)

        self.is_loading = True
        try:
            result = self.api.update_participant(self.participant_id, participant_payload(self.draft))
        finally:
            self.is_loading = False
        if not result.ok:
            if result.field_errors:
                self.errors = {k: v for k, v in result.field_errors.items() if k in PARTICIPANT_FIELDS}
            self.notifier.error(result.message or "Failed to update participant")
            return result
        self.notifier.success("Participant updated successfully")
        logger.info("Participant %s updated by %s", self.participant_id, self.session.user_id)
        return result
