from dojo_events.client.api import BackendClient, ExportFile
from dojo_events.client.capacity import Action, is_sold_out, registration_action
from dojo_events.client.event_detail import EventDetailView
from dojo_events.client.event_form import EventFormController, ValidatedEvent, validate_event_draft
from dojo_events.client.notifications import Notification, Notifier
from dojo_events.client.records import EventRecord, ParticipantRecord
from dojo_events.client.registration import (
    ParticipantEditController,
    ParticipantRegistrationController,
    RegistrationState,
)
from dojo_events.client.result import Err, Ok, Result
from dojo_events.client.roster import ParticipantListView
from dojo_events.client.search import ParticipantSearch
from dojo_events.client.session import UserSession

__all__ = [
    "Action",
    "BackendClient",
    "Err",
    "EventDetailView",
    "EventFormController",
    "EventRecord",
    "ExportFile",
    "Notification",
    "Notifier",
    "Ok",
    "ParticipantEditController",
    "ParticipantListView",
    "ParticipantRecord",
    "ParticipantRegistrationController",
    "ParticipantSearch",
    "RegistrationState",
    "Result",
    "UserSession",
    "ValidatedEvent",
    "is_sold_out",
    "registration_action",
    "validate_event_draft",
]
