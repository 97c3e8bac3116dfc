from dojo_events.models.events import Event
from dojo_events.models.participants import Participant, RegistrationStatus

__all__ = ["Event", "Participant", "RegistrationStatus"]
