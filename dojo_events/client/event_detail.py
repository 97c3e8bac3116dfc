from typing import Callable

from dojo_events.client.api import BackendClient
from dojo_events.client.capacity import Action, is_sold_out, registration_action
from dojo_events.client.notifications import Notifier
from dojo_events.client.records import EventRecord
from dojo_events.client.result import Err, Result
from dojo_events.client.session import UserSession


class EventDetailView:
    """One event page: the fetched record plus the affordances derived from it."""

    def __init__(
        self,
        api: BackendClient,
        session: UserSession,
        notifier: Notifier,
        on_deleted: Callable[[str], None] | None = None,
    ):
        self.api = api
        self.session = session
        self.notifier = notifier
        self.on_deleted = on_deleted
        self.event: EventRecord | None = None
        self.is_loading = False

    def load(self, event_id: str) -> Result:
        self.is_loading = True
        try:
            result = self.api.get_event(event_id)
        finally:
            self.is_loading = False
        if result.ok:
            self.event = result.value
        else:
            self.notifier.error("Failed to load event details")
        return result

    @property
    def is_owner(self) -> bool:
        return self.event is not None and self.event.user_id == self.session.user_id

    @property
    def sold_out(self) -> bool:
        return self.event is not None and is_sold_out(self.event)

    @property
    def registration_action(self) -> Action | None:
        if self.event is None:
            return None
        return registration_action(self.event)

    def delete(self) -> Result:
        if self.event is None:
            return Err("No event loaded")
        event_id = self.event.id
        result = self.api.delete_event(event_id)
        if not result.ok:
            self.notifier.error("Failed to delete event")
            return result
        self.event = None
        self.notifier.success("Event deleted successfully")
        if self.on_deleted:
            self.on_deleted(event_id)
        return result
