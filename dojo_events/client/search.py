import logging

from dojo_events.client.api import BackendClient
from dojo_events.client.notifications import Notifier
from dojo_events.client.records import ParticipantRecord
from dojo_events.client.result import Ok, Result
from dojo_events.client.roster import ParticipantListView
from dojo_events.client.session import UserSession

logger = logging.getLogger(__name__)


class ParticipantSearch:
    """Find already known participants and register them for another event."""

    def __init__(
        self,
        api: BackendClient,
        session: UserSession,
        notifier: Notifier,
        roster: ParticipantListView | None = None,
    ):
        self.api = api
        self.session = session
        self.notifier = notifier
        self.roster = roster
        self.results: list[ParticipantRecord] = []
        self.is_searching = False

    def search(self, term: str) -> Result:
        if not term.strip():
            return Ok(self.results)
        self.is_searching = True
        try:
            result = self.api.search_participants(term.strip())
        finally:
            self.is_searching = False
        if result.ok:
            self.results = list(result.value)
        else:
            self.notifier.error("Failed to search participants")
        return result

    def add_to_event(self, event_id: str, participant_id: str) -> Result:
        result = self.api.add_participant_to_event(event_id, participant_id)
        if not result.ok:
            self.notifier.error(result.message if result.status_code == 409 else "Failed to add participant to event")
            return result
        self.notifier.success("Participant added to event successfully")
        logger.info("Participant %s added to event %s by %s", participant_id, event_id, self.session.user_id)
        if self.roster is not None:
            self.roster.load(event_id)
        return result
