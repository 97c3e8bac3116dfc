import logging
from pathlib import Path

from dojo_events.client.api import BackendClient
from dojo_events.client.notifications import Notifier
from dojo_events.client.records import ParticipantRecord
from dojo_events.client.result import Err, Ok, Result
from dojo_events.client.session import UserSession

logger = logging.getLogger(__name__)

EMPTY_ROSTER_ROW = ("No participants registered yet",)


class ParticipantListView:
    """
    The roster of one event.

    The list is always a mirror of the last successful fetch: mutations go to
    the backend and are followed by a full reload, never patched locally.
    """

    def __init__(self, api: BackendClient, session: UserSession, notifier: Notifier):
        self.api = api
        self.session = session
        self.notifier = notifier
        self.participants: list[ParticipantRecord] = []
        self.is_loading = False
        self.event_id: str | None = None

    def load(self, event_id: str) -> Result:
        self.event_id = event_id
        self.is_loading = True
        try:
            result = self.api.list_participants(event_id)
        finally:
            self.is_loading = False

        if result.ok:
            self.participants = list(result.value)
        else:
            self.notifier.error("Failed to load participants")
        return result

    def remove(self, event_id: str, participant_id: str) -> Result:
        result = self.api.delete_participant(participant_id)
        if not result.ok:
            self.notifier.error("Failed to remove participant")
            return result
        self.notifier.success("Participant removed successfully")
        logger.info("Participant %s removed from event %s by %s", participant_id, event_id, self.session.user_id)
        self.load(event_id)
        return result

    def rows(self) -> list[tuple[str, ...]]:
        if not self.participants:
            return [EMPTY_ROSTER_ROW]
        return [(p.full_name, p.email, p.phone or "") for p in self.participants]

    def download(self, event_id: str, fmt: str = "pdf", directory: str | Path = ".") -> Result:
        """Save the roster export as ``event-<id>-participants.<ext>`` in ``directory``."""
        self.is_loading = True
        try:
            result = self.api.export_participants(event_id, fmt)
        finally:
            self.is_loading = False
        if not result.ok:
            self.notifier.error("Failed to download participants list")
            return result

        exported = result.value
        target = Path(directory) / exported.filename
        try:
            target.write_bytes(exported.content)
        except OSError as e:
            logger.warning("Could not save %s: %s", target, e)
            self.notifier.error("Failed to download participants list")
            return Err(f"Could not save {target.name}")
        logger.info("Saved %s (%d bytes)", target, len(exported.content))
        self.notifier.success(f"Participants list downloaded successfully in {fmt.upper()} format")
        return Ok(target)
