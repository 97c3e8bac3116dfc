"""
Test the participant roster, event page and participant search.
"""
import csv
import logging
from unittest.mock import Mock

import pytest

from dojo_events.client import BackendClient, EventDetailView, Notifier, ParticipantListView, ParticipantSearch
from dojo_events.client.roster import EMPTY_ROSTER_ROW
from dojo_events.tests.conftest import make_response

PARTICIPANT_BODY = {
    "id": "p-1",
    "eventId": "evt-1",
    "firstName": "Bruce",
    "lastName": "Lee",
    "email": "bruce@example.com",
    "phone": None,
    "status": "CONFIRMED",
}


@pytest.fixture
def roster(api: BackendClient, user_session, notifier: Notifier) -> ParticipantListView:
    return ParticipantListView(api, user_session, notifier)


class TestParticipantListView:
    """Test loading and mutating the roster."""

    def test_load(self, roster: ParticipantListView, make_event, make_participant):
        event = make_event()
        make_participant(event, first_name="Ann", last_name=None, email="ann@example.com")
        make_participant(event, first_name="Bob", email="bob@example.com")

        result = roster.load(event.id)

        assert result.ok
        assert [p.first_name for p in roster.participants] == ["Ann", "Bob"]
        assert roster.rows()[0] == ("Ann", "ann@example.com", "555-0100")

    def test_load_is_idempotent(self, roster: ParticipantListView, make_event, make_participant):
        event = make_event()
        make_participant(event)

        roster.load(event.id)
        first = [p.id for p in roster.participants]
        roster.load(event.id)

        assert [p.id for p in roster.participants] == first

    def test_empty_roster(self, roster: ParticipantListView, make_event):
        roster.load(make_event().id)

        assert roster.participants == []
        assert roster.rows() == [EMPTY_ROSTER_ROW]

    def test_remove_reloads(self, roster: ParticipantListView, notifier: Notifier, make_event, make_participant):
        event = make_event()
        gone = make_participant(event, first_name="Ann", email="ann@example.com")
        make_participant(event, first_name="Bob", email="bob@example.com")
        roster.load(event.id)

        result = roster.remove(event.id, gone.id)

        assert result.ok
        assert [p.first_name for p in roster.participants] == ["Bob"]
        assert notifier.last.description == "Participant removed successfully"

    def test_remove_logs_acting_user(self, roster: ParticipantListView, caplog, make_event, make_participant):
        event = make_event()
        participant = make_participant(event)

        with caplog.at_level(logging.INFO, logger="dojo_events.client.roster"):
            roster.remove(event.id, participant.id)

        assert f"removed from event {event.id} by user-1" in caplog.text

    def test_failed_reload_keeps_previous_list(self, user_session, notifier: Notifier):
        http = Mock()
        http.request.side_effect = [
            make_response(200, [PARTICIPANT_BODY]),
            make_response(500, {"message": "Database unavailable"}),
        ]
        roster = ParticipantListView(
            BackendClient(base_url="http://api.test", session=user_session, http=http), user_session, notifier
        )

        roster.load("evt-1")
        result = roster.load("evt-1")

        assert not result.ok
        assert [p.id for p in roster.participants] == ["p-1"]
        assert notifier.last.description == "Failed to load participants"

    def test_failed_remove(self, user_session, notifier: Notifier):
        http = Mock()
        http.request.return_value = make_response(404, {"message": "Participant not found"})
        roster = ParticipantListView(
            BackendClient(base_url="http://api.test", session=user_session, http=http), user_session, notifier
        )

        result = roster.remove("evt-1", "p-1")

        assert not result.ok
        assert notifier.last.description == "Failed to remove participant"
        assert http.request.call_count == 1

    def test_download_csv(self, roster: ParticipantListView, notifier: Notifier, tmp_path, make_event, make_participant):
        event = make_event()
        make_participant(event)

        result = roster.download(event.id, "csv", directory=tmp_path)

        assert result.ok
        assert result.value == tmp_path / f"event-{event.id}-participants.csv"
        with result.value.open(newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[1][2] == "bruce@example.com"
        assert notifier.last.description == "Participants list downloaded successfully in CSV format"

    def test_download_failure(self, roster: ParticipantListView, notifier: Notifier, tmp_path):
        result = roster.download("missing", "pdf", directory=tmp_path)

        assert not result.ok
        assert list(tmp_path.iterdir()) == []
        assert notifier.last.description == "Failed to download participants list"

    def test_download_to_missing_directory(
        self, roster: ParticipantListView, notifier: Notifier, tmp_path, make_event
    ):
        event = make_event()

        result = roster.download(event.id, "csv", directory=tmp_path / "nope")

        assert not result.ok
        assert list(tmp_path.iterdir()) == []
        assert notifier.last.description == "Failed to download participants list"


class TestEventDetailView:
    """Test the event page."""

    def test_owner_and_open_event(self, api: BackendClient, user_session, notifier: Notifier, make_event):
        event = make_event(capacity=3, registered_count=1)
        view = EventDetailView(api, user_session, notifier)

        view.load(event.id)

        assert view.is_owner
        assert view.sold_out is False
        assert view.registration_action.label == "Add Participant"
        assert view.event.remaining_slots == 2

    def test_sold_out_event(self, api: BackendClient, user_session, notifier: Notifier, make_event):
        event = make_event(capacity=0, user_id="someone-else")
        view = EventDetailView(api, user_session, notifier)

        view.load(event.id)

        assert view.is_owner is False
        assert view.sold_out
        assert view.registration_action.enabled is False

    def test_delete(self, api: BackendClient, user_session, notifier: Notifier, make_event):
        event = make_event()
        event_id = event.id
        deleted = []
        view = EventDetailView(api, user_session, notifier, on_deleted=deleted.append)
        view.load(event_id)

        result = view.delete()

        assert result.ok
        assert deleted == [event_id]
        assert view.event is None
        assert notifier.last.description == "Event deleted successfully"
        assert api.get_event(event_id).status_code == 404

    def test_load_failure(self, api: BackendClient, user_session, notifier: Notifier):
        view = EventDetailView(api, user_session, notifier)

        view.load("missing")

        assert view.event is None
        assert view.registration_action is None
        assert notifier.last.description == "Failed to load event details"


class TestParticipantSearch:
    """Test finding known participants and adding them to events."""

    def test_blank_term_makes_no_request(self, user_session, notifier: Notifier):
        http = Mock()
        search = ParticipantSearch(
            BackendClient(base_url="http://api.test", session=user_session, http=http), user_session, notifier
        )

        assert search.search("   ").ok
        http.request.assert_not_called()

    def test_search_and_add(
        self, api: BackendClient, user_session, notifier: Notifier, roster, make_event, make_participant
    ):
        source = make_event()
        target = make_event(name="Weapons Seminar")
        participant = make_participant(source, first_name="Mei", email="mei@example.com")
        search = ParticipantSearch(api, user_session, notifier, roster=roster)

        search.search("Mei")
        assert [p.id for p in search.results] == [participant.id]

        result = search.add_to_event(target.id, participant.id)

        assert result.ok
        assert notifier.last.description == "Participant added to event successfully"
        assert [p.email for p in roster.participants] == ["mei@example.com"]

    def test_add_to_sold_out_event(self, api: BackendClient, user_session, notifier: Notifier, make_event, make_participant):
        participant = make_participant(make_event())
        full = make_event(capacity=1, registered_count=1)
        search = ParticipantSearch(api, user_session, notifier)

        result = search.add_to_event(full.id, participant.id)

        assert result.status_code == 409
        assert notifier.last.description == "Event is sold out."
