import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests
from pydantic import ValidationError

from dojo_events.client.records import EventRecord, ParticipantRecord
from dojo_events.client.result import Err, Ok, Result
from dojo_events.client.session import UserSession
from dojo_events.core import config

logger = logging.getLogger(__name__)

EXPORT_EXTENSIONS = {"pdf": "pdf", "csv": "csv", "excel": "xlsx"}


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content_type: str
    content: bytes


def export_filename(event_id: str, fmt: str) -> str:
    return f"event-{event_id}-participants.{EXPORT_EXTENSIONS.get(fmt, 'pdf')}"


class BackendClient:
    """
    Thin wrapper over the REST backend: one method per verb.

    Every method returns ``Ok(value)`` or ``Err(message, field_errors)``; HTTP
    error bodies shaped ``{message}`` or ``{message, errors}``, empty bodies and
    transport failures all end up as ``Err``. Nothing is retried.

    ``http`` is anything with a ``requests``-compatible ``request()`` method,
    a ``requests.Session`` by default.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: UserSession | None = None,
        http: Any = None,
        timeout: float | None = None,
    ):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.session = session
        self.http = http or requests.Session()
        self.timeout = timeout or config.API_TIMEOUT

    # ---------- Events ----------
    def list_events(self) -> Result:
        return self._request("GET", "/events", fallback="Failed to load events", parse=_events)

    def get_event(self, event_id: str) -> Result:
        return self._request(
            "GET", f"/events/{event_id}", fallback="Failed to load event details", parse=_event
        )

    def events_for_user(self, user_id: str) -> Result:
        return self._request(
            "GET", f"/events/user/{user_id}", fallback="Failed to load your events", parse=_events
        )

    def search_events(self, name: str) -> Result:
        return self._request(
            "GET",
            "/events/ev/search",
            params={"name": name},
            fallback="Failed to search events",
            parse=_events,
        )

    def create_event(self, payload: dict) -> Result:
        return self._request(
            "POST", "/events", json=payload, fallback="Failed to create event. Please try again.", parse=_event
        )

    def update_event(self, event_id: str, payload: dict) -> Result:
        return self._request(
            "PUT", f"/events/{event_id}", json=payload, fallback="Failed to update event", parse=_event
        )

    def delete_event(self, event_id: str) -> Result:
        return self._request("DELETE", f"/events/{event_id}", fallback="Failed to delete event")

    def stats_overview(self) -> Result:
        return self._request("GET", "/stats/overview", fallback="Failed to load statistics")

    # ---------- Participants ----------
    def list_participants(self, event_id: str) -> Result:
        return self._request(
            "GET",
            f"/events/{event_id}/participants",
            fallback="Failed to load participants",
            parse=_participants,
        )

    def register_participant(self, event_id: str, payload: dict) -> Result:
        body = {**payload, "eventId": event_id}
        return self._request(
            "POST",
            "/participants",
            json=body,
            fallback="Failed to register participant",
            parse=_participant,
        )

    def get_participant(self, participant_id: str) -> Result:
        return self._request(
            "GET",
            f"/participants/{participant_id}",
            fallback="Failed to load participant details",
            parse=_participant,
        )

    def update_participant(self, participant_id: str, payload: dict) -> Result:
        return self._request(
            "PUT",
            f"/participants/{participant_id}",
            json=payload,
            fallback="Failed to update participant",
            parse=_participant,
        )

    def delete_participant(self, participant_id: str) -> Result:
        return self._request(
            "DELETE", f"/participants/{participant_id}", fallback="Failed to remove participant"
        )

    def search_participants(self, term: str) -> Result:
        return self._request(
            "GET",
            "/participants/search/name",
            params={"q": term},
            fallback="Failed to search participants",
            parse=_participants,
        )

    def add_participant_to_event(self, event_id: str, participant_id: str) -> Result:
        return self._request(
            "POST",
            f"/participants/{participant_id}/events/{event_id}",
            fallback="Failed to add participant to event",
            parse=_participant,
        )

    def export_participants(self, event_id: str, fmt: str = "pdf") -> Result:
        if fmt not in EXPORT_EXTENSIONS:
            return Err(f"Unsupported export format: {fmt}")
        result = self._request(
            "GET",
            f"/events/{event_id}/participants/export",
            params={"format": fmt},
            fallback="Failed to download participants list",
            raw=True,
        )
        if not result.ok:
            return result
        response = result.value
        return Ok(
            ExportFile(
                filename=export_filename(event_id, fmt),
                content_type=response.headers.get("content-type", "application/octet-stream"),
                content=response.content,
            )
        )

    # ---------- plumbing ----------
    def _request(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        parse: Optional[Callable[[Any], Any]] = None,
        raw: bool = False,
    ) -> Result:
        url = f"{self.base_url}{path}"
        headers = self.session.auth_headers() if self.session else {}
        try:
            response = self.http.request(
                method, url, json=json, params=params, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            return Err(fallback)

        if not 200 <= response.status_code < 300:
            err = _error_from_response(response, fallback)
            logger.warning("%s %s -> %s: %s", method, path, response.status_code, err.message)
            return err

        if raw:
            return Ok(response)
        body = _json_or_none(response)
        if parse is None:
            return Ok(body)
        try:
            return Ok(parse(body))
        except (ValidationError, TypeError) as e:
            logger.warning("%s %s returned an unexpected body: %s", method, path, e)
            return Err(fallback, status_code=response.status_code)


def _json_or_none(response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _error_from_response(response, fallback: str) -> Err:
    body = _json_or_none(response)
    if not isinstance(body, dict):
        return Err(fallback, status_code=response.status_code)

    message = body.get("message") or body.get("error")
    if not message and isinstance(body.get("detail"), str):
        message = body["detail"]
    errors = body.get("errors")
    field_errors = None
    if isinstance(errors, dict) and errors:
        field_errors = {str(k): str(v) for k, v in errors.items()}
    return Err(message or fallback, field_errors=field_errors, status_code=response.status_code)


def _event(body) -> EventRecord:
    return EventRecord.model_validate(body)


def _events(body) -> list[EventRecord]:
    return [EventRecord.model_validate(item) for item in body]


def _participant(body) -> ParticipantRecord:
    return ParticipantRecord.model_validate(body)


def _participants(body) -> list[ParticipantRecord]:
    return [ParticipantRecord.model_validate(item) for item in body]
