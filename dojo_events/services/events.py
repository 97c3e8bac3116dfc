import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dojo_events.models.events import Event
from dojo_events.models.participants import Participant, RegistrationStatus
from dojo_events.schemas.events import EventCreate, EventUpdate, as_utc

logger = logging.getLogger(__name__)


class EventNotFoundError(Exception):
    pass


class CapacityError(Exception):
    pass


class ScheduleError(Exception):
    pass


def create_event(db: Session, payload: EventCreate) -> Event:
    event = Event(
        user_id=payload.user_id,
        name=payload.name,
        bio=payload.bio,
        capacity=payload.participantnbr,
        registered_count=0,
        prix=payload.prix,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event %s (%s) for user %s", event.id, event.name, event.user_id)
    return event


def get_event(db: Session, event_id: str) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise EventNotFoundError("Event not found")
    return event


def list_events(db: Session) -> list[Event]:
    return list(db.scalars(select(Event).order_by(Event.start_date.desc())))


def list_events_for_user(db: Session, user_id: str) -> list[Event]:
    stmt = select(Event).where(Event.user_id == user_id).order_by(Event.start_date.desc())
    return list(db.scalars(stmt))


def search_events(db: Session, name: str) -> list[Event]:
    stmt = (
        select(Event)
        .where(func.lower(Event.name).contains(name.strip().lower()))
        .order_by(Event.start_date.desc())
    )
    return list(db.scalars(stmt))


def update_event(db: Session, event_id: str, payload: EventUpdate) -> Event:
    event = get_event(db, event_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    start_date = changes.get("start_date", event.start_date)
    end_date = changes.get("end_date", event.end_date)
    if as_utc(end_date) <= as_utc(start_date):
        raise ScheduleError("End date must be after start date")

    capacity = changes.pop("participantnbr", None)
    if capacity is not None:
        if capacity < event.registered_count:
            raise CapacityError(
                "Capacity cannot be lower than the number of registered participants "
                f"({event.registered_count})."
            )
        event.capacity = capacity

    for field, value in changes.items():
        setattr(event, field, value)

    db.commit()
    db.refresh(event)
    logger.info("Updated event %s", event.id)
    return event


def delete_event(db: Session, event_id: str) -> None:
    event = get_event(db, event_id)
    db.delete(event)
    db.commit()
    logger.info("Deleted event %s", event_id)


def get_stats_overview(db: Session) -> dict:
    """Return aggregated totals across all events."""
    total_events = db.scalar(select(func.count(Event.id)))
    total_capacity = db.scalar(select(func.sum(Event.capacity)))
    total_registered = db.scalar(select(func.sum(Event.registered_count)))

    total_confirmed = db.scalar(
        select(func.count(Participant.id)).where(Participant.status == RegistrationStatus.CONFIRMED.value)
    )

    return {
        "total_events": int(total_events or 0),
        "total_capacity": int(total_capacity or 0),
        "total_registered": int(total_registered or 0),
        "total_confirmed": int(total_confirmed or 0),
    }

