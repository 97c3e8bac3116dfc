import logging

import redis
from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from dojo_events.core import config
from dojo_events.core.config import get_redis_url
from dojo_events.models.events import Event
from dojo_events.models.participants import Participant, RegistrationStatus
from dojo_events.schemas.participants import ParticipantCreate, ParticipantUpdate
from dojo_events.services.events import get_event

logger = logging.getLogger(__name__)


class SoldOutError(Exception):
    pass


class ParticipantNotFoundError(Exception):
    pass


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


def register_participant(db: Session, payload: ParticipantCreate) -> Participant:
    """
    Register a participant against one event.

    Registrations for the same event are serialized by a Redis lock and the
    slot is taken with a conditional UPDATE on the registered count.
    """
    get_event(db, payload.event_id)
    contact = {
        "first_name": payload.first_name,
        "last_name": payload.last_name or None,
        "email": str(payload.email),
        "phone": payload.phone or None,
    }
    return _register_with_lock(db, payload.event_id, contact)


def add_existing_participant(db: Session, *, participant_id: str, event_id: str) -> Participant:
    """Register an already known participant's contact details for another event."""
    source = get_participant(db, participant_id)
    get_event(db, event_id)
    contact = {
        "first_name": source.first_name,
        "last_name": source.last_name,
        "email": source.email,
        "phone": source.phone,
    }
    return _register_with_lock(db, event_id, contact)


def _register_with_lock(db: Session, event_id: str, contact: dict) -> Participant:
    redis_client = get_redis_client()
    lock_key = f"event_lock:{event_id}"
    lock = redis_client.lock(
        lock_key,
        timeout=config.REGISTRATION_LOCK_TIMEOUT,
        blocking_timeout=config.REGISTRATION_LOCK_WAIT,
    )

    try:
        # Acquire the lock - only one process can proceed at a time
        if not lock.acquire(blocking=True, blocking_timeout=config.REGISTRATION_LOCK_WAIT):
            raise SoldOutError("Could not acquire lock, please try again.")

        try:
            participant = _register_in_transaction(db, event_id, contact)
        finally:
            lock.release()
    except redis.exceptions.LockError:  # type: ignore
        raise SoldOutError("Could not acquire lock, please try again.")

    logger.info("Registered participant %s for event %s", participant.id, event_id)
    return participant


def _register_in_transaction(db: Session, event_id: str, contact: dict) -> Participant:
    # Check capacity and increment registered_count atomically
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.registered_count < Event.capacity)
        .values(registered_count=Event.registered_count + 1)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        db.rollback()
        logger.warning("Rejected registration for sold out event %s", event_id)
        raise SoldOutError("Event is sold out.")

    participant = Participant(
        event_id=event_id,
        status=RegistrationStatus.PENDING.value,
        **contact,
    )
    db.add(participant)
    db.commit()
    db.refresh(participant)
    return participant


def get_participant(db: Session, participant_id: str) -> Participant:
    participant = db.get(Participant, participant_id)
    if not participant:
        raise ParticipantNotFoundError("Participant not found")
    return participant


def list_participants(db: Session, event_id: str) -> list[Participant]:
    get_event(db, event_id)
    stmt = (
        select(Participant)
        .where(Participant.event_id == event_id)
        .order_by(Participant.created_at, Participant.id)
    )
    return list(db.scalars(stmt))


def search_participants(db: Session, term: str) -> list[Participant]:
    pattern = f"%{term.strip().lower()}%"
    stmt = (
        select(Participant)
        .where(
            or_(
                Participant.first_name.ilike(pattern),
                Participant.last_name.ilike(pattern),
                Participant.email.ilike(pattern),
            )
        )
        .order_by(Participant.last_name, Participant.first_name)
    )
    return list(db.scalars(stmt))


def update_participant(db: Session, participant_id: str, payload: ParticipantUpdate) -> Participant:
    participant = get_participant(db, participant_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field in ("first_name", "email") and not value:
            continue
        setattr(participant, field, value or None)
    db.commit()
    db.refresh(participant)
    logger.info("Updated participant %s", participant.id)
    return participant


def remove_participant(db: Session, participant_id: str) -> None:
    """Delete a registration and give its slot back to the event."""
    participant = get_participant(db, participant_id)
    event_id = participant.event_id
    db.delete(participant)
    db.execute(
        update(Event)
        .where(Event.id == event_id)
        .where(Event.registered_count > 0)
        .values(registered_count=Event.registered_count - 1)
    )
    db.commit()
    logger.info("Removed participant %s from event %s", participant_id, event_id)


def confirm_registration(db: Session, participant_id: str) -> None:
    participant = db.get(Participant, participant_id)
    if not participant:
        return
    participant.status = RegistrationStatus.CONFIRMED.value
    db.commit()
