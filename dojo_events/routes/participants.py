import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from dojo_events.database.db import get_db
from dojo_events.schemas.participants import ParticipantCreate, ParticipantOut, ParticipantUpdate
from dojo_events.services import participants as participant_service
from dojo_events.services.events import EventNotFoundError
from dojo_events.services.participants import ParticipantNotFoundError, SoldOutError
from dojo_events.tasks import confirm_registration_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/participants", tags=["participants"])


def _enqueue_confirmation(participant_id: str) -> None:
    # enqueue durable background work to confirm the registration
    try:
        confirm_registration_task.delay(participant_id)
    except Exception:
        logger.exception("Could not enqueue confirmation for participant %s", participant_id)


@router.post("", response_model=ParticipantOut, status_code=status.HTTP_201_CREATED)
def register_participant(payload: ParticipantCreate, db: Session = Depends(get_db)):
    try:
        participant = participant_service.register_participant(db, payload)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SoldOutError as e:
        raise HTTPException(status_code=409, detail=str(e))

    _enqueue_confirmation(participant.id)
    return participant


@router.get("/search/name", response_model=list[ParticipantOut])
def search_participants(q: str = Query(min_length=1), db: Session = Depends(get_db)):
    return participant_service.search_participants(db, q)


@router.post(
    "/{participant_id}/events/{event_id}",
    response_model=ParticipantOut,
    status_code=status.HTTP_201_CREATED,
)
def add_participant_to_event(participant_id: str, event_id: str, db: Session = Depends(get_db)):
    try:
        participant = participant_service.add_existing_participant(
            db, participant_id=participant_id, event_id=event_id
        )
    except (EventNotFoundError, ParticipantNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SoldOutError as e:
        raise HTTPException(status_code=409, detail=str(e))

    _enqueue_confirmation(participant.id)
    return participant


@router.get("/{participant_id}", response_model=ParticipantOut)
def get_participant(participant_id: str, db: Session = Depends(get_db)):
    try:
        return participant_service.get_participant(db, participant_id)
    except ParticipantNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{participant_id}", response_model=ParticipantOut)
def update_participant(participant_id: str, payload: ParticipantUpdate, db: Session = Depends(get_db)):
    try:
        return participant_service.update_participant(db, participant_id, payload)
    except ParticipantNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{participant_id}")
def remove_participant(participant_id: str, db: Session = Depends(get_db)):
    try:
        participant_service.remove_participant(db, participant_id)
    except ParticipantNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Participant removed successfully"}
