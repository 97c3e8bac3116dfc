from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from dojo_events.database.db import get_db
from dojo_events.schemas.events import EventCreate, EventOut, EventUpdate
from dojo_events.schemas.participants import ParticipantOut
from dojo_events.services import events as event_service
from dojo_events.services.events import CapacityError, EventNotFoundError, ScheduleError
from dojo_events.services.exports import export_roster
from dojo_events.services.participants import list_participants

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, db: Session = Depends(get_db)):
    return event_service.create_event(db, payload)


@router.get("", response_model=list[EventOut])
def list_events(db: Session = Depends(get_db)):
    return event_service.list_events(db)


@router.get("/user/{user_id}", response_model=list[EventOut])
def list_user_events(user_id: str, db: Session = Depends(get_db)):
    return event_service.list_events_for_user(db, user_id)


@router.get("/ev/search", response_model=list[EventOut])
def search_events(name: str = Query(min_length=1), db: Session = Depends(get_db)):
    return event_service.search_events(db, name)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    try:
        return event_service.get_event(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{event_id}", response_model=EventOut)
def update_event(event_id: str, payload: EventUpdate, db: Session = Depends(get_db)):
    try:
        return event_service.update_event(db, event_id, payload)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CapacityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ScheduleError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{event_id}")
def delete_event(event_id: str, db: Session = Depends(get_db)):
    try:
        event_service.delete_event(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Event deleted successfully"}


@router.get("/{event_id}/participants", response_model=list[ParticipantOut])
def event_participants(event_id: str, db: Session = Depends(get_db)):
    try:
        return list_participants(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{event_id}/participants/export")
def export_participants(
    event_id: str,
    format: str = Query(default="pdf", pattern="^(pdf|csv|excel)$"),
    db: Session = Depends(get_db),
):
    try:
        event = event_service.get_event(db, event_id)
        participants = list_participants(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    exported = export_roster(event, participants, format)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
