import logging

from dojo_events.core.celery_config import celery_app
from dojo_events.database.db import SessionLocal
from dojo_events.services.participants import confirm_registration

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def confirm_registration_task(self, participant_id: str):
    """Confirm a pending registration once it has been accepted."""
    db = SessionLocal()
    try:
        confirm_registration(db, participant_id)
        logger.info("Confirmed registration %s", participant_id)
    finally:
        db.close()
