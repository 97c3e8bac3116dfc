from celery import Celery

from dojo_events.core.config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND


def make_celery(app_name: str = "dojo_events") -> Celery:
    celery = Celery(app_name, broker=CELERY_BROKER_URL, backend=CELERY_RESULT_BACKEND)
    celery.conf.task_serializer = "json"
    celery.conf.result_serializer = "json"
    celery.conf.accept_content = ["json"]
    celery.conf.result_persistent = False
    celery.conf.task_track_started = True
    celery.conf.timezone = "UTC"
    celery.conf.enable_utc = True
    return celery


celery_app = make_celery()
