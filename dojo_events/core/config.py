import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dojo_events.db")

# Redis configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REGISTRATION_LOCK_TIMEOUT = int(os.getenv("REGISTRATION_LOCK_TIMEOUT", "10"))
REGISTRATION_LOCK_WAIT = float(os.getenv("REGISTRATION_LOCK_WAIT", "5"))

# Celery configuration
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", REDIS_URL)

# Client configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "10"))

# Server configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def get_redis_url():
    return REDIS_URL


def get_database_url():
    return DATABASE_URL
