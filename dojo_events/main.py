import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dojo_events.core import config
from dojo_events.core.logging_config import configure_logging
from dojo_events.database.db import Base, engine
from dojo_events.models import Event, Participant  # noqa: F401
from dojo_events.routes import events, participants, reports

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Dojo Events API")

# Configure CORS
origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _field_name(loc: tuple) -> str:
    # ("body", "firstName") -> "firstName"
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def _error_message(error: dict) -> str:
    if error.get("type") == "value_error" and "error" in error.get("ctx", {}):
        return str(error["ctx"]["error"])
    return error["msg"]


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, str] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(error["loc"]), _error_message(error))
    logger.info("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=422,
        content={"message": "Validation failed", "errors": errors},
    )


# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)

# Include the routers
app.include_router(events.router)
app.include_router(participants.router)
app.include_router(reports.router)


def run():
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
