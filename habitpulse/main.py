from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from habitpulse.db.base import get_db
from habitpulse.core.config import settings
from habitpulse.core.logging import get_logger, setup_logging
from habitpulse.schemas.common import HealthResponse
from habitpulse.routers import habits as habits_router
from habitpulse.routers import entries as entries_router
from habitpulse.routers import progress as progress_router
from habitpulse.routers import systems as systems_router
from habitpulse.routers import intelligence as intelligence_router
from habitpulse.routers import reflections as reflections_router
from habitpulse.core.errors import (
    HabitPulseException,
    habitpulse_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

setup_logging()
log = get_logger(__name__)

app = FastAPI(
    title="HabitPulse API",
    description=(
        "**Habit tracking analytics core**\n\n"
        "Evaluates sub-task progress rules, rolls daily completions up into "
        "streaks and weekly/monthly progress, and scores execution history "
        "for momentum, patterns, insights, resilience and adaptation.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(HabitPulseException, habitpulse_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(habits_router.router)
app.include_router(entries_router.router)
app.include_router(progress_router.router)
app.include_router(systems_router.router)
app.include_router(intelligence_router.router)
app.include_router(reflections_router.router)


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    responses={503: {"description": "Database unreachable."}},
)
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception as exc:
        log.warning("health_db_unreachable", error=str(exc))
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
