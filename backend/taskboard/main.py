"""FastAPI application entry point. Registers middleware, API routers, the realtime channel and error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from taskboard.config import settings
from taskboard.database import Base, engine
from taskboard.logging_setup import configure_logging
import taskboard.models  # noqa: F401 - registers model metadata
from taskboard.routers import realtime, tasks, team_tasks, teams
from taskboard.services.realtime_hub import BroadcastHub

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Taskboard",
    description="Personal and team task boards with live team collaboration",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Process-scoped broadcast hub, torn down on shutdown.
app.state.hub = BroadcastHub()

app.include_router(tasks.router)
app.include_router(teams.router)
app.include_router(team_tasks.router)
app.include_router(realtime.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Invalid request", "errors": errors})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("[db] %s %s failed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.on_event("startup")
def ensure_schema():
    configure_logging()
    Base.metadata.create_all(bind=engine)


@app.on_event("shutdown")
async def close_hub():
    await app.state.hub.close()


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "taskboard", "rooms": app.state.hub.room_sizes()}
