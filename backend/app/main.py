# TutorLink booking backend entrypoint: FastAPI app, routers and cron hooks.

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api import availability
from backend.app.api import jobs
from backend.app.api import login
from backend.app.api import matches
from backend.app.api import notifications
from backend.app.api import register
from backend.app.api import requests
from backend.app.api import reservations
from backend.app.api import sessions
from backend.app.core import errors
from backend.app.core.settings import get_settings
from backend.app.db.base import Base
from backend.app.db.session import engine

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.api_version)

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(register.router)
app.include_router(login.router)
app.include_router(requests.router)
app.include_router(matches.router)
app.include_router(reservations.router)
app.include_router(sessions.router)
app.include_router(availability.router)
app.include_router(notifications.router)
app.include_router(jobs.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": errors.SERVER_ERROR})


@app.get("/")
def read_root():
    return {"app": "TutorLink backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def create_tables():
    Base.metadata.create_all(bind=engine)
