# moodflow api
# fastapi app with async mongodb, the diary mood flow and crisis detection

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moodflow.config import settings
from moodflow.services.db import db
from moodflow.routers import crisis, mood_flow, mood_logs

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb. shutdown: close connection."""
    logger.info("Starting MoodFlow API...")
    await db.connect()
    logger.info("MoodFlow API ready")
    yield
    logger.info("Shutting down MoodFlow API...")
    await db.close()


app = FastAPI(
    title="MoodFlow API",
    description="Turns diary entries into mood scores and screens wellness check-ins for crisis risk",
    version="0.1.0",
    lifespan=lifespan,
)

# cors for the diary frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# register routers
app.include_router(mood_flow.router)
app.include_router(mood_logs.router)
app.include_router(crisis.router)


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "moodflow-api"}
