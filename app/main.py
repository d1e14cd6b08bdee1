"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import database
from app.routers import logs, preferences, reports, session
from app.tracker import tracker


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    await database.connect()
    await tracker.start(database.db)
    yield
    # Shutdown
    await tracker.stop()
    await database.disconnect()


app = FastAPI(
    title="WorkLog API",
    description="Work hour and tiered overtime payroll tracker",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(session.router)
app.include_router(logs.router)
app.include_router(reports.router)
app.include_router(preferences.router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"status": "ok", "message": "WorkLog API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
