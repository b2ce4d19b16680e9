import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from contextlib import asynccontextmanager

from jobtracker.core.config import settings
from jobtracker.core.database import init_db
from jobtracker.core.exceptions import register_exception_handlers
from jobtracker.core.logging_config import setup_logging
from jobtracker.api.endpoints import activities, auth, dashboard, health, jobs

setup_logging(settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up Job Tracker API...")
    init_db()
    if not settings.AUTH_CONFIGURED:
        logger.warning("SUPABASE_URL/SUPABASE_ANON_KEY not set; dashboard sign-in is disabled")

    yield

    logger.info("Shutting down Job Tracker API...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Job tracking CRM: jobs, email-derived activities and a kanban dashboard",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# REST API
app.include_router(health.router)
app.include_router(jobs.router)
app.include_router(activities.router)

# Dashboard
app.include_router(auth.router)
app.include_router(dashboard.router)


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/dashboard", status_code=303)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=True,  # Enable auto-reload during development
        log_level=settings.LOG_LEVEL.lower()
    )
