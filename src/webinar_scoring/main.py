"""Main FastAPI application"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.exc import OperationalError

from src.webinar_scoring.api.endpoints import health, watch, engagement, scoring_config, lead_scores
from src.webinar_scoring.config import settings
from src.webinar_scoring.errors import ScoringError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

scheduler: BackgroundScheduler | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global scheduler

    logger.info(f"Starting webinar scoring API in {settings.APP_ENV} environment")

    if settings.SCHEDULER_ENABLED:
        from src.webinar_scoring.services.scheduler import run_recalculation_sweep
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            run_recalculation_sweep,
            'interval',
            minutes=settings.RECALC_SWEEP_MINUTES,
            id='lead_score_sweep',
            replace_existing=True
        )
        scheduler.start()
        logger.info(f"Scheduler started - recalculation sweep every {settings.RECALC_SWEEP_MINUTES} minutes")

    yield

    if scheduler:
        scheduler.shutdown()
        scheduler = None
        logger.info("Scheduler stopped")
    logger.info("Shutting down webinar scoring API")


app = FastAPI(
    title="Webinar Engagement & Lead Scoring",
    description="Watch-time tracking, engagement scoring and lead score reporting for webinars",
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(ScoringError)
async def scoring_error_handler(request: Request, exc: ScoringError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(OperationalError)
async def storage_error_handler(request: Request, exc: OperationalError):
    logger.error(f"{request.method} {request.url.path} storage error: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


app.include_router(health.router, tags=["Health"])
app.include_router(watch.router)
app.include_router(engagement.router)
app.include_router(scoring_config.router)
app.include_router(lead_scores.router)


@app.get("/")
def root():
    return {
        "message": "Webinar Scoring API",
        "environment": settings.APP_ENV,
        "docs": "/docs"
    }
