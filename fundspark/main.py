"""FundSpark — FastAPI Application Entry Point.

Crowdfunding backend: campaigns, pledges, bookmarks, Q&A and admin analytics.
"""

import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from fundspark.config import settings
from fundspark.database import init_db, test_connection
from fundspark.scheduler.jobs import start_scheduler, stop_scheduler
from fundspark.api.responses import error_response, ok
from fundspark.api.auth_routes import router as auth_router
from fundspark.api.campaign_routes import router as campaign_router
from fundspark.api.payment_routes import router as payment_router
from fundspark.api.analytics_routes import router as analytics_router
from fundspark.api.email_routes import router as email_router
from fundspark.core.errors import AppError
from fundspark.core.logging import get_logger

logger = get_logger("main")

VERSION = "1.0.0"

IS_SERVERLESS = bool(
    os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("🚀 FundSpark starting up...")
    logger.info(f"🌍 Environment: {'SERVERLESS' if IS_SERVERLESS else 'LOCAL'}")
    db_ok = test_connection()
    if db_ok:
        try:
            init_db()
        except SQLAlchemyError as e:
            logger.error(f"❌ Table creation failed: {e}")
    else:
        logger.error("❌ Database NOT connected — endpoints will fail")
    if not IS_SERVERLESS:
        start_scheduler()
    yield
    if not IS_SERVERLESS:
        stop_scheduler()
    logger.info("FundSpark shut down")


app = FastAPI(
    title="FundSpark",
    description="Crowdfunding backend: campaigns, pledges, bookmarks, Q&A and analytics.",
    version=VERSION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    logger.info(
        f"{request.method} {request.url.path}",
        extra={
            "endpoint": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


# ── Error rendering ──


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(exc.message, extra={"endpoint": request.url.path})
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    detail = first.get("msg", "Invalid request")
    return error_response(400, f"{field}: {detail}" if field else detail)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "API endpoint not found" if exc.status_code == 404 else str(exc.detail)
    return error_response(exc.status_code, message)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error: {exc}", extra={"endpoint": request.url.path})
    return error_response(500, "Internal server error")


# Routers
app.include_router(auth_router)
app.include_router(campaign_router)
app.include_router(payment_router)
app.include_router(analytics_router)
app.include_router(email_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return ok(
        {
            "status": "healthy",
            "service": "fundspark",
            "version": VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        "FundSpark API is running",
    )
