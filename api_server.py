"""FastAPI REST API server for the Baby Care backend services.

This module exposes the service handlers as request/response endpoints:
- POST /ask                  - merged answer from the knowledge providers
- POST /reminders/dispatch   - send tomorrow's appointment reminders
- POST /appointments/summary - health summary for a pediatrician

Errors always come back as {"error": message}: 400 for caller mistakes,
404 for unknown records, 500 for anything else.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import database
import schemas
from advisory import AdvisoryAggregator, build_aggregator
from config import settings
from dispatcher import ReminderDispatcher
from errors import ServiceError
from logger_config import setup_logger
from notifier import Notifier, build_notifier
from summary import build_appointment_summary

logger = setup_logger(__name__, 'api.log')

app = FastAPI(
    title="Baby Care Service API",
    description="Appointment reminders, parenting advice and pediatrician health summaries",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Mobile clients call these endpoints directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

_aggregator = None
_notifier = None


def get_aggregator() -> AdvisoryAggregator:
    """Advisory aggregator dependency (built once from settings)."""
    global _aggregator
    if _aggregator is None:
        _aggregator = build_aggregator(settings)
    return _aggregator


def get_notifier() -> Notifier:
    """Reminder notifier dependency (built once from settings)."""
    global _notifier
    if _notifier is None:
        _notifier = build_notifier(settings)
    return _notifier


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/")
def root():
    """Root endpoint - service information"""
    return {
        "service": "Baby Care Service API",
        "version": "1.0.0",
        "status": "healthy",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "ask": "/ask",
            "reminders": "/reminders/dispatch",
            "summary": "/appointments/summary"
        }
    }


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "babycare_service",
        "database": settings.DATABASE_URL.split("://")[0]
    }


@app.post("/ask", response_model=schemas.AskResponse)
async def ask(
    request: Optional[schemas.AskRequest] = None,
    aggregator: AdvisoryAggregator = Depends(get_aggregator)
):
    """Answer a parenting question from the trusted knowledge providers.

    Request body example:
    ```json
    {"query": "fever"}
    ```

    Providers that fail or time out are left out of the answer; the request
    only fails when query is missing.
    """
    result = await aggregator.answer(request.query if request else None)
    return schemas.AskResponse(response=result.body, sources=result.sources)


@app.post("/reminders/dispatch", response_model=schemas.DispatchResponse)
async def dispatch_reminders(
    db: Session = Depends(database.get_db),
    notifier: Notifier = Depends(get_notifier)
):
    """Send reminders for tomorrow's appointments.

    Safe to call repeatedly: appointments already reminded are skipped.
    Returns the number of reminders delivered during this call.
    """
    dispatcher = ReminderDispatcher(
        db,
        notifier,
        lead_days=settings.REMINDER_LEAD_DAYS,
        tz_name=settings.REMINDER_TIMEZONE
    )
    result = await dispatcher.run(datetime.now(timezone.utc))
    if result.failures:
        logger.warning(f"Reminder dispatch partially failed for: {', '.join(result.failures)}")
    return schemas.DispatchResponse(success=True, count=result.notified)


@app.post("/appointments/summary", response_model=schemas.SummaryResponse)
def appointment_summary(
    request: Optional[schemas.SummaryRequest] = None,
    db: Session = Depends(database.get_db)
):
    """Build the health summary to send to the pediatrician.

    Request body example:
    ```json
    {"appointmentId": "abc-123"}
    ```
    """
    summary = build_appointment_summary(
        db,
        request.appointmentId if request else None,
        tz_name=settings.REMINDER_TIMEZONE
    )
    return schemas.SummaryResponse(success=True, **summary.model_dump())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level="info"
    )
