"""Pydantic schemas for the Baby Care backend services.

This module defines request and response schemas for the API, plus the
result models the services hand back to their callers.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class AskRequest(BaseModel):
    """Request body for the advisory endpoint.

    query is optional at the schema level so a missing query reaches the
    aggregator and is reported as `{"error": "Query is required"}`.
    """

    query: Optional[str] = Field(
        None,
        description="Free-text parenting or baby health question",
        examples=["fever", "how much should a newborn sleep"]
    )


class AdvisoryResult(BaseModel):
    """Merged answer from the knowledge providers.

    sources lists exactly the providers that contributed, in priority order.
    """

    body: str = Field(..., description="User-facing answer, never empty")
    sources: List[str] = Field(default_factory=list, description="Contributing provider names")
    is_fallback: bool = Field(False, description="True when no provider contributed")


class AskResponse(BaseModel):
    """Response body for the advisory endpoint."""

    response: str
    sources: List[str]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "response": "According to WebMD:\nMonitor temperature.\n\n\nPlease note: ...",
                "sources": ["WebMD"]
            }
        }
    )


class DispatchResult(BaseModel):
    """Outcome of one reminder dispatch pass."""

    notified: int = Field(0, description="Appointments notified during this pass")
    failures: List[str] = Field(default_factory=list, description="IDs whose notification failed; retried next run")
    already_handled: List[str] = Field(
        default_factory=list,
        description="IDs a concurrent run marked before this one could"
    )
    unmarked: List[str] = Field(
        default_factory=list,
        description="IDs notified but not marked sent; may be notified again"
    )


class DispatchResponse(BaseModel):
    """Response body for the reminder dispatch endpoint."""

    success: bool = True
    count: int


class SummaryRequest(BaseModel):
    """Request body for the appointment summary endpoint."""

    appointmentId: Optional[str] = Field(None, description="Appointment to summarize")


class AppointmentSummary(BaseModel):
    """Health summary prepared for the pediatrician ahead of an appointment."""

    recipient: Optional[str] = Field(None, description="Pediatrician email address")
    subject: str
    content: str


class SummaryResponse(AppointmentSummary):
    """Response body for the appointment summary endpoint."""

    success: bool = True


class ErrorResponse(BaseModel):
    """Standard error body."""

    error: str
