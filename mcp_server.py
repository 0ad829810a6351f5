"""MCP Server for the Baby Care backend services.

This module provides MCP tools so AI agents can use the same handlers as
the REST API, against the same database.

Transport Support:
- stdio: Standard input/output (local process communication)
- sse: Server-Sent Events over HTTP (network access, scalable)
"""

from mcp.server.fastmcp import FastMCP
from datetime import datetime, timezone
import os

import database
from advisory import build_aggregator
from config import settings
from dispatcher import ReminderDispatcher
from errors import ServiceError
from logger_config import setup_logger
from notifier import build_notifier
from summary import build_appointment_summary

logger = setup_logger(__name__, 'mcp.log')
logger.info("MCP Server initialized")

mcp = FastMCP(
    "BabyCareService",
    host=settings.MCP_HOST,
    port=settings.MCP_PORT
)

aggregator = build_aggregator(settings)
notifier = build_notifier(settings)


@mcp.tool()
async def ask_parenting_question(query: str) -> str:
    """Answer a baby care or parenting question from trusted sources.

    Args:
        query: The question, e.g. "fever" or "how much should a newborn sleep"

    Returns:
        Answer text with per-source attribution, followed by the source list
    """
    try:
        result = await aggregator.answer(query)
    except ServiceError as e:
        return f"✗ {e.message}"

    if not result.sources:
        return result.body
    return f"{result.body}\n\nSources: {', '.join(result.sources)}"


@mcp.tool()
async def send_appointment_reminders() -> str:
    """Send reminders for tomorrow's appointments that have not been reminded yet.

    Safe to call more than once: appointments already reminded are skipped.

    Returns:
        Summary of the dispatch pass
    """
    db = database.SessionLocal()
    try:
        dispatcher = ReminderDispatcher(
            db,
            notifier,
            lead_days=settings.REMINDER_LEAD_DAYS,
            tz_name=settings.REMINDER_TIMEZONE
        )
        result = await dispatcher.run(datetime.now(timezone.utc))
    except ServiceError as e:
        return f"✗ Error sending reminders: {e.message}"
    finally:
        db.close()

    lines = [f"✓ Sent {result.notified} reminder(s)"]
    if result.failures:
        lines.append(f"✗ Failed (will retry next run): {', '.join(result.failures)}")
    if result.unmarked:
        lines.append(f"⚠ Sent but not marked: {', '.join(result.unmarked)}")
    return "\n".join(lines)


@mcp.tool()
def get_appointment_summary(appointment_id: str) -> str:
    """Build the health summary for a pediatrician appointment.

    Args:
        appointment_id: Appointment UUID

    Returns:
        Recipient, subject and summary text, or error message
    """
    db = database.SessionLocal()
    try:
        summary = build_appointment_summary(db, appointment_id, tz_name=settings.REMINDER_TIMEZONE)
        return (
            f"To: {summary.recipient or 'N/A'}\n"
            f"Subject: {summary.subject}\n"
            f"━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━\n"
            f"{summary.content}"
        )
    except ServiceError as e:
        return f"✗ {e.message}"
    finally:
        db.close()


if __name__ == "__main__":
    transport = os.getenv("MCP_TRANSPORT", settings.MCP_TRANSPORT).lower()

    if transport == "sse":
        host = settings.MCP_HOST
        port = settings.MCP_PORT

        print(f"Starting MCP server with SSE transport on {host}:{port}")
        print(f"SSE endpoint: http://{host}:{port}/sse")

        mcp.run(transport="sse")
    else:
        print("Starting MCP server with stdio transport")
        mcp.run(transport="stdio")
