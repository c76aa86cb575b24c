"""FastAPI application — voice agent tool webhook for appointment booking.

Endpoints:

  POST /tools/check-availability   Resolve a spoken date/time, check the
                                   calendar and optionally book the slot

The endpoint always answers 200 with a JSON body so the voice platform's
tool runner can read the outcome, including failures.
"""

from __future__ import annotations

# Load .env into os.environ before settings are read.
from dotenv import load_dotenv
load_dotenv()

import json
import logging
from typing import Optional

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)-24s %(levelname)-7s %(message)s",
)

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from appointments.auth import require_tool_token
from appointments.calendar_providers.base import CalendarProvider
from appointments.config import Settings, settings as default_settings
from appointments.orchestrator import BookingOrchestrator
from appointments.pipeline import handle_check_availability

log = logging.getLogger("appointments.app")

TIMESTAMP_HEADER = "X-Telnyx-Timestamp"


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[CalendarProvider] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Process configuration. Defaults to the environment.
        provider: Calendar backend. When omitted, a Google provider is
                  built from the configured service account, if any.
    """
    settings = settings or default_settings
    if provider is None:
        provider = _create_provider(settings)

    for warning in settings.validate_startup():
        log.warning(warning)

    app = FastAPI(
        title="Voice Appointment Booking",
        description="Turns spoken appointment requests into calendar bookings",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.orchestrator = BookingOrchestrator(
        provider,
        calendar_id=settings.google_calendar_id,
        timeout_seconds=settings.calendar_timeout_seconds,
        serialize=settings.serialize_bookings,
    )

    # ── Tool webhook ───────────────────────────────────────────

    @app.post("/tools/check-availability", dependencies=[Depends(require_tool_token)])
    async def check_availability(request: Request) -> JSONResponse:
        """Voice agent tool call: check (and optionally book) a slot."""
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            log.warning("Tool call with unreadable JSON body, treating as empty")
            payload = {}

        response = await handle_check_availability(
            payload,
            app.state.settings,
            app.state.orchestrator,
            header_timestamp=request.headers.get(TIMESTAMP_HEADER),
        )
        return JSONResponse(response.to_json())

    log.info("App ready, TZ=%s calendar=%s", settings.business_timezone, settings.google_calendar_id)
    return app


# ── Helper functions ──────────────────────────────────────────────

def _create_provider(settings: Settings) -> Optional[CalendarProvider]:
    """Build the Google provider, or None when credentials are missing."""
    if not settings.google_service_account_json:
        return None
    try:
        from appointments.calendar_providers.google import GoogleCalendarProvider
        return GoogleCalendarProvider(
            service_account_json=settings.google_service_account_json,
        )
    except Exception as e:
        log.warning("Google Calendar not configured: %s", e)
        return None


# ── Module-level app instance for uvicorn ──────────────────────

app = create_app()


if __name__ == "__main__":
    import uvicorn

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"
    )

    uvicorn.run(
        "appointments.app:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        log_config=log_config,
    )
