from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .adapters.calendar.base import CalendarProviderError
from .lookup.errors import ClientInputError, DateValidationError
from .lookup.service import MeetingsLookupService, build_lookup_service
from .settings import AppSettings, load_settings

LOGGER = logging.getLogger(__name__)

MEETINGS_PATH = "/api/get-google-calendar-meetings"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

MISSING_DATE_MESSAGE = "Date parameter is required"
INVALID_DATE_MESSAGE = "Invalid date format. Please provide a valid date."
FALLBACK_ERROR_MESSAGE = "Failed to fetch meetings"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(__name__.split(".")[0]).setLevel(level)


def _get_service(request: Request) -> MeetingsLookupService:
    return request.app.state.lookup_service


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


async def _read_body_date(request: Request) -> Any:
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("date")


async def _lookup_response(request: Request, raw_date: Any) -> JSONResponse:
    service = _get_service(request)
    try:
        result = await run_in_threadpool(service.lookup, raw_date)
    except ClientInputError:
        return _failure(400, MISSING_DATE_MESSAGE)
    except DateValidationError as exc:
        LOGGER.info("Rejected date %r: %s", raw_date, exc)
        return _failure(400, INVALID_DATE_MESSAGE)
    except CalendarProviderError as exc:
        LOGGER.error("Error fetching meetings: %s", exc)
        return _failure(500, str(exc) or FALLBACK_ERROR_MESSAGE)
    except Exception as exc:
        LOGGER.exception("Error fetching meetings")
        return _failure(500, str(exc) or FALLBACK_ERROR_MESSAGE)

    return JSONResponse(result.model_dump(mode="json", by_alias=True))


async def _method_not_allowed_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    if exc.status_code != 405:
        return await http_exception_handler(request, exc)
    LOGGER.info("%s is not supported on %s", request.method, request.url.path)
    return JSONResponse(
        {"error": "Method Not Allowed"},
        status_code=405,
        headers=getattr(exc, "headers", None),
    )


def create_app(
    *,
    settings: AppSettings | None = None,
    service: MeetingsLookupService | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(application: FastAPI):
        lookup_service = service
        if lookup_service is None:
            app_settings = settings or load_settings()
            configure_logging(app_settings.yaml.logging.level)
            lookup_service = build_lookup_service(app_settings)

        application.state.lookup_service = lookup_service
        application.state.settings = lookup_service.settings
        application.state.started_at_utc = datetime.now(timezone.utc)
        LOGGER.info(
            "Calendar day lookup ready (calendar=%s, timezone=%s)",
            lookup_service.settings.yaml.calendar.calendar_id,
            lookup_service.settings.env.lookup_timezone,
        )
        yield

    application = FastAPI(title="Calendar Day Lookup", version="0.1.0", lifespan=lifespan)
    application.add_exception_handler(StarletteHTTPException, _method_not_allowed_handler)

    # one route for both verbs so a 405 lists every allowed method
    @application.api_route(MEETINGS_PATH, methods=["GET", "POST"], response_class=JSONResponse)
    async def meetings(request: Request, date: str | None = None) -> JSONResponse:
        if request.method == "POST":
            return await _lookup_response(request, await _read_body_date(request))
        return await _lookup_response(request, date)

    @application.get("/health", response_class=JSONResponse)
    async def health(request: Request) -> JSONResponse:
        app_settings: AppSettings = request.app.state.settings
        return JSONResponse(
            {
                "status": "ok",
                "service": "calendar-day-lookup",
                "environment": app_settings.env.lookup_env,
                "timezone": app_settings.env.lookup_timezone,
                "calendar_id": app_settings.yaml.calendar.calendar_id,
                "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            }
        )

    return application


app = create_app()


def run() -> None:
    settings = load_settings()
    uvicorn.run(
        "calendar_day.main:app",
        host=settings.env.lookup_host,
        port=settings.env.lookup_port,
    )
