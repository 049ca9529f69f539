"""FastAPI application."""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from vivot.app.api.routes.activities import router as activities_router
from vivot.app.api.routes.budget import router as budget_router
from vivot.app.api.routes.care_mode import router as care_mode_router
from vivot.app.api.routes.chat import router as chat_router
from vivot.app.api.routes.discoveries import router as discoveries_router
from vivot.app.api.routes.health import router as health_router
from vivot.app.api.routes.metrics import router as metrics_router
from vivot.app.api.routes.mood import router as mood_router
from vivot.app.api.routes.pivot import router as pivot_router
from vivot.app.api.routes.preferences import router as preferences_router
from vivot.app.api.routes.trips import router as trips_router
from vivot.app.errors import VivotError

logger = logging.getLogger(__name__)

app = FastAPI(title="VIVOT Travel Planner API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trips_router)
app.include_router(activities_router)
app.include_router(budget_router)
app.include_router(mood_router)
app.include_router(pivot_router)
app.include_router(chat_router)
app.include_router(care_mode_router)
app.include_router(preferences_router)
app.include_router(discoveries_router)


@app.exception_handler(VivotError)
async def vivot_error_handler(request: Request, exc: VivotError) -> JSONResponse:
    """Map domain errors to their HTTP status with a machine-readable kind."""
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.kind}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.kind},
    )


_HTTP_ERROR_KINDS = {
    401: "unauthorized",
    404: "not_found",
    429: "rate_limited",
}


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Framework HTTP errors in the same {detail, error} shape as domain errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error": _HTTP_ERROR_KINDS.get(exc.status_code, "http_error"),
        },
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies and parameters."""
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "error": "validation_error"},
    )


@app.exception_handler(ValidationError)
async def model_validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Model validation failures raised inside services are input errors."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": jsonable_encoder(exc.errors(include_url=False, include_context=False)),
            "error": "validation_error",
        },
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "VIVOT Travel Planner API", "version": "0.1.0"}
