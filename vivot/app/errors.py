"""Domain error taxonomy.

Each error kind maps to a distinct HTTP status so callers can tell
"nothing to show" (NotFound) from "fix your input" (validation) from
"try again" (generation failed).
"""


class VivotError(Exception):
    """Base class for all domain errors."""

    kind = "error"
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(VivotError):
    """Referenced trip, activity, budget item or preferences record is absent."""

    kind = "not_found"
    status_code = 404


class InputValidationError(VivotError):
    """Malformed input shape or a broken cross-entity reference."""

    kind = "validation_error"
    status_code = 422


class GenerationFailedError(VivotError):
    """External generator call failed or returned unparseable content.

    Retryable by the caller; the core never retries on its own.
    """

    kind = "generation_failed"
    status_code = 503


class GeocodeUnavailableError(VivotError):
    """Geocoder lookup failed. Never surfaced past the generation adapter."""

    kind = "geocode_unavailable"
    status_code = 503
