"""Parse raw generator text into validated reply models."""

import json
import logging
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from vivot.app.errors import GenerationFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Models sometimes wrap JSON in a markdown fence despite JSON mode
_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def strip_code_fence(raw: str) -> str:
    """Remove a surrounding ```json fence, if present."""
    text = raw.strip()
    match = _FENCE.match(text)
    return match.group(1) if match else text


def parse_generator_output(raw: str | None, model: type[T]) -> T:
    """Decode generator JSON and validate it against a reply model.

    Args:
        raw: Raw message content returned by the generator
        model: Reply model to validate against

    Returns:
        Validated reply

    Raises:
        GenerationFailedError: If the content is empty, not JSON, not an
            object, or fails validation
    """
    if raw is None or not raw.strip():
        raise GenerationFailedError("Generator returned an empty response")

    try:
        payload = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as e:
        logger.warning(f"Generator returned invalid JSON: {e.msg} at position {e.pos}")
        raise GenerationFailedError("Generator returned invalid JSON") from e

    if not isinstance(payload, dict):
        raise GenerationFailedError("Generator returned JSON that is not an object")

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.warning(
            f"Generator output failed {model.__name__} validation: {e.error_count()} error(s)"
        )
        raise GenerationFailedError(f"Generator returned malformed {model.__name__}") from e
