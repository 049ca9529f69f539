"""Structured logging for generator calls."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredGeneratorLogger:
    """Structured logger for generator calls."""

    def log_call(
        self,
        purpose: str,
        model: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one generator call with structured data."""
        log_data: dict[str, Any] = {
            "purpose": purpose,
            "model": model,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Generator call: {purpose} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
