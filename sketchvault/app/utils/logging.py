"""Structured logging for drawing store operations."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service and scripts."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


class StructuredDrawingLogger:
    """Structured logger for drawing save/update/delete operations."""

    def log_operation(
        self,
        operation: str,
        drawing_id: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log a drawing operation with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "drawing_id": drawing_id,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Drawing {operation}: {drawing_id} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
