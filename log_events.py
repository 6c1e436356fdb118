"""
Event helpers for structured JSON logging.

``evt`` emits a named event with arbitrary fields; ``StageTimer`` wraps a
pipeline stage with ``stage_start``/``stage_result`` events and a duration.
"""

import logging
import time
from typing import Optional

logger = logging.getLogger()


def evt(event: str, level: int = logging.INFO, **fields) -> None:
    """
    Emit a structured event.

    Example:
        evt("scrape_probe", selector="expand", found=True)
        evt("stage_result", stage="browser", outcome="success", dur_ms=1250)
    """
    event_data = {"event": event}
    event_data.update(fields)
    logger.log(level, "", extra=event_data)


class StageTimer:
    """
    Context manager timing one stage of a transcript request.

    Emits ``stage_start`` on entry and ``stage_result`` on exit. Exceptions
    are recorded (outcome ``error``) and always propagate.

    Example:
        with StageTimer("browser", video_id="dQw4w9WgXcQ"):
            scraper.scrape(...)
    """

    def __init__(self, stage: str, **context_fields):
        self.stage = stage
        self.context_fields = context_fields
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.time()
        evt("stage_start", stage=self.stage, **self.context_fields)
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        duration_ms = 0 if self.start_time is None else int((time.time() - self.start_time) * 1000)

        event_fields = {
            "stage": self.stage,
            "outcome": "success" if exc_type is None else "error",
            "dur_ms": duration_ms,
            **self.context_fields
        }

        if exc_type is not None:
            event_fields["detail"] = f"{exc_type.__name__}: {exc_value}"
            # ScrapeError carries its own classification
            category = getattr(exc_value, "category", None)
            if category is not None:
                event_fields["category"] = getattr(category, "value", category)
                event_fields["status"] = getattr(exc_value, "status_code", None)

        evt("stage_result", **event_fields)
        return False


def time_stage(stage: str, **context_fields) -> StageTimer:
    return StageTimer(stage, **context_fields)


def http_request(method: str, path: str, status: int, duration_ms: int, **fields) -> None:
    """Access-log line for one HTTP request."""
    evt("http_request", method=method, path=path, status=status, dur_ms=duration_ms, **fields)
