"""
Transcript service: chooses the extraction method for a request and caps
the number of simultaneous headless browsers.

Browser sessions are admitted through a non-blocking semaphore. When every
slot is taken the request is rejected straight away with a 503 rather than
queued.
"""

import threading
from typing import Any, Dict, Optional

import innertube_service
from error_handler import ScrapeError
from log_events import StageTimer, evt
from logging_setup import get_logger
from models import TranscriptResult
from scraper_config import TRANSCRIPT_METHODS, ScraperConfig
from transcript_scraper import scrape_transcript

logger = get_logger(__name__)


class BrowserSessionLimiter:
    """Counts live browser sessions against a fixed limit (0 = unlimited)."""

    def __init__(self, limit: int):
        self.limit = limit
        self._semaphore = threading.BoundedSemaphore(limit) if limit > 0 else None
        self._active = 0
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        if self._semaphore is not None and not self._semaphore.acquire(blocking=False):
            return False
        with self._lock:
            self._active += 1
        return True

    def release(self) -> None:
        with self._lock:
            self._active -= 1
        if self._semaphore is not None:
            self._semaphore.release()

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {"active": self._active, "limit": self.limit or None}


class TranscriptService:
    """
    Entry point used by the HTTP layer and the CLI.

    Args:
        config: Scraper settings; also supplies the default method and the
            browser session limit
    """

    def __init__(self, config: ScraperConfig):
        self.config = config
        self.sessions = BrowserSessionLimiter(config.max_browser_sessions)

    def get_transcript(self, video_id: str, method: Optional[str] = None,
                       lang: Optional[str] = None) -> TranscriptResult:
        method = (method or self.config.default_method).lower()
        if method not in TRANSCRIPT_METHODS:
            raise ScrapeError.validation(
                f"Unknown transcript method '{method}', expected one of: {', '.join(TRANSCRIPT_METHODS)}"
            )

        evt("transcript_request_start", method=method, video_id=video_id)
        with StageTimer(method, video_id=video_id):
            if method == "innertube":
                return innertube_service.fetch_transcript(
                    video_id, lang=lang, timeout=self.config.innertube_timeout
                )
            return self._scrape_with_browser(video_id)

    def _scrape_with_browser(self, video_id: str) -> TranscriptResult:
        if not self.sessions.try_acquire():
            evt("browser_session_rejected", **self.sessions.stats())
            raise ScrapeError.error(
                "Too many concurrent browser sessions, try again later",
                status_code=503,
            )
        try:
            return scrape_transcript(video_id, self.config)
        finally:
            self.sessions.release()

    def health(self) -> Dict[str, Any]:
        return {
            "method": self.config.default_method,
            "browser_sessions": self.sessions.stats(),
        }
