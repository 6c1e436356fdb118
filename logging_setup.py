"""
Core logging infrastructure for the transcript scraper service.

Emits single-line JSON records with per-request context (request_id,
video_id), rate limits repeated messages and quiets third-party libraries.
"""

import json
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Dict, Optional, Set
from collections import defaultdict


# Thread-local storage for request context
_local = threading.local()

# Fields emitted right after ts/lvl, in this order
CONTEXT_FIELDS = ('request_id', 'video_id')
RECORD_FIELDS = ('stage', 'event', 'outcome', 'dur_ms', 'detail')
OPTIONAL_FIELDS = ('method', 'category', 'status', 'cookie_count')

_STANDARD_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'taskName', 'message',
    'exc_info', 'exc_text', 'stack_info',
}


def set_request_ctx(request_id: str = None, video_id: str = None):
    """
    Set thread-local context for request correlation.

    Args:
        request_id: Identifier of the HTTP request being served
        video_id: YouTube video ID being scraped
    """
    if not hasattr(_local, 'context'):
        _local.context = {}

    if request_id is not None:
        _local.context['request_id'] = request_id
    if video_id is not None:
        _local.context['video_id'] = video_id


def clear_request_ctx():
    """Clear thread-local context."""
    if hasattr(_local, 'context'):
        _local.context.clear()


def get_request_ctx() -> Dict[str, str]:
    """Get current thread-local context."""
    if not hasattr(_local, 'context'):
        return {}
    return _local.context.copy()


class JsonFormatter(logging.Formatter):
    """
    JSON formatter with a stable field order.

    ts, lvl, request_id, video_id, stage, event, outcome, dur_ms, detail,
    then optional fields and any other ``extra`` values.
    """

    def format(self, record: logging.LogRecord) -> str:
        try:
            dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
            timestamp = dt.strftime('%Y-%m-%dT%H:%M:%S') + f'.{int(dt.microsecond / 1000):03d}Z'

            log_data = {
                'ts': timestamp,
                'lvl': record.levelname
            }

            context = get_request_ctx()
            for field in CONTEXT_FIELDS:
                value = context.get(field) or getattr(record, field, None)
                if value:
                    log_data[field] = value

            for field in RECORD_FIELDS + OPTIONAL_FIELDS:
                value = getattr(record, field, None)
                if value is not None:
                    log_data[field] = value

            known = _STANDARD_ATTRS.union(CONTEXT_FIELDS, RECORD_FIELDS, OPTIONAL_FIELDS)
            for attr_name, attr_value in record.__dict__.items():
                if attr_name.startswith('_') or attr_name in known:
                    continue
                if attr_value is not None and attr_name not in log_data:
                    log_data[attr_name] = attr_value

            if 'detail' not in log_data and record.getMessage():
                log_data['detail'] = record.getMessage()

            if record.exc_info and 'exc' not in log_data:
                log_data['exc'] = self.formatException(record.exc_info)

            return json.dumps(log_data, separators=(',', ':'), ensure_ascii=False, default=str)

        except Exception:
            return json.dumps({
                'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
                'lvl': record.levelname,
                'detail': str(record.msg),
            })


class RateLimitFilter(logging.Filter):
    """
    Limits identical messages to ``per_key`` per ``window_sec`` sliding window.

    The first dropped message in a window is let through with a
    ``[suppressed]`` marker.
    """

    def __init__(self, per_key: int = 5, window_sec: int = 60):
        super().__init__()
        self.per_key = per_key
        self.window_sec = window_sec
        self.counts: Dict[str, list] = defaultdict(list)
        self.suppressed: Set[str] = set()
        self._lock = threading.Lock()

    def _get_message_key(self, record: logging.LogRecord) -> str:
        event = getattr(record, 'event', None)
        if event:
            return f"{record.levelname}:evt:{event}:{getattr(record, 'video_id', '')}"
        return f"{record.levelname}:{record.getMessage()[:100]}"

    def _cleanup_old_entries(self, key: str, now: float):
        cutoff = now - self.window_sec
        self.counts[key] = [ts for ts in self.counts[key] if ts > cutoff]

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            key = self._get_message_key(record)
            now = time.time()

            with self._lock:
                self._cleanup_old_entries(key, now)

                if len(self.counts[key]) < self.per_key:
                    self.counts[key].append(now)
                    self.suppressed.discard(key)
                    return True

                if key not in self.suppressed:
                    self.suppressed.add(key)
                    record.msg = f"{record.getMessage()} [suppressed]"
                    record.args = ()
                    return True

                return False

        except Exception:
            return True


def configure_logging(log_level: str = "INFO", use_json: bool = True) -> logging.Logger:
    """
    Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_json: JSON formatting (True) or plain text (False)

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    handler = logging.StreamHandler()

    if use_json:
        formatter = JsonFormatter()
        handler.addFilter(RateLimitFilter())
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    _suppress_library_noise()

    return root_logger


def _suppress_library_noise():
    """Suppress verbose logging from third-party libraries."""
    library_levels = {
        'playwright': logging.WARNING,
        'urllib3': logging.WARNING,
        'asyncio': logging.WARNING,
        'werkzeug': logging.WARNING,
    }

    for library, level in library_levels.items():
        logging.getLogger(library).setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)
