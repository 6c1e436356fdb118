"""
Unit tests for logging_setup.py core logging infrastructure.

Tests JsonFormatter field order, timestamp format, context management,
rate limiting, and library noise suppression.
"""

import json
import logging
import threading
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from logging_setup import (
    JsonFormatter, RateLimitFilter, set_request_ctx, clear_request_ctx, get_request_ctx,
    configure_logging, get_logger
)


def make_record(msg='test message', level=logging.INFO):
    return logging.LogRecord(
        name='test', level=level, pathname='', lineno=0,
        msg=msg, args=(), exc_info=None
    )


class TestJsonFormatter(unittest.TestCase):
    """Test JsonFormatter field order and timestamp format."""

    def setUp(self):
        self.formatter = JsonFormatter()
        clear_request_ctx()

    def tearDown(self):
        clear_request_ctx()

    def test_field_order_consistency(self):
        """Context, record and optional fields come out in a fixed order."""
        set_request_ctx(request_id='a1b2c3', video_id='dQw4w9WgXcQ')
        record = make_record()
        record.stage = 'browser'
        record.event = 'stage_result'
        record.outcome = 'error'
        record.dur_ms = 1500
        record.detail = 'ScrapeError: boom'
        record.method = 'GET'
        record.category = 'not_found'
        record.status = 404
        record.cookie_count = 3
        record.segments = 12

        parsed = json.loads(self.formatter.format(record))

        self.assertEqual(list(parsed.keys()), [
            'ts', 'lvl', 'request_id', 'video_id', 'stage', 'event', 'outcome', 'dur_ms',
            'detail', 'method', 'category', 'status', 'cookie_count', 'segments'
        ])

    def test_timestamp_format(self):
        """ISO 8601 UTC timestamp with millisecond precision."""
        parsed = json.loads(self.formatter.format(make_record()))

        timestamp = parsed['ts']
        self.assertRegex(timestamp, r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$')
        parsed_time = datetime.fromisoformat(timestamp.replace('Z', '+00:00'))
        self.assertEqual(parsed_time.tzinfo, timezone.utc)

    def test_context_injection(self):
        set_request_ctx(request_id='req-123', video_id='dQw4w9WgXcQ')

        parsed = json.loads(self.formatter.format(make_record()))

        self.assertEqual(parsed['request_id'], 'req-123')
        self.assertEqual(parsed['video_id'], 'dQw4w9WgXcQ')

    def test_video_id_from_record_when_no_context(self):
        record = make_record()
        record.video_id = 'dQw4w9WgXcQ'

        parsed = json.loads(self.formatter.format(record))

        self.assertEqual(parsed['video_id'], 'dQw4w9WgXcQ')
        self.assertNotIn('request_id', parsed)

    def test_null_value_omission(self):
        record = make_record()
        record.stage = None
        record.event = 'test_event'
        record.outcome = None

        parsed = json.loads(self.formatter.format(record))

        self.assertNotIn('stage', parsed)
        self.assertNotIn('outcome', parsed)
        self.assertEqual(parsed['event'], 'test_event')

    def test_message_becomes_detail(self):
        parsed = json.loads(self.formatter.format(make_record('plain message')))
        self.assertEqual(parsed['detail'], 'plain message')

    def test_empty_message_has_no_detail(self):
        record = make_record('')
        record.event = 'scrape_start'

        parsed = json.loads(self.formatter.format(record))

        self.assertNotIn('detail', parsed)

    def test_exception_info(self):
        try:
            raise ValueError("bad value")
        except ValueError:
            record = logging.LogRecord(
                name='test', level=logging.ERROR, pathname='', lineno=0,
                msg='failed', args=(), exc_info=sys.exc_info()
            )

        parsed = json.loads(self.formatter.format(record))

        self.assertIn('ValueError: bad value', parsed['exc'])

    def test_non_serializable_extra(self):
        record = make_record()
        record.payload = object()

        parsed = json.loads(self.formatter.format(record))

        self.assertIn('object', parsed['payload'])


class TestRequestContext(unittest.TestCase):

    def setUp(self):
        clear_request_ctx()

    def tearDown(self):
        clear_request_ctx()

    def test_partial_updates(self):
        set_request_ctx(request_id='r1')
        set_request_ctx(video_id='dQw4w9WgXcQ')

        self.assertEqual(get_request_ctx(), {'request_id': 'r1', 'video_id': 'dQw4w9WgXcQ'})

    def test_clear(self):
        set_request_ctx(request_id='r1', video_id='dQw4w9WgXcQ')
        clear_request_ctx()
        self.assertEqual(get_request_ctx(), {})

    def test_get_returns_copy(self):
        set_request_ctx(request_id='r1')
        ctx = get_request_ctx()
        ctx['request_id'] = 'changed'
        self.assertEqual(get_request_ctx()['request_id'], 'r1')

    def test_thread_isolation(self):
        set_request_ctx(request_id='main-thread')
        seen = {}

        def worker():
            seen['before'] = get_request_ctx()
            set_request_ctx(request_id='worker-thread')
            seen['after'] = get_request_ctx()

        t = threading.Thread(target=worker)
        t.start()
        t.join()

        self.assertEqual(seen['before'], {})
        self.assertEqual(seen['after'], {'request_id': 'worker-thread'})
        self.assertEqual(get_request_ctx(), {'request_id': 'main-thread'})


class TestRateLimitFilter(unittest.TestCase):

    def test_allows_up_to_limit_then_marks_once(self):
        rate_filter = RateLimitFilter(per_key=3, window_sec=60)
        results = []
        records = []
        for _ in range(6):
            record = make_record('repeated warning', logging.WARNING)
            records.append(record)
            results.append(rate_filter.filter(record))

        self.assertEqual(results, [True, True, True, True, False, False])
        self.assertTrue(records[3].msg.endswith('[suppressed]'))

    def test_events_keyed_by_video(self):
        rate_filter = RateLimitFilter(per_key=1, window_sec=60)

        first = make_record('')
        first.event = 'scrape_start'
        first.video_id = 'aaaaaaaaaaa'
        second = make_record('')
        second.event = 'scrape_start'
        second.video_id = 'bbbbbbbbbbb'

        self.assertTrue(rate_filter.filter(first))
        self.assertTrue(rate_filter.filter(second))

    def test_window_expiry(self):
        rate_filter = RateLimitFilter(per_key=1, window_sec=60)

        with patch('logging_setup.time.time', return_value=1000.0):
            self.assertTrue(rate_filter.filter(make_record('msg')))
            self.assertTrue(rate_filter.filter(make_record('msg')))
            self.assertFalse(rate_filter.filter(make_record('msg')))

        with patch('logging_setup.time.time', return_value=1061.0):
            self.assertTrue(rate_filter.filter(make_record('msg')))


class TestConfigureLogging(unittest.TestCase):

    def setUp(self):
        self.root = logging.getLogger()
        self.saved_handlers = self.root.handlers[:]
        self.saved_level = self.root.level

    def tearDown(self):
        for handler in self.root.handlers[:]:
            self.root.removeHandler(handler)
        for handler in self.saved_handlers:
            self.root.addHandler(handler)
        self.root.setLevel(self.saved_level)

    def test_json_mode(self):
        root = configure_logging(log_level='DEBUG', use_json=True)

        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)
        handler = root.handlers[0]
        self.assertIsInstance(handler.formatter, JsonFormatter)
        self.assertTrue(any(isinstance(f, RateLimitFilter) for f in handler.filters))

    def test_plain_mode(self):
        root = configure_logging(log_level='WARNING', use_json=False)

        self.assertEqual(root.level, logging.WARNING)
        self.assertNotIsInstance(root.handlers[0].formatter, JsonFormatter)

    def test_unknown_level_defaults_to_info(self):
        root = configure_logging(log_level='chatty')
        self.assertEqual(root.level, logging.INFO)

    def test_library_noise_suppressed(self):
        configure_logging()
        for name in ('playwright', 'urllib3', 'asyncio', 'werkzeug'):
            self.assertEqual(logging.getLogger(name).level, logging.WARNING)

    def test_get_logger(self):
        self.assertEqual(get_logger('transcript_scraper').name, 'transcript_scraper')


if __name__ == '__main__':
    unittest.main()
