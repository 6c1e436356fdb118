#!/usr/bin/env python3
"""
Tests for the ScrapeError model and Problem Details builders.
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask

from error_handler import (
    PROBLEM_MIMETYPE, ErrorCategory, ScrapeError, internal_problem_document,
    problem_document, problem_response
)
from security_manager import check_api_key


class TestScrapeError(unittest.TestCase):

    def test_default_status_per_category(self):
        self.assertEqual(ScrapeError.not_found("x").status_code, 404)
        self.assertEqual(ScrapeError.validation("x").status_code, 400)
        self.assertEqual(ScrapeError.error("x").status_code, 500)
        self.assertEqual(ScrapeError("x", ErrorCategory.AUTHENTICATION).status_code, 401)

    def test_status_override(self):
        error = ScrapeError.error("captcha", status_code=429)

        self.assertEqual(error.status_code, 429)
        self.assertEqual(error.category, ErrorCategory.ERROR)

    def test_category_from_string(self):
        self.assertEqual(ScrapeError("x", "not_found").category, ErrorCategory.NOT_FOUND)

    def test_data_and_repr(self):
        plain = ScrapeError.error("boom")
        shot = ScrapeError.not_found("gone", screenshot="data:image/png;base64,AA==")

        self.assertIsNone(plain.data)
        self.assertEqual(shot.data, {"screenshot": "data:image/png;base64,AA=="})
        self.assertIn("screenshot=yes", repr(shot))
        self.assertEqual(str(plain), "boom")


class TestProblemDocuments(unittest.TestCase):

    def test_problem_document(self):
        error = ScrapeError.validation("Invalid video ID format")

        self.assertEqual(problem_document(error, "/transcript/bad"), {
            "type": "/problems/validation",
            "title": "validation",
            "status": 400,
            "detail": "Invalid video ID format",
            "instance": "/transcript/bad",
        })

    def test_internal_document_has_no_detail(self):
        doc = internal_problem_document("/transcript/dQw4w9WgXcQ")

        self.assertEqual(doc["status"], 500)
        self.assertNotIn("detail", doc)

    def test_problem_response(self):
        app = Flask(__name__)
        with app.test_request_context("/transcript/dQw4w9WgXcQ"):
            with self.assertLogs("error_handler", level="ERROR"):
                response, status = problem_response(ScrapeError.not_found("gone"), "/transcript/dQw4w9WgXcQ")

        self.assertEqual(status, 404)
        self.assertEqual(response.mimetype, PROBLEM_MIMETYPE)
        self.assertEqual(response.get_json(force=True)["detail"], "gone")

    def test_problem_response_for_unexpected_error(self):
        app = Flask(__name__)
        with app.test_request_context("/transcript/dQw4w9WgXcQ"):
            with self.assertLogs("error_handler", level="ERROR"):
                response, status = problem_response(KeyError("internal"), "/transcript/dQw4w9WgXcQ")

        self.assertEqual(status, 500)
        self.assertNotIn("internal", response.get_data(as_text=True).replace("internal-server-error", ""))


class TestCheckApiKey(unittest.TestCase):

    def test_disabled_when_no_key_configured(self):
        check_api_key("", "")
        check_api_key("anything", "")

    def test_missing(self):
        with self.assertRaises(ScrapeError) as ctx:
            check_api_key("", "s3cret")

        self.assertEqual(ctx.exception.category, ErrorCategory.AUTHENTICATION)
        self.assertEqual(ctx.exception.message, "API key is required")

    def test_mismatch(self):
        with self.assertRaises(ScrapeError) as ctx:
            check_api_key("guess", "s3cret")

        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(ctx.exception.message, "Invalid API key")

    def test_match(self):
        check_api_key("s3cret", "s3cret")


if __name__ == "__main__":
    unittest.main()
