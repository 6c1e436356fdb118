#!/usr/bin/env python3
"""
Error model and Problem Details rendering for the transcript service.

Every failure that crosses a module boundary is a ``ScrapeError`` tagged with
an ``ErrorCategory``. The HTTP layer turns it into an
``application/problem+json`` body.
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from flask import Response, jsonify

logger = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"


class ErrorCategory(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    ERROR = "error"
    AUTHENTICATION = "authentication"


DEFAULT_STATUS = {
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.ERROR: 500,
    ErrorCategory.AUTHENTICATION: 401,
}


class ScrapeError(Exception):
    """
    Terminal failure of one transcript request.

    Args:
        message: Human readable detail
        category: Failure class, drives the default HTTP status
        status_code: Explicit status, overrides the category default
        screenshot: Optional ``data:image/png;base64,...`` URI of the page
    """

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.ERROR,
                 status_code: Optional[int] = None, screenshot: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.category = ErrorCategory(category)
        self.status_code = status_code or DEFAULT_STATUS[self.category]
        self.screenshot = screenshot

    @classmethod
    def not_found(cls, message: str, **kwargs) -> "ScrapeError":
        return cls(message, ErrorCategory.NOT_FOUND, **kwargs)

    @classmethod
    def validation(cls, message: str, **kwargs) -> "ScrapeError":
        return cls(message, ErrorCategory.VALIDATION, **kwargs)

    @classmethod
    def error(cls, message: str, **kwargs) -> "ScrapeError":
        return cls(message, ErrorCategory.ERROR, **kwargs)

    @property
    def data(self) -> Optional[Dict[str, Any]]:
        """Auxiliary payload merged into the problem document."""
        if self.screenshot:
            return {"screenshot": self.screenshot}
        return None

    def __repr__(self) -> str:
        return (f"ScrapeError({self.message!r}, category={self.category.value}, "
                f"status_code={self.status_code}, screenshot={'yes' if self.screenshot else 'no'})")


def problem_document(error: ScrapeError, instance: str) -> Dict[str, Any]:
    """Build the Problem Details body for a ScrapeError."""
    problem = {
        "type": f"/problems/{error.category.value}",
        "title": error.category.value,
        "status": error.status_code,
        "detail": error.message,
        "instance": instance,
    }
    if error.data:
        problem.update(error.data)
    return problem


def internal_problem_document(instance: str) -> Dict[str, Any]:
    return {
        "type": "/problems/internal-server-error",
        "title": "InternalServerError",
        "status": 500,
        "instance": instance,
    }


def _problem_json(body: Dict[str, Any], status: int) -> Tuple[Response, int]:
    response = jsonify(body)
    response.mimetype = PROBLEM_MIMETYPE
    return response, status


def problem_response(error: Exception, instance: str, method: str = "GET") -> Tuple[Response, int]:
    """
    Log an error and render it as a Problem Details response.

    Unexpected exceptions are rendered without any detail so internal
    messages never reach the client.
    """
    if isinstance(error, ScrapeError):
        logger.error(
            f"Error {error.status_code}: {error.message}",
            extra={
                "category": error.category.value,
                "status": error.status_code,
                "url": instance,
                "http_method": method,
                "has_screenshot": bool(error.screenshot),
            },
        )
        return _problem_json(problem_document(error, instance), error.status_code)

    logger.error(
        f"Error 500: {error}",
        extra={"url": instance, "http_method": method, "error_type": type(error).__name__},
        exc_info=error,
    )
    return _problem_json(internal_problem_document(instance), 500)
