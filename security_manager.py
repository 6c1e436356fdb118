#!/usr/bin/env python3
"""
API key protection for the transcript endpoints
"""
import hmac
import os
from functools import wraps

from error_handler import ErrorCategory, ScrapeError

API_KEY_HEADER = "X-API-Key"


def check_api_key(provided: str, expected: str) -> None:
    """
    Raise ScrapeError (authentication) unless ``provided`` matches.

    An empty ``expected`` key disables the check.
    """
    if not expected:
        return
    if not provided:
        raise ScrapeError("API key is required", ErrorCategory.AUTHENTICATION)
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise ScrapeError("Invalid API key", ErrorCategory.AUTHENTICATION)


def require_api_key(view):
    """Flask view decorator enforcing the API_KEY environment variable."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        from flask import request
        check_api_key(request.headers.get(API_KEY_HEADER, ""), os.getenv("API_KEY", ""))
        return view(*args, **kwargs)
    return wrapper
