# cookie_utils.py
import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_COOKIE_DOMAIN = ".youtube.com"

# Browser-extension export values -> Playwright values
SAME_SITE_MAP = {
    "no_restriction": "None",
    "lax": "Lax",
    "strict": "Strict",
    "unspecified": "Lax",
}


@dataclass(frozen=True)
class CookieRecord:
    name: str
    value: str
    domain: str = DEFAULT_COOKIE_DOMAIN
    path: str = "/"
    secure: bool = True
    http_only: bool = False
    same_site: str = "Lax"

    def to_playwright(self) -> Dict[str, Any]:
        """Shape accepted by BrowserContext.add_cookies()."""
        return {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path,
            "secure": self.secure,
            "httpOnly": self.http_only,
            "sameSite": self.same_site,
        }


def map_same_site(value: Optional[str]) -> str:
    if not isinstance(value, str):
        return "Lax"
    return SAME_SITE_MAP.get(value.lower(), "Lax")


def _b64decode_text(compact: str, altchars: Optional[bytes] = None) -> Optional[str]:
    padded = compact + "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(padded, altchars=altchars, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


def _decode_source(raw: str) -> str:
    """
    Pick the JSON text out of a raw env value.

    Standard then URL-safe base64 are tried first (padding optional); the
    decoded text is used only when it looks like a JSON array, otherwise
    the raw value is taken as JSON as-is.
    """
    # `base64` wraps long output, so whitespace is dropped before a strict decode
    compact = "".join(raw.split())
    for altchars in (None, b"-_"):
        decoded = _b64decode_text(compact, altchars)
        if decoded is not None and decoded.strip().startswith("["):
            return decoded
    return raw


def _as_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _to_record(item: Dict[str, Any]) -> CookieRecord:
    return CookieRecord(
        name=item["name"],
        value=item["value"],
        domain=item.get("domain") or DEFAULT_COOKIE_DOMAIN,
        path=item.get("path") or "/",
        secure=_as_bool(item.get("secure"), True),
        http_only=_as_bool(item.get("httpOnly"), False),
        same_site=map_same_site(item.get("sameSite")),
    )


def load_cookies(raw: Optional[str]) -> List[CookieRecord]:
    """
    Parse YOUTUBE_COOKIES (JSON array, plain or base64) into cookie records.

    Never raises: missing input gives no cookies, bad input is logged and
    also gives no cookies so the scrape can still run unauthenticated.
    """
    if not raw:
        return []

    json_source = _decode_source(raw)

    try:
        cookies = json.loads(json_source)
        if not isinstance(cookies, list):
            logger.warning("YOUTUBE_COOKIES must be a JSON array")
            return []
        return [_to_record(item) for item in cookies]
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.warning(f"Failed to parse YOUTUBE_COOKIES: {e}")
        return []


def to_playwright_cookies(records: List[CookieRecord]) -> List[Dict[str, Any]]:
    return [r.to_playwright() for r in records]
