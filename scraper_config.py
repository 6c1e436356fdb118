#!/usr/bin/env python3
"""
Configuration for the transcript scraper and service.

Settings are loaded from environment variables with defaults and bounds.
The scraper receives an explicit ``ScraperConfig``; the process-wide
instance returned by ``get_scraper_config`` is only a convenience for the
HTTP layer and the CLI.
"""

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Tuple

from logging_setup import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

# Launch flags that reduce automation signals in headless Chromium
STEALTH_ARGS: Tuple[str, ...] = (
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-web-security",
    "--disable-features=IsolateOrigins,site-per-process",
)

TRANSCRIPT_METHODS = ("browser", "innertube")

# selector field -> (env override, default)
SELECTOR_DEFAULTS: Dict[str, Tuple[str, str]] = {
    "expand": ("EXPAND_SELECTOR", "tp-yt-paper-button#expand"),
    "not_found": (
        "NOT_FOUND_SELECTOR",
        'div.promo-title:has-text("This video isn\'t available anymore"), '
        'div.promo-title:has-text("Este video ya no está disponible")',
    ),
    "show_transcript": (
        "SHOW_TRANSCRIPT_SELECTOR",
        'button[aria-label="Show transcript"], button[aria-label="Mostrar transcripción"]',
    ),
    "view_count": ("VIEW_COUNT_SELECTOR", "yt-formatted-string#info span"),
    "transcript_segment": ("TRANSCRIPT_SEGMENT_SELECTOR", "ytd-transcript-segment-renderer"),
    "transcript": ("TRANSCRIPT_SELECTOR", "ytd-transcript-renderer"),
    "text": ("TRANSCRIPT_TEXT_SELECTOR", ".segment-text"),
}


@dataclass(frozen=True)
class SelectorConfig:
    """Named CSS/Playwright selectors on the YouTube watch page."""

    expand: str = SELECTOR_DEFAULTS["expand"][1]
    not_found: str = SELECTOR_DEFAULTS["not_found"][1]
    show_transcript: str = SELECTOR_DEFAULTS["show_transcript"][1]
    view_count: str = SELECTOR_DEFAULTS["view_count"][1]
    transcript_segment: str = SELECTOR_DEFAULTS["transcript_segment"][1]
    transcript: str = SELECTOR_DEFAULTS["transcript"][1]
    text: str = SELECTOR_DEFAULTS["text"][1]

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"selector '{f.name}' must be a non-empty string")

    @classmethod
    def from_env(cls) -> "SelectorConfig":
        overrides = {}
        for name, (env_var, _default) in SELECTOR_DEFAULTS.items():
            value = os.getenv(env_var, "").strip()
            if value:
                overrides[name] = value
        return cls(**overrides)


@dataclass
class ScraperConfig:
    """Settings for one browser scrape and for the service around it."""

    selectors: SelectorConfig = field(default_factory=SelectorConfig)
    user_agent: str = DEFAULT_USER_AGENT
    cookies_raw: Optional[str] = None
    headless: bool = True
    launch_args: Tuple[str, ...] = STEALTH_ARGS
    viewport_width: int = 1920
    viewport_height: int = 1080

    # Timeouts
    navigation_timeout_ms: int = 30000
    transcript_timeout_ms: int = 30000
    innertube_timeout: int = 15

    # Service
    default_method: str = "browser"
    max_browser_sessions: int = 4

    @classmethod
    def from_env(cls) -> "ScraperConfig":
        """Load configuration from environment variables with validation."""
        try:
            config = cls(
                selectors=SelectorConfig.from_env(),
                user_agent=os.getenv("USER_AGENT") or DEFAULT_USER_AGENT,
                cookies_raw=os.getenv("YOUTUBE_COOKIES") or None,
                headless=cls._parse_bool_env("HEADLESS", True),
                navigation_timeout_ms=cls._parse_int_env("NAVIGATION_TIMEOUT_MS", 30000, min_val=1000, max_val=180000),
                transcript_timeout_ms=cls._parse_int_env("TRANSCRIPT_TIMEOUT_MS", 30000, min_val=1000, max_val=180000),
                innertube_timeout=cls._parse_int_env("INNERTUBE_TIMEOUT", 15, min_val=1, max_val=120),
                default_method=cls._parse_method_env("TRANSCRIPT_METHOD", "browser"),
                max_browser_sessions=cls._parse_int_env("MAX_BROWSER_SESSIONS", 4, min_val=0, max_val=64),
            )
            config._log_config()
            return config

        except Exception as e:
            logger.error(f"Failed to load scraper configuration: {e}")
            logger.warning("Using default scraper configuration")
            return cls()

    @staticmethod
    def _parse_bool_env(env_var: str, default: bool) -> bool:
        value = os.getenv(env_var, str(default).lower())
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _parse_int_env(env_var: str, default: int, min_val: Optional[int] = None, max_val: Optional[int] = None) -> int:
        try:
            value = int(os.getenv(env_var, str(default)))

            if min_val is not None and value < min_val:
                logger.warning(f"{env_var}={value} is below minimum {min_val}, using {min_val}")
                return min_val

            if max_val is not None and value > max_val:
                logger.warning(f"{env_var}={value} is above maximum {max_val}, using {max_val}")
                return max_val

            return value

        except (ValueError, TypeError):
            logger.error(f"Invalid value for {env_var}: {os.getenv(env_var)}, using default {default}")
            return default

    @staticmethod
    def _parse_method_env(env_var: str, default: str) -> str:
        value = os.getenv(env_var, default).strip().lower()
        if value not in TRANSCRIPT_METHODS:
            logger.warning(f"{env_var}={value} is not one of {TRANSCRIPT_METHODS}, using {default}")
            return default
        return value

    @property
    def viewport(self) -> Dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}

    def with_selectors(self, **overrides) -> "ScraperConfig":
        return replace(self, selectors=replace(self.selectors, **overrides))

    def _log_config(self) -> None:
        logger.info("Scraper configuration loaded:")
        logger.info(f"  Method: default={self.default_method}, max_browser_sessions={self.max_browser_sessions}")
        logger.info(f"  Timeouts: navigation={self.navigation_timeout_ms}ms, transcript={self.transcript_timeout_ms}ms, innertube={self.innertube_timeout}s")
        logger.info(f"  Browser: headless={self.headless}, cookies={'set' if self.cookies_raw else 'none'}")

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view without secrets (cookies are reported as a flag)."""
        return {
            "method": self.default_method,
            "max_browser_sessions": self.max_browser_sessions,
            "timeouts": {
                "navigation_timeout_ms": self.navigation_timeout_ms,
                "transcript_timeout_ms": self.transcript_timeout_ms,
                "innertube_timeout": self.innertube_timeout,
            },
            "headless": self.headless,
            "cookies_configured": bool(self.cookies_raw),
            "selectors": {f.name: getattr(self.selectors, f.name) for f in fields(self.selectors)},
        }


_scraper_config: Optional[ScraperConfig] = None


def get_scraper_config() -> ScraperConfig:
    global _scraper_config
    if _scraper_config is None:
        _scraper_config = ScraperConfig.from_env()
    return _scraper_config


def reload_scraper_config() -> ScraperConfig:
    """Reload configuration from environment variables."""
    global _scraper_config
    _scraper_config = ScraperConfig.from_env()
    return _scraper_config
