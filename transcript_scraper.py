"""
Browser-driven transcript scraper.

Drives one headless Chromium session per call through the YouTube watch
page: navigate, check availability, expand the description, open the
transcript panel, then read the segment texts and the view count.

Every failure ends the call immediately (no retries) as a ScrapeError with
a best-effort full-page screenshot attached. The browser is closed on every
exit path.
"""

import asyncio
import base64
from typing import Callable, List, Optional

from playwright.async_api import async_playwright

from cookie_utils import load_cookies, to_playwright_cookies
from error_handler import ScrapeError
from human_simulation import human_click, human_scroll, random_delay
from log_events import evt
from logging_setup import get_logger, set_request_ctx
from models import TranscriptResult, join_segments, parse_view_count
from scraper_config import ScraperConfig
from video_id_utils import watch_url

logger = get_logger(__name__)

SEGMENT_TEXTS_JS = """
(nodes, textSelector) => nodes.map(n => {
    const el = n.querySelector(textSelector);
    return el ? el.innerText.trim() : '';
})
"""

INNER_TEXTS_JS = "nodes => nodes.map(n => n.innerText.trim())"


async def capture_screenshot(page) -> Optional[str]:
    """
    Full-page PNG of ``page`` as a data URI, or None.

    Capture problems (page already closed, browser crashed) are logged and
    swallowed so they never replace the error being reported.
    """
    if page is None:
        return None
    try:
        png = await page.screenshot(full_page=True, type="png")
        return "data:image/png;base64," + base64.b64encode(png).decode("ascii")
    except Exception as e:
        evt("scrape_screenshot_failed", error_type=type(e).__name__, error=str(e)[:120])
        return None


class TranscriptScraper:
    """
    Scrapes transcript text and view count from the watch page.

    Args:
        config: Selectors, user agent, cookies and timeouts for the session
        playwright_factory: Callable returning the Playwright async context
            manager (``async_playwright`` unless a test injects a fake)
    """

    def __init__(self, config: ScraperConfig, playwright_factory: Callable = async_playwright):
        self.config = config
        self.selectors = config.selectors
        self.playwright_factory = playwright_factory
        self.page = None

    async def _fail(self, message: str, category: str, status_code: Optional[int] = None) -> ScrapeError:
        screenshot = await capture_screenshot(self.page)
        evt("scrape_failed", category=category, detail=message, has_screenshot=bool(screenshot))
        return ScrapeError(message, category, status_code=status_code, screenshot=screenshot)

    async def scrape(self, video_id: str) -> TranscriptResult:
        set_request_ctx(video_id=video_id)
        cookies = load_cookies(self.config.cookies_raw)

        try:
            async with self.playwright_factory() as p:
                return await self._scrape_in_browser(p, video_id, cookies)
        except ScrapeError:
            raise
        except Exception as e:
            # driver start-up or shutdown failed, no page to capture
            raise await self._fail(f"Failed to fetch transcript: {e}", "error") from e

    async def _scrape_in_browser(self, p, video_id: str, cookies) -> TranscriptResult:
        browser = None
        try:
            browser = await p.chromium.launch(
                headless=self.config.headless,
                args=list(self.config.launch_args),
            )
            evt("scrape_browser_launched", cookie_count=len(cookies))

            context = await browser.new_context(
                viewport=self.config.viewport,
                user_agent=self.config.user_agent,
            )
            if cookies:
                await context.add_cookies(to_playwright_cookies(cookies))

            self.page = await context.new_page()
            return await self._run(video_id)

        except ScrapeError:
            raise
        except Exception as e:
            raise await self._fail(f"Failed to fetch transcript: {e}", "error") from e
        finally:
            self.page = None
            if browser is not None:
                await self._close_browser(browser)

    async def _close_browser(self, browser) -> None:
        try:
            await browser.close()
            evt("scrape_browser_closed")
        except Exception as e:
            # the scrape outcome is already decided at this point
            logger.warning(f"Browser close failed: {e}")

    async def _run(self, video_id: str) -> TranscriptResult:
        page = self.page
        sel = self.selectors

        await page.goto(
            watch_url(video_id),
            wait_until="networkidle",
            timeout=self.config.navigation_timeout_ms,
        )

        # reading time
        await random_delay(500, 1500)

        if await page.query_selector(sel.not_found):
            raise await self._fail("Video not found or unavailable", "not_found")

        await human_scroll(page)
        await random_delay(300, 800)

        expand_button = await page.query_selector(sel.expand)
        if not expand_button:
            raise await self._fail("Expand button not found", "validation")

        await human_click(page, expand_button)
        await random_delay(200, 500)

        show_transcript_button = await page.query_selector(sel.show_transcript)
        if not show_transcript_button:
            raise await self._fail("Show transcript button not found", "validation")

        await human_click(page, show_transcript_button)

        await page.wait_for_selector(sel.transcript, timeout=self.config.transcript_timeout_ms)

        segments: List[str] = await page.eval_on_selector_all(
            sel.transcript_segment, SEGMENT_TEXTS_JS, sel.text
        )
        view_texts: List[str] = await page.eval_on_selector_all(sel.view_count, INNER_TEXTS_JS)

        result = TranscriptResult(
            transcript=join_segments(segments),
            views=parse_view_count(view_texts[0] if view_texts else ""),
        )
        evt("scrape_success", segments=len(segments), views=result.views)
        return result


def scrape_transcript(video_id: str, config: ScraperConfig) -> TranscriptResult:
    """Synchronous entry point: run one scrape on a fresh event loop."""
    return asyncio.run(TranscriptScraper(config).scrape(video_id))
