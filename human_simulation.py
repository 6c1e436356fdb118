"""
Human-like pointer, scroll and click timing for Playwright pages.

These helpers only shape *how* an action happens (randomised pauses, eased
mouse paths, staggered wheel scrolls); they carry no scraping logic.
"""

import asyncio
import random
from typing import Tuple


async def random_delay(min_ms: int = 100, max_ms: int = 500) -> None:
    """Sleep for a random duration in [min_ms, max_ms)."""
    await asyncio.sleep(random.uniform(min_ms, max_ms) / 1000.0)


async def human_scroll(page) -> None:
    """Scroll down 1-3 times by 100-399 px with short pauses."""
    scrolls = random.randint(1, 3)
    for _ in range(scrolls):
        await page.mouse.wheel(0, random.randint(100, 399))
        await random_delay(200, 600)


def ease_out(progress: float) -> float:
    return 1 - (1 - progress) ** 2


def _clamp(value: float, upper: float) -> float:
    return max(0.0, min(value, upper))


def mouse_path(start: Tuple[float, float], target: Tuple[float, float], steps: int):
    """Points from start to target (inclusive) along an ease-out curve."""
    start_x, start_y = start
    target_x, target_y = target
    for i in range(steps + 1):
        eased = ease_out(i / steps)
        yield (start_x + (target_x - start_x) * eased,
               start_y + (target_y - start_y) * eased)


async def human_mouse_move(page, element) -> None:
    """
    Move the pointer from a random viewport position to the centre of
    ``element`` in 5-14 eased steps. Elements without a bounding box
    (detached or hidden) are skipped.
    """
    box = await element.bounding_box()
    if not box:
        return

    viewport = page.viewport_size or {"width": 1920, "height": 1080}
    width, height = viewport["width"], viewport["height"]

    start = (random.random() * width, random.random() * height)
    target = (
        _clamp(box["x"] + box["width"] / 2 + (random.random() - 0.5) * 10, width),
        _clamp(box["y"] + box["height"] / 2 + (random.random() - 0.5) * 10, height),
    )

    steps = random.randint(5, 14)
    for x, y in mouse_path(start, target, steps):
        await page.mouse.move(x, y)
        await random_delay(10, 30)


async def human_click(page, element) -> None:
    """Move to ``element``, pause briefly, then click it."""
    await human_mouse_move(page, element)
    await random_delay(50, 150)
    await element.click()
