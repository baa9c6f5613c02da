"""Screenshot capture: navigate to a URL and always leave a full-page PNG behind."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image
from playwright.async_api import Page

logger = logging.getLogger(__name__)

SETTLED = "settled"
TIMEOUT = "timeout"
FAILED = "failed"


@dataclass
class CapturedImage:
    environment: str
    page_path: str
    path: Path
    outcome: str  # settled, timeout, failed
    error: Optional[str] = None


def _viewport_size(page: Page) -> tuple[int, int]:
    viewport = getattr(page, "viewport_size", None)
    if isinstance(viewport, dict):
        return viewport.get("width", 1280), viewport.get("height", 800)
    return 1280, 800


def _write_placeholder(path: Path, size: tuple[int, int]) -> None:
    """Write a blank white PNG so downstream steps always find a file."""
    Image.new("RGBA", size, (255, 255, 255, 255)).save(path, format="PNG")


def _log_abandoned(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Abandoned navigation ended with: %s", task.exception())


async def capture_screenshot(
    page: Page,
    url: str,
    path: Path,
    navigation_timeout: float = 60.0,
    force_capture_after: float = 10.0,
    environment: str = "",
    page_path: str = "",
) -> CapturedImage:
    """Navigate ``page`` to ``url`` and capture a full-page screenshot at ``path``.

    Navigation waits for network idle (bounded by ``navigation_timeout``) but the
    capture happens no later than ``force_capture_after`` seconds in, against
    whatever is rendered by then. Navigation and screenshot errors are logged and
    recorded on the returned CapturedImage; this function never raises for them.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    outcome = SETTLED
    error: Optional[str] = None
    navigation: Optional[asyncio.Future] = None

    logger.info("Navigating to: %s", url)
    try:
        navigation = asyncio.ensure_future(
            page.goto(url, wait_until="networkidle", timeout=navigation_timeout * 1000)
        )
        done, _ = await asyncio.wait({navigation}, timeout=force_capture_after)
        if navigation in done:
            navigation.result()
        else:
            outcome = TIMEOUT
            logger.warning("Timeout detected on %s. Forcing screenshot.", url)
    except Exception as e:
        outcome = FAILED
        error = str(e)
        logger.error("Failed to navigate to %s: %s", url, e)

    try:
        await page.screenshot(path=str(path), full_page=True)
        if outcome == SETTLED:
            logger.info("Screenshot captured: %s", path)
        else:
            logger.info("Forced screenshot captured: %s", path)
    except Exception as e:
        outcome = FAILED
        error = error or str(e)
        logger.error("Screenshot failed for %s: %s", url, e)
    finally:
        if navigation is not None and not navigation.done():
            navigation.add_done_callback(_log_abandoned)
            navigation.cancel()

    if not path.exists():
        logger.warning("No screenshot on disk for %s, writing blank placeholder", url)
        _write_placeholder(path, _viewport_size(page))

    return CapturedImage(
        environment=environment,
        page_path=page_path,
        path=path,
        outcome=outcome,
        error=error,
    )
