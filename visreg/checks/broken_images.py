"""Broken image scan: every <img> on a page must resolve to an HTTP 200."""

from __future__ import annotations

import logging
import time

from playwright.async_api import Page

from visreg.models.checks import BrokenImageCheckConfig, CheckDetail, CheckResult
from visreg.url_utils import resolve_asset_url

logger = logging.getLogger(__name__)


async def _check_image(page: Page, index: int, src: str | None, page_url: str) -> CheckDetail:
    label = f"Image {index + 1}"
    if not src or not src.strip():
        logger.warning("%s does not have a valid src attribute.", label)
        return CheckDetail(item=label, status="fail", message="Missing src attribute")

    src = src.strip()
    if src.startswith("data:"):
        return CheckDetail(item=label, status="pass", message="Inline data URI")

    image_url = resolve_asset_url(src, page_url)
    logger.debug("Checking %s: %s", label, image_url)
    try:
        response = await page.request.get(image_url)
        status = response.status
        await response.dispose()
    except Exception as e:
        logger.warning("%s failed to load. Error: %s", label, e)
        return CheckDetail(item=image_url, status="fail", message=str(e))

    if status != 200:
        logger.warning("%s failed to load. Status Code: %d", label, status)
        return CheckDetail(item=image_url, status="fail", message=f"HTTP {status}")
    return CheckDetail(item=image_url, status="pass", message="HTTP 200")


async def check_broken_images(page: Page, check: BrokenImageCheckConfig, page_url: str) -> CheckResult:
    """Load ``page_url`` and verify that every image on it loads."""
    start = time.time()
    logger.info("Scanning images on %s", page_url)
    try:
        await page.goto(page_url, wait_until="domcontentloaded")
        sources = await page.locator("img").evaluate_all(
            "imgs => imgs.map(img => img.getAttribute('src'))"
        )
    except Exception as e:
        logger.error("Broken image scan on %s failed: %s", page_url, e)
        return CheckResult(
            name=check.name, kind="broken_images", url=page_url, result="error",
            message=str(e), duration_seconds=round(time.time() - start, 2),
        )

    logger.info("Found %d images on the page.", len(sources))
    details = [await _check_image(page, i, src, page_url) for i, src in enumerate(sources)]
    broken = sum(1 for d in details if d.status == "fail")

    if broken:
        logger.warning("Found %d broken images on %s", broken, page_url)
        message = f"{broken} of {len(details)} images broken"
    else:
        message = f"All {len(details)} images loaded"

    return CheckResult(
        name=check.name,
        kind="broken_images",
        url=page_url,
        result="fail" if broken else "pass",
        message=message,
        duration_seconds=round(time.time() - start, 2),
        details=details,
    )
