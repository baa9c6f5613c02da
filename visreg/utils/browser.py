"""Browser session utilities: launch Chromium and open viewport-bound contexts."""

from __future__ import annotations

from typing import Optional

from playwright.async_api import Browser, BrowserContext, Playwright

from visreg.models.config import ViewportConfig

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch Chromium. Failures here are fatal for the whole run."""
    return await playwright.chromium.launch(headless=headless)


async def create_context(
    browser: Browser,
    viewport: Optional[ViewportConfig] = None,
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Create a browser context pinned to a device viewport.

    Args:
        viewport: Device profile; when omitted Playwright's default viewport is used.
        user_agent: Override for the default desktop Chrome user agent.
    """
    context_kwargs: dict = {
        "user_agent": user_agent or DEFAULT_USER_AGENT,
        "locale": "en-US",
        "extra_http_headers": {
            "Accept-Language": "en-US,en;q=0.9",
        },
    }
    if viewport is not None:
        context_kwargs["viewport"] = {"width": viewport.width, "height": viewport.height}

    return await browser.new_context(**context_kwargs)
