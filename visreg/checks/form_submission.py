"""Form submission check: fill a form one field at a time, submit, verify confirmation."""

from __future__ import annotations

import logging
import re
import time

from playwright.async_api import Page, Route

from visreg.models.checks import CheckDetail, CheckResult, FormCheckConfig
from visreg.url_utils import resolve_url

from .step_runner import resolve_steps, run_step

logger = logging.getLogger(__name__)

BLOCKED_SUFFIXES = (".png", ".jpg", ".css", ".js")


async def _block_heavy_resources(route: Route) -> None:
    if route.request.url.endswith(BLOCKED_SUFFIXES):
        await route.abort()
    else:
        await route.continue_()


async def check_form_submission(page: Page, check: FormCheckConfig, base_url: str) -> CheckResult:
    """Run one configured form flow against the environment at ``base_url``."""
    start = time.time()
    start_url = resolve_url(check.start_path, base_url)
    nav_timeout = int(check.navigation_timeout_seconds * 1000)
    confirm_timeout = int(check.confirmation_timeout_seconds * 1000)
    details: list[CheckDetail] = []

    def _result(result: str, message: str) -> CheckResult:
        return CheckResult(
            name=check.name, kind="form", url=start_url, result=result, message=message,
            duration_seconds=round(time.time() - start, 2), details=details,
        )

    try:
        logger.info("Navigating to the form page: %s", start_url)
        await page.goto(start_url, wait_until="domcontentloaded")

        if check.entry_click_selector:
            logger.debug("Clicking entry element %s", check.entry_click_selector)
            await page.click(check.entry_click_selector, timeout=nav_timeout)
            if check.expected_url:
                expected = resolve_url(check.expected_url, base_url)
                await page.wait_for_url(expected, timeout=nav_timeout)
                details.append(CheckDetail(item="entry", message=f"Reached {expected}"))

        if check.block_resources:
            await page.route("**/*", _block_heavy_resources)
            logger.debug("Blocked unnecessary resources to stabilize the page.")

        for step in resolve_steps(check.steps):
            await run_step(page, step, timeout=nav_timeout)
            details.append(CheckDetail(
                item=step.description or f"{step.action} {step.selector}",
                message=step.value or "",
            ))

        logger.info("Submitting the form...")
        await page.click(check.submit_selector)
        if check.confirmation_url_pattern:
            await page.wait_for_url(re.compile(check.confirmation_url_pattern), timeout=confirm_timeout)
            logger.debug("Reached confirmation page: %s", page.url)

        await page.wait_for_selector(check.confirmation_selector, timeout=confirm_timeout)
        text = ((await page.text_content(check.confirmation_selector)) or "").strip()
        logger.info("Confirmation message found: \"%s\"", text)
    except Exception as e:
        logger.error("Form check '%s' failed: %s", check.name, e)
        return _result("error", str(e))

    if text == check.expected_confirmation:
        details.append(CheckDetail(item="confirmation", message=text))
        return _result("pass", "Confirmation message matches expected value")

    details.append(CheckDetail(item="confirmation", status="fail", message=text))
    logger.warning("Confirmation message text did not match the expected value.")
    return _result("fail", f"Expected '{check.expected_confirmation}', got '{text}'")
