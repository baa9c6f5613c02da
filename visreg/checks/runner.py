"""Functional check runner: each check gets its own isolated browser context."""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from playwright.async_api import Browser, Page

from visreg.models.checks import CheckResult
from visreg.models.config import FrameworkConfig
from visreg.url_utils import resolve_url
from visreg.utils.browser import create_context

from .broken_images import check_broken_images
from .form_submission import check_form_submission
from .menu_links import check_menu_links

logger = logging.getLogger(__name__)

CheckJob = Callable[[Page], Awaitable[CheckResult]]


class CheckRunner:
    """Runs the configured functional checks against the staging environment."""

    def __init__(self, config: FrameworkConfig):
        self.config = config
        self.base_url = config.staging.base_url

    def _build_jobs(self) -> list[tuple[str, str, str, CheckJob]]:
        """(name, kind, url, job) for every configured check: images, then forms, then menus."""
        checks = self.config.checks
        jobs: list[tuple[str, str, str, CheckJob]] = []
        for c in checks.broken_images:
            url = resolve_url(c.page_url, self.base_url)
            jobs.append((c.name, "broken_images", url,
                         lambda p, c=c, url=url: check_broken_images(p, c, url)))
        for c in checks.forms:
            url = resolve_url(c.start_path, self.base_url)
            jobs.append((c.name, "form", url,
                         lambda p, c=c: check_form_submission(p, c, self.base_url)))
        for c in checks.menus:
            url = resolve_url(c.page_url, self.base_url)
            jobs.append((c.name, "menu", url,
                         lambda p, c=c, url=url: check_menu_links(p, c, url)))
        return jobs

    async def run_all(self, browser: Browser, deadline: float | None = None) -> list[CheckResult]:
        """Run every check in order. Checks reached after `deadline` (epoch seconds) are not started."""
        jobs = self._build_jobs()
        results: list[CheckResult] = []

        for index, (name, kind, url, job) in enumerate(jobs, 1):
            if deadline is not None and time.time() >= deadline:
                logger.warning("Time limit reached, skipping check %s", name)
                results.append(CheckResult(name=name, kind=kind, url=url, result="error",
                                           message="Run time limit reached"))
                continue

            logger.info("Running check [%d/%d]: %s", index, len(jobs), name)
            start = time.time()
            try:
                result = await self._run_isolated(browser, job)
            except Exception as e:
                logger.error("Check '%s' crashed: %s", name, e)
                result = CheckResult(
                    name=name, kind=kind, url=url, result="error", message=str(e),
                    duration_seconds=round(time.time() - start, 2),
                )
            logger.info("[%s] %s: %s", result.result.upper(), name, result.message)
            results.append(result)
        return results

    async def _run_isolated(self, browser: Browser, job: CheckJob) -> CheckResult:
        context = await create_context(browser, user_agent=self.config.user_agent)
        try:
            page = await context.new_page()
            return await job(page)
        finally:
            await context.close()
