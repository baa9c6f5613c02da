"""Comparison orchestrator: pairs staging and prod captures per page and aggregates results."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from playwright.async_api import Browser, Page, async_playwright

from visreg.capture.screenshot import CapturedImage, capture_screenshot
from visreg.checks.runner import CheckRunner
from visreg.imaging.comparator import ComparisonOutcome, compare_images
from visreg.imaging.normalizer import normalize_image
from visreg.models.checks import CheckResult
from visreg.models.comparison import ComparisonResult, RunReport, Similarity, classify
from visreg.models.config import FrameworkConfig, ViewportConfig
from visreg.reporter.reporter import Reporter
from visreg.url_utils import screenshot_filename
from visreg.utils.browser import create_context, launch_browser

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("staging", "prod", "diff")


class Orchestrator:
    """Drives comparison runs and functional checks for one configuration."""

    def __init__(self, config: FrameworkConfig, output_dir: str | Path | None = None):
        self.config = config
        self.output_dir = Path(output_dir if output_dir is not None else config.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.reporter = Reporter(config)

        if set(config.staging.urls) != set(config.prod.urls):
            logger.warning("Staging and prod page lists differ; pages are paired by the staging list")

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def run_full_pipeline(self, device_name: str | None = None) -> dict:
        """Run visual comparison for every device, then the functional checks."""
        return asyncio.run(self._run_pipeline(device_name, compare=True, checks=True))

    def run_visual_comparison(self, device_name: str | None = None) -> dict:
        """Run only the staging vs prod visual comparison."""
        return asyncio.run(self._run_pipeline(device_name, compare=True, checks=False))

    def run_checks(self) -> dict:
        """Run only the functional checks."""
        return asyncio.run(self._run_pipeline(None, compare=False, checks=True))

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _run_pipeline(self, device_name: str | None, compare: bool, checks: bool) -> dict:
        start = time.time()
        deadline = start + self.config.max_run_seconds
        devices = self._select_devices(device_name) if compare else []
        reports: list[RunReport] = []
        check_results: list[CheckResult] = []

        async with async_playwright() as p:
            logger.debug("Launching Chromium (headless=%s)...", self.config.headless)
            browser = await launch_browser(p, headless=self.config.headless)
            try:
                for device in devices:
                    logger.info("=== Comparing %d pages on %s (%dx%d) ===",
                                len(self.config.staging.urls), device.name,
                                device.width, device.height)
                    reports.append(await self.compare_device(browser, device, deadline))
                if checks and self.config.checks.total:
                    logger.info("=== Running %d functional checks ===", self.config.checks.total)
                    check_results = await CheckRunner(self.config).run_all(browser, deadline=deadline)
            finally:
                await browser.close()

        artifacts: dict[str, dict[str, str]] = {}
        for report in reports:
            artifacts[report.device_name] = self.reporter.generate_reports(report, self.output_dir)
        if check_results:
            artifacts["checks"] = {"json": self.reporter.generate_checks_report(check_results, self.output_dir)}

        duration = time.time() - start
        logger.info("=== Run complete in %.1fs ===", duration)
        return {
            "duration": round(duration, 2),
            "reports": reports,
            "checks": check_results,
            "artifacts": artifacts,
        }

    def _select_devices(self, device_name: str | None) -> list[ViewportConfig]:
        if device_name:
            return [self.config.get_device(device_name)]
        return list(self.config.devices)

    async def compare_device(
        self, browser: Browser, device: ViewportConfig, deadline: float | None = None,
    ) -> RunReport:
        context = await create_context(browser, viewport=device, user_agent=self.config.user_agent)
        try:
            page = await context.new_page()
            return await self.compare_pages(page, device, deadline)
        finally:
            await context.close()

    async def compare_pages(
        self, page: Page, device: ViewportConfig, deadline: float | None = None,
    ) -> RunReport:
        """Compare every configured page on one device, in configuration order.

        Each page yields exactly one ComparisonResult; failures are recorded as
        error results and never stop the run. Pages reached after `deadline`
        (epoch seconds, shared by the whole run) are recorded as time-limit errors.
        """
        started_at = time.strftime("%Y-%m-%dT%H:%M:%S")
        start_time = time.time()
        if deadline is None:
            deadline = start_time + self.config.max_run_seconds
        for env in ENVIRONMENTS:
            self._device_dir(device.name, env).mkdir(parents=True, exist_ok=True)

        page_paths = self.config.staging.urls
        results: list[ComparisonResult] = []
        for index, page_path in enumerate(page_paths):
            if time.time() >= deadline:
                logger.warning("Time limit reached, skipping %s", page_path)
                results.append(self._error_result(page_path, "Run time limit reached"))
                continue

            logger.info("Comparing page [%d/%d]: %s", index + 1, len(page_paths), page_path)
            result = await self._compare_page(page, device, page_path)
            logger.info("[%s] %s: %s", result.status.upper(), page_path, result.similarity.label())
            results.append(result)

        return RunReport(
            device_name=device.name,
            viewport_width=device.width,
            viewport_height=device.height,
            started_at=started_at,
            completed_at=time.strftime("%Y-%m-%dT%H:%M:%S"),
            staging_url=self.config.staging.base_url,
            prod_url=self.config.prod.base_url,
            pass_threshold=self.config.pass_threshold,
            total_pages=len(results),
            passed=sum(1 for r in results if r.status == "pass"),
            failed=sum(1 for r in results if r.status == "fail"),
            errors=sum(1 for r in results if r.status == "error"),
            duration_seconds=round(time.time() - start_time, 2),
            results=results,
        )

    async def _compare_page(self, page: Page, device: ViewportConfig, page_path: str) -> ComparisonResult:
        """Capture both environments, normalize, compare, and record one page."""
        page_start = time.time()
        paths = self.artifact_paths(device.name, page_path)
        staging_url = self.config.staging.page_url(page_path)
        prod_url = self.config.prod.page_url(page_path)
        captures: dict[str, CapturedImage] = {}

        try:
            for path in paths.values():
                path.unlink(missing_ok=True)
            for env, url in (("staging", staging_url), ("prod", prod_url)):
                captures[env] = await capture_screenshot(
                    page, url, paths[env],
                    navigation_timeout=self.config.navigation_timeout_seconds,
                    force_capture_after=self.config.force_capture_seconds,
                    environment=env,
                    page_path=page_path,
                )
            normalize_image(paths["staging"], self.config.canonical_width, self.config.canonical_height)
            normalize_image(paths["prod"], self.config.canonical_width, self.config.canonical_height)
            outcome = compare_images(
                paths["staging"], paths["prod"], paths["diff"],
                threshold=self.config.pixel_threshold,
                diff_color=self.config.diff_color,
                diff_color_alt=self.config.diff_color_alt,
            )
        except Exception as e:
            logger.error("Comparison failed for %s: %s", page_path, e)
            outcome = ComparisonOutcome(similarity=Similarity.error(str(e)))

        return ComparisonResult(
            page_path=page_path,
            staging_url=staging_url,
            prod_url=prod_url,
            similarity=outcome.similarity,
            status=classify(outcome.similarity, self.config.pass_threshold),
            mismatched_pixels=outcome.mismatched_pixels,
            total_pixels=outcome.total_pixels,
            staging_image=self._relative_if_exists(paths["staging"]),
            prod_image=self._relative_if_exists(paths["prod"]),
            diff_image=self._relative_if_exists(paths["diff"]),
            staging_capture=captures["staging"].outcome if "staging" in captures else None,
            prod_capture=captures["prod"].outcome if "prod" in captures else None,
            duration_seconds=round(time.time() - page_start, 2),
        )

    def _error_result(self, page_path: str, message: str) -> ComparisonResult:
        similarity = Similarity.error(message)
        return ComparisonResult(
            page_path=page_path,
            staging_url=self.config.staging.page_url(page_path),
            prod_url=self.config.prod.page_url(page_path),
            similarity=similarity,
            status=classify(similarity, self.config.pass_threshold),
        )

    # ------------------------------------------------------------------
    # Filesystem layout
    # ------------------------------------------------------------------

    def _device_dir(self, device_name: str, env: str) -> Path:
        return self.output_dir / "screenshots" / device_name / env

    def artifact_paths(self, device_name: str, page_path: str) -> dict[str, Path]:
        """Staging, prod and diff PNG paths for one page on one device."""
        filename = screenshot_filename(page_path)
        return {env: self._device_dir(device_name, env) / filename for env in ENVIRONMENTS}

    def _relative_if_exists(self, path: Path) -> str | None:
        if not path.is_file():
            return None
        return path.relative_to(self.output_dir).as_posix()
