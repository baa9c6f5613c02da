"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from PIL import Image
from playwright.async_api import Browser, BrowserContext, Page

from visreg.models.checks import (
    BrokenImageCheckConfig,
    ChecksConfig,
    FormCheckConfig,
    FormStep,
    MenuCheckConfig,
)
from visreg.models.comparison import ComparisonResult, RunReport, Similarity
from visreg.models.config import EnvironmentConfig, FrameworkConfig, ViewportConfig


PAGE_PATHS = ["/", "/apply/", "/about/"]


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def viewport_config() -> ViewportConfig:
    """Create a test device profile."""
    return ViewportConfig(name="Desktop", width=1280, height=800)


@pytest.fixture
def staging_env() -> EnvironmentConfig:
    return EnvironmentConfig(base_url="https://staging.example.com", urls=list(PAGE_PATHS))


@pytest.fixture
def prod_env() -> EnvironmentConfig:
    return EnvironmentConfig(base_url="https://www.example.com", urls=list(PAGE_PATHS))


@pytest.fixture
def framework_config(
    staging_env: EnvironmentConfig, prod_env: EnvironmentConfig,
    viewport_config: ViewportConfig, tmp_path: Path,
) -> FrameworkConfig:
    """Create a test configuration with a small canonical frame to keep diffs fast."""
    return FrameworkConfig(
        staging=staging_env,
        prod=prod_env,
        devices=[viewport_config],
        canonical_width=64,
        canonical_height=40,
        navigation_timeout_seconds=1,
        force_capture_seconds=0.2,
        output_dir=str(tmp_path / "out"),
    )


@pytest.fixture
def temp_config_file(framework_config: FrameworkConfig, tmp_path: Path) -> Path:
    """Create a temporary config file."""
    config_file = tmp_path / "visreg-config.json"
    framework_config.save(config_file)
    return config_file


@pytest.fixture
def checks_config() -> ChecksConfig:
    return ChecksConfig(
        broken_images=[BrokenImageCheckConfig(name="Home images", page_url="/")],
        forms=[FormCheckConfig(
            name="Request info",
            start_path="/apply/",
            steps=[
                FormStep(action="select", selector="#input_2_1", option_index=1),
                FormStep(action="fill", selector="#input_2_2", value="John{{$timestamp}}"),
                FormStep(action="fill", selector="#input_2_6",
                         value="johndoe{{$timestamp}}@example.com"),
            ],
            submit_selector="#gform_submit_button_2",
            confirmation_selector="h1.header2",
            expected_confirmation="Thanks for your submission!",
        )],
        menus=[MenuCheckConfig(
            name="Online Programs",
            page_url="https://www.example.com/",
            menu_selector="#mega-menu-item-7409 > a.mega-menu-link",
            submenu_selector="#mega-menu-item-7409 ul.mega-sub-menu",
            links_selector="#mega-menu-item-7409 ul.mega-sub-menu a.mega-menu-link",
        )],
    )


# ============================================================================
# Result Fixtures
# ============================================================================


def make_result(page_path="/apply/", similarity=None, status="pass", **kwargs) -> ComparisonResult:
    return ComparisonResult(
        page_path=page_path,
        staging_url=f"https://staging.example.com{page_path}",
        prod_url=f"https://www.example.com{page_path}",
        similarity=similarity or Similarity.numeric(99.5),
        status=status,
        **kwargs,
    )


def make_report(results=None, device_name="Desktop") -> RunReport:
    rs = results if results is not None else [make_result()]
    return RunReport(
        device_name=device_name,
        viewport_width=1280,
        viewport_height=800,
        started_at="2025-01-01T00:00:00",
        completed_at="2025-01-01T00:05:00",
        staging_url="https://staging.example.com",
        prod_url="https://www.example.com",
        total_pages=len(rs),
        passed=sum(1 for r in rs if r.status == "pass"),
        failed=sum(1 for r in rs if r.status == "fail"),
        errors=sum(1 for r in rs if r.status == "error"),
        results=rs,
    )


@pytest.fixture
def result_factory():
    """Fixture exposing the ComparisonResult builder."""
    return make_result


@pytest.fixture
def report_factory():
    """Fixture exposing the RunReport builder."""
    return make_report


@pytest.fixture
def run_report() -> RunReport:
    return make_report([
        make_result("/", Similarity.numeric(100.0), "pass"),
        make_result("/apply/", Similarity.numeric(80.25), "fail"),
        make_result("/about/", Similarity.error("net::ERR_NAME_NOT_RESOLVED"), "error"),
    ])


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_page() -> AsyncMock:
    """Create a mock Playwright page."""
    page = AsyncMock(spec=Page)
    page.url = "https://staging.example.com"
    page.screenshot = AsyncMock()
    page.goto = AsyncMock()
    page.click = AsyncMock()
    page.fill = AsyncMock()
    page.wait_for_selector = AsyncMock()
    return page


@pytest.fixture
def mock_context(mock_page) -> AsyncMock:
    """Create a mock Playwright browser context."""
    context = AsyncMock(spec=BrowserContext)
    context.new_page = AsyncMock(return_value=mock_page)
    return context


@pytest.fixture
def mock_browser(mock_context) -> AsyncMock:
    """Create a mock Playwright browser."""
    browser = AsyncMock(spec=Browser)
    browser.new_context = AsyncMock(return_value=mock_context)
    return browser


# ============================================================================
# Image Helpers
# ============================================================================


def write_png(path: Path, size=(64, 40), color=(255, 255, 255, 255)) -> Path:
    """Write a solid-color PNG."""
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = "RGBA" if len(color) == 4 else "RGB"
    Image.new(mode, size, color).save(path, format="PNG")
    return path


@pytest.fixture
def png_factory(tmp_path: Path):
    """Fixture that writes solid-color PNGs under tmp_path by name."""
    def _make(name: str, size=(64, 40), color=(255, 255, 255, 255)) -> Path:
        return write_png(tmp_path / name, size=size, color=color)
    return _make
