"""Tests for the functional check runner: ordering, URL resolution, context isolation."""

import time
from unittest.mock import AsyncMock, patch

import pytest

from visreg.checks.runner import CheckRunner
from visreg.models.checks import CheckResult

RUNNER = "visreg.checks.runner"


def _result(name, kind, result="pass") -> CheckResult:
    return CheckResult(name=name, kind=kind, result=result)


class TestCheckRunner:

    @pytest.mark.asyncio
    async def test_runs_every_check_in_kind_order(self, framework_config, checks_config, mock_browser):
        framework_config.checks = checks_config
        runner = CheckRunner(framework_config)

        with patch(f"{RUNNER}.check_broken_images", new_callable=AsyncMock,
                   return_value=_result("Home images", "broken_images")) as images, \
             patch(f"{RUNNER}.check_form_submission", new_callable=AsyncMock,
                   return_value=_result("Request info", "form", "fail")) as form, \
             patch(f"{RUNNER}.check_menu_links", new_callable=AsyncMock,
                   return_value=_result("Online Programs", "menu")) as menu:
            results = await runner.run_all(mock_browser)

        assert [r.kind for r in results] == ["broken_images", "form", "menu"]
        assert results[1].result == "fail"
        images.assert_awaited_once()
        form.assert_awaited_once()
        menu.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_relative_urls_resolved_against_staging(self, framework_config, checks_config, mock_browser):
        framework_config.checks = checks_config
        runner = CheckRunner(framework_config)

        with patch(f"{RUNNER}.check_broken_images", new_callable=AsyncMock,
                   return_value=_result("a", "broken_images")) as images, \
             patch(f"{RUNNER}.check_form_submission", new_callable=AsyncMock,
                   return_value=_result("b", "form")) as form, \
             patch(f"{RUNNER}.check_menu_links", new_callable=AsyncMock,
                   return_value=_result("c", "menu")) as menu:
            await runner.run_all(mock_browser)

        assert images.await_args.args[2] == "https://staging.example.com/"
        assert form.await_args.args[2] == "https://staging.example.com"
        # Absolute URLs are used as-is
        assert menu.await_args.args[2] == "https://www.example.com/"

    @pytest.mark.asyncio
    async def test_each_check_gets_own_context(self, framework_config, checks_config, mock_browser,
                                               mock_context):
        framework_config.checks = checks_config
        runner = CheckRunner(framework_config)

        with patch(f"{RUNNER}.check_broken_images", new_callable=AsyncMock,
                   return_value=_result("a", "broken_images")), \
             patch(f"{RUNNER}.check_form_submission", new_callable=AsyncMock,
                   return_value=_result("b", "form")), \
             patch(f"{RUNNER}.check_menu_links", new_callable=AsyncMock,
                   return_value=_result("c", "menu")):
            await runner.run_all(mock_browser)

        assert mock_browser.new_context.await_count == 3
        assert mock_context.close.await_count == 3
        assert "viewport" not in mock_browser.new_context.call_args.kwargs

    @pytest.mark.asyncio
    async def test_crashed_check_recorded_as_error(self, framework_config, checks_config, mock_browser,
                                                   mock_context):
        framework_config.checks = checks_config
        runner = CheckRunner(framework_config)

        with patch(f"{RUNNER}.check_broken_images", new_callable=AsyncMock,
                   return_value=_result("a", "broken_images")), \
             patch(f"{RUNNER}.check_form_submission", new_callable=AsyncMock,
                   side_effect=RuntimeError("page crashed")), \
             patch(f"{RUNNER}.check_menu_links", new_callable=AsyncMock,
                   return_value=_result("c", "menu")):
            results = await runner.run_all(mock_browser)

        assert [r.result for r in results] == ["pass", "error", "pass"]
        crashed = results[1]
        assert crashed.name == "Request info"
        assert crashed.kind == "form"
        assert crashed.url == "https://staging.example.com/apply/"
        assert "page crashed" in crashed.message
        # The crashed check still closed its context
        assert mock_context.close.await_count == 3

    @pytest.mark.asyncio
    async def test_no_checks(self, framework_config, mock_browser):
        results = await CheckRunner(framework_config).run_all(mock_browser)
        assert results == []
        mock_browser.new_context.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_checks_past_deadline_are_errors(self, framework_config, checks_config, mock_browser):
        framework_config.checks = checks_config
        runner = CheckRunner(framework_config)

        with patch(f"{RUNNER}.check_broken_images", new_callable=AsyncMock) as images, \
             patch(f"{RUNNER}.check_form_submission", new_callable=AsyncMock) as form, \
             patch(f"{RUNNER}.check_menu_links", new_callable=AsyncMock) as menu:
            results = await runner.run_all(mock_browser, deadline=time.time() - 1)

        assert [r.name for r in results] == ["Home images", "Request info", "Online Programs"]
        assert all(r.result == "error" for r in results)
        assert all(r.message == "Run time limit reached" for r in results)
        mock_browser.new_context.assert_not_awaited()
        images.assert_not_awaited()
        form.assert_not_awaited()
        menu.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_future_deadline_runs_checks(self, framework_config, checks_config, mock_browser):
        framework_config.checks = checks_config
        runner = CheckRunner(framework_config)

        with patch(f"{RUNNER}.check_broken_images", new_callable=AsyncMock,
                   return_value=_result("Home images", "broken_images")), \
             patch(f"{RUNNER}.check_form_submission", new_callable=AsyncMock,
                   return_value=_result("Request info", "form")), \
             patch(f"{RUNNER}.check_menu_links", new_callable=AsyncMock,
                   return_value=_result("Online Programs", "menu")):
            results = await runner.run_all(mock_browser, deadline=time.time() + 3600)

        assert [r.result for r in results] == ["pass", "pass", "pass"]
