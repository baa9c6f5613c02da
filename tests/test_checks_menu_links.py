"""Tests for the navigation menu check."""

from unittest.mock import AsyncMock, Mock

import pytest

from visreg.checks.menu_links import check_menu_links
from visreg.models.checks import MenuCheckConfig

PAGE_URL = "https://www.example.com/"


def _make_check() -> MenuCheckConfig:
    return MenuCheckConfig(
        name="Online Programs",
        menu_selector="#menu > a",
        submenu_selector="#menu ul.sub",
        links_selector="#menu ul.sub a",
    )


def _make_link(text, href):
    return Mock(text_content=AsyncMock(return_value=text), get_attribute=AsyncMock(return_value=href))


def _make_page(visible=True, submenus=1, links=()):
    """Mock page exposing one menu; ``links`` is a list of (text, href)."""
    menu = Mock()
    menu.first = Mock(is_visible=AsyncMock(return_value=visible), hover=AsyncMock())

    link_mocks = [_make_link(t, h) for t, h in links]
    links_locator = Mock(count=AsyncMock(return_value=len(link_mocks)))
    links_locator.nth = Mock(side_effect=lambda i: link_mocks[i])

    locators = {
        "#menu > a": menu,
        "#menu ul.sub": Mock(count=AsyncMock(return_value=submenus)),
        "#menu ul.sub a": links_locator,
    }
    page = AsyncMock()
    page.locator = Mock(side_effect=lambda sel: locators[sel])
    return page, menu


class TestCheckMenuLinks:

    @pytest.mark.asyncio
    async def test_all_links_valid(self):
        page, menu = _make_page(links=[("MBA", "/mba/"), ("MSN", "/msn/")])

        result = await check_menu_links(page, _make_check(), PAGE_URL)

        assert result.result == "pass"
        assert result.kind == "menu"
        assert result.warnings == 0
        assert [d.item for d in result.details] == ["MBA", "MSN"]
        menu.first.hover.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_href_is_warning_not_failure(self):
        page, _ = _make_page(links=[("MBA", "/mba/"), ("Coming soon", None), ("Blank", "  ")])

        result = await check_menu_links(page, _make_check(), PAGE_URL)

        assert result.result == "pass"
        assert result.warnings == 2
        assert [d.status for d in result.details] == ["pass", "warn", "warn"]

    @pytest.mark.asyncio
    async def test_hidden_menu_fails(self):
        page, menu = _make_page(visible=False)

        result = await check_menu_links(page, _make_check(), PAGE_URL)

        assert result.result == "fail"
        assert "not visible" in result.message
        menu.first.hover.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_submenu_fails(self):
        page, _ = _make_page(submenus=0, links=[("MBA", "/mba/")])
        result = await check_menu_links(page, _make_check(), PAGE_URL)
        assert result.result == "fail"
        assert "No submenus" in result.message

    @pytest.mark.asyncio
    async def test_no_links_fails(self):
        page, _ = _make_page(links=[])
        result = await check_menu_links(page, _make_check(), PAGE_URL)
        assert result.result == "fail"
        assert "No links" in result.message

    @pytest.mark.asyncio
    async def test_exception_is_error(self):
        page, _ = _make_page()
        page.goto.side_effect = Exception("net::ERR_TIMED_OUT")

        result = await check_menu_links(page, _make_check(), PAGE_URL)

        assert result.result == "error"
        assert "ERR_TIMED_OUT" in result.message
