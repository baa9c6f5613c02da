"""Navigation menu check: menu visible, submenus open on hover, every link has an href."""

from __future__ import annotations

import logging
import time

from playwright.async_api import Page

from visreg.models.checks import CheckDetail, CheckResult, MenuCheckConfig

logger = logging.getLogger(__name__)


async def check_menu_links(page: Page, check: MenuCheckConfig, page_url: str) -> CheckResult:
    """Validate one mega-menu. Links without an href are warnings, not failures."""
    start = time.time()
    details: list[CheckDetail] = []

    def _result(result: str, message: str, warnings: int = 0) -> CheckResult:
        return CheckResult(
            name=check.name, kind="menu", url=page_url, result=result, message=message,
            warnings=warnings, duration_seconds=round(time.time() - start, 2), details=details,
        )

    try:
        await page.goto(page_url, wait_until="domcontentloaded")

        menu = page.locator(check.menu_selector).first
        if not await menu.is_visible():
            return _result("fail", f"The '{check.name}' menu is not visible.")
        await menu.hover()

        submenu_count = await page.locator(check.submenu_selector).count()
        if submenu_count == 0:
            return _result("fail", f"No submenus found for '{check.name}' menu.")

        links = page.locator(check.links_selector)
        link_count = await links.count()
        if link_count == 0:
            return _result("fail", f"No links found in the '{check.name}' menu.")
        logger.info("Found %d submenus and %d links in the '%s' menu.",
                    submenu_count, link_count, check.name)

        invalid = 0
        for i in range(link_count):
            link = links.nth(i)
            text = ((await link.text_content()) or "").strip()
            href = await link.get_attribute("href")
            if not href or not href.strip():
                invalid += 1
                logger.warning("Link '%s' in '%s' menu does not have a valid href attribute.",
                               text, check.name)
                details.append(CheckDetail(item=text, status="warn", message="Missing href"))
            else:
                details.append(CheckDetail(item=text, message=href))
    except Exception as e:
        logger.error("Menu check '%s' failed: %s", check.name, e)
        return _result("error", str(e))

    if invalid:
        return _result("pass", f"{link_count} links checked, {invalid} without a valid href", invalid)
    return _result("pass", f"All {link_count} links in the '{check.name}' menu are valid.")
