"""Step runner: translates FormStep models to Playwright calls."""

from __future__ import annotations

import logging
import re
import time

from playwright.async_api import Page

from visreg.models.checks import FormStep

logger = logging.getLogger(__name__)

# Dynamic variables that can appear in step values, e.g. "jane{{$timestamp}}@example.com"
_DYNAMIC_VAR_RE = re.compile(r"\{\{\$(\w+)\}\}")


def build_dynamic_vars() -> dict[str, str]:
    """Build a snapshot of dynamic variable values (fixed for one check)."""
    return {
        "timestamp": str(int(time.time() * 1000)),
    }


def resolve_dynamic_vars(value: str, resolved: dict[str, str]) -> str:
    """Replace ``{{$variable}}`` tokens with pre-computed values."""
    def _replacer(match: re.Match) -> str:
        name = match.group(1)
        if name in resolved:
            return resolved[name]
        logger.warning("Unknown dynamic variable: {{$%s}}", name)
        return match.group(0)

    return _DYNAMIC_VAR_RE.sub(_replacer, value)


def resolve_steps(steps: list[FormStep]) -> list[FormStep]:
    """Return copies of ``steps`` with dynamic variables resolved.

    One snapshot is shared by every step so that e.g. the same timestamp
    appears in both the first name and the email of a submission.
    """
    resolved = build_dynamic_vars()
    out = []
    for step in steps:
        if step.value and _DYNAMIC_VAR_RE.search(step.value):
            step = step.model_copy(update={"value": resolve_dynamic_vars(step.value, resolved)})
        out.append(step)
    return out


async def run_step(page: Page, step: FormStep, timeout: int = 10000) -> None:
    """Execute a single form step on the page.

    Args:
        page: Playwright page instance.
        step: The step to execute.
        timeout: Selector timeout in milliseconds (default 10000).
    """
    logger.debug("Running step: %s | selector=%s | value=%s | %s",
                 step.action, step.selector, step.value, step.description)

    match step.action:
        case "fill":
            await page.fill(step.selector, step.value or "", timeout=timeout)

        case "select":
            if step.value is not None:
                await page.select_option(step.selector, value=step.value, timeout=timeout)
            elif step.option_index is not None:
                await page.select_option(step.selector, index=step.option_index, timeout=timeout)
            else:
                raise ValueError(f"select step on {step.selector} needs a value or option_index")

        case "click":
            await page.click(step.selector, timeout=timeout)

        case "check":
            await page.check(step.selector, timeout=timeout)

        case _:
            raise ValueError(f"Unknown step action: {step.action}")
