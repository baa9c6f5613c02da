"""Functional check definitions and their result structures."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class FormStep(BaseModel):
    action: str  # fill, select, click, check
    selector: str
    value: Optional[str] = None
    option_index: Optional[int] = None  # select by position when no value is given
    description: str = ""


class BrokenImageCheckConfig(BaseModel):
    name: str = "Broken images"
    page_url: str = "/"


class FormCheckConfig(BaseModel):
    name: str
    start_path: str = "/"
    entry_click_selector: Optional[str] = None
    expected_url: Optional[str] = None  # URL reached after the entry click
    block_resources: bool = False
    steps: list[FormStep] = Field(default_factory=list)
    submit_selector: str
    confirmation_url_pattern: Optional[str] = None  # regex awaited after submit
    confirmation_selector: str
    expected_confirmation: str
    navigation_timeout_seconds: float = 10.0
    confirmation_timeout_seconds: float = 30.0


class MenuCheckConfig(BaseModel):
    name: str
    page_url: str = "/"
    menu_selector: str
    submenu_selector: str
    links_selector: str


class ChecksConfig(BaseModel):
    broken_images: list[BrokenImageCheckConfig] = Field(default_factory=list)
    forms: list[FormCheckConfig] = Field(default_factory=list)
    menus: list[MenuCheckConfig] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.broken_images) + len(self.forms) + len(self.menus)


class CheckDetail(BaseModel):
    """Outcome of one item inspected by a check (an image, a form step, a link)."""
    item: str
    status: str = "pass"  # pass, fail, warn
    message: str = ""


class CheckResult(BaseModel):
    name: str
    kind: str  # broken_images, form, menu
    url: str = ""
    result: str  # pass, fail, error
    message: str = ""
    warnings: int = 0
    duration_seconds: float = 0.0
    details: list[CheckDetail] = Field(default_factory=list)
