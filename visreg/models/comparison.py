"""Comparison result data structures produced by the orchestrator."""

from __future__ import annotations

import math
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Similarity(BaseModel):
    """Tagged outcome of comparing one page: a score, a size mismatch, or an error."""

    kind: Literal["numeric", "size_mismatch", "error"]
    value: Optional[float] = None
    message: Optional[str] = None

    @classmethod
    def numeric(cls, value: float) -> "Similarity":
        return cls(kind="numeric", value=value)

    @classmethod
    def size_mismatch(cls) -> "Similarity":
        return cls(kind="size_mismatch", message="Size mismatch")

    @classmethod
    def error(cls, message: str) -> "Similarity":
        return cls(kind="error", message=message)

    @property
    def is_numeric(self) -> bool:
        return self.kind == "numeric"

    def label(self) -> str:
        if self.kind == "numeric":
            # Truncate so a failing 94.996 never displays as 95.00
            shown = math.floor(self.value * 100 + 1e-9) / 100
            return f"{shown:.2f}%"
        if self.kind == "size_mismatch":
            return "Size mismatch"
        return "Error"


def classify(similarity: Similarity, pass_threshold: float = 95.0) -> str:
    """Map a similarity outcome to pass / fail / error. The threshold is inclusive."""
    if not similarity.is_numeric:
        return "error"
    return "pass" if similarity.value >= pass_threshold else "fail"


class ComparisonResult(BaseModel):
    page_path: str
    staging_url: str = ""
    prod_url: str = ""
    similarity: Similarity
    status: str  # pass, fail, error
    mismatched_pixels: Optional[int] = None
    total_pixels: Optional[int] = None
    # Paths relative to the output root; None when the file was not produced
    staging_image: Optional[str] = None
    prod_image: Optional[str] = None
    diff_image: Optional[str] = None
    staging_capture: Optional[str] = None  # settled, timeout, failed
    prod_capture: Optional[str] = None
    duration_seconds: float = 0.0

    model_config = {"frozen": True}


class RunReport(BaseModel):
    device_name: str
    viewport_width: int
    viewport_height: int
    started_at: str
    completed_at: str
    staging_url: str
    prod_url: str
    pass_threshold: float = 95.0
    total_pages: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    duration_seconds: float = 0.0
    results: list[ComparisonResult] = Field(default_factory=list)
