"""Similarity comparator: pixel-diff two normalized screenshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image
from pixelmatch.contrib.PIL import pixelmatch

from visreg.models.comparison import Similarity

logger = logging.getLogger(__name__)

# YIQ luma weights, the same brightness measure pixelmatch uses
_LUMA = np.array([0.29889531, 0.58662247, 0.11448223])


@dataclass
class ComparisonOutcome:
    similarity: Similarity
    mismatched_pixels: Optional[int] = None
    total_pixels: Optional[int] = None
    diff_path: Optional[Path] = None


def _luma(image: Image.Image) -> np.ndarray:
    """Per-pixel brightness after blending over white."""
    px = np.asarray(image, dtype=np.float64)
    alpha = px[..., 3:4] / 255.0
    rgb = 255.0 + (px[..., :3] - 255.0) * alpha
    return rgb @ _LUMA


def _split_by_direction(
    staging: Image.Image,
    prod: Image.Image,
    diff: Image.Image,
    diff_color: tuple[int, int, int],
    diff_color_alt: tuple[int, int, int],
) -> Image.Image:
    """Repaint mismatched pixels where staging is the brighter side with ``diff_color_alt``."""
    diff_px = np.array(diff)
    mismatched = np.all(diff_px[..., :3] == np.array(diff_color), axis=-1)
    staging_brighter = _luma(staging) > _luma(prod)
    diff_px[mismatched & staging_brighter, :3] = diff_color_alt
    return Image.fromarray(diff_px)


def compare_images(
    staging_path: Path,
    prod_path: Path,
    diff_path: Path,
    threshold: float = 0.1,
    diff_color: tuple[int, int, int] = (0, 0, 255),
    diff_color_alt: Optional[tuple[int, int, int]] = (255, 165, 0),
) -> ComparisonOutcome:
    """Compare two equally sized images and write a diff image.

    Returns a size-mismatch outcome (and writes nothing) when the dimensions
    differ; otherwise the similarity is the percentage of matching pixels.
    """
    with Image.open(staging_path) as a, Image.open(prod_path) as b:
        staging = a.convert("RGBA")
        prod = b.convert("RGBA")

    if staging.size != prod.size:
        logger.error("Size mismatch for %s (%dx%d) and %s (%dx%d)",
                     staging_path, *staging.size, prod_path, *prod.size)
        return ComparisonOutcome(similarity=Similarity.size_mismatch())

    diff = Image.new("RGBA", staging.size)
    mismatched = pixelmatch(staging, prod, diff, threshold=threshold, diff_color=diff_color)
    if mismatched and diff_color_alt is not None and tuple(diff_color_alt) != tuple(diff_color):
        diff = _split_by_direction(staging, prod, diff, diff_color, diff_color_alt)

    diff_path.parent.mkdir(parents=True, exist_ok=True)
    diff.save(diff_path, format="PNG")

    width, height = staging.size
    total = width * height
    similarity = (total - mismatched) / total * 100 if total else 100.0
    logger.debug("Compared %s vs %s: %d/%d pixels differ (%.2f%%)",
                 staging_path.name, prod_path.name, mismatched, total, 100 - similarity)

    return ComparisonOutcome(
        similarity=Similarity.numeric(similarity),
        mismatched_pixels=mismatched,
        total_pixels=total,
        diff_path=diff_path,
    )
