"""Image normalizer: fit screenshots into a fixed frame so pairs compare pixel-for-pixel."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

# Transparent white, so padding reads as white once blended for comparison
PAD_COLOR = (255, 255, 255, 0)


def fit_image(image: Image.Image, width: int, height: int) -> Image.Image:
    """Scale ``image`` to fit inside width x height, preserving aspect ratio, and pad the rest."""
    rgba = image.convert("RGBA")
    if rgba.size == (width, height):
        return rgba
    return ImageOps.pad(rgba, (width, height), method=Image.Resampling.LANCZOS, color=PAD_COLOR)


def normalize_image(path: Path, width: int = 1280, height: int = 800) -> tuple[int, int]:
    """Resize the PNG at ``path`` to the canonical frame in place. Returns the new size."""
    with Image.open(path) as img:
        original_size = img.size
        fitted = fit_image(img, width, height)
    fitted.save(path, format="PNG")
    logger.debug("Normalized %s from %dx%d to %dx%d",
                 path, original_size[0], original_size[1], width, height)
    return fitted.size
