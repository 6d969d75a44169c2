"""TrueType font lookup with system fallbacks."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

import structlog
from PIL import ImageFont

logger = structlog.get_logger()

FontWeight = Literal["regular", "bold"]

_CANDIDATES: dict[str, tuple[str, ...]] = {
    "regular": (
        "Inter-Regular.ttf",
        "DejaVuSans.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/System/Library/Fonts/Helvetica.ttc",
        "Arial.ttf",
    ),
    "bold": (
        "Inter-Bold.ttf",
        "DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/System/Library/Fonts/Helvetica.ttc",
        "Arial Bold.ttf",
    ),
}


@lru_cache(maxsize=64)
def load_font(size: int, weight: FontWeight = "regular", family: Optional[str] = None):
    """Return a scalable font of *size* pixels.

    *family* (a file name or path Pillow can resolve) is tried first, then a
    list of common sans fonts, then Pillow's bundled default font.
    """
    candidates = ((family,) if family else ()) + _CANDIDATES[weight]
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    logger.debug("fonts.fallback_default", size=size, weight=weight, family=family)
    return ImageFont.load_default(size=size)
