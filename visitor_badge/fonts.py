"""One-time font loading for badge measurement."""

from __future__ import annotations

import logging
from pathlib import Path

import anyio

from visitor_badge.badges.measure import FontLoadError, FontMetrics

logger = logging.getLogger(__name__)


async def load_font(path: Path) -> FontMetrics:
    """Read and parse the font at *path*.

    Any failure is a ``FontLoadError``; callers treat it as fatal since no
    badge can be measured without a font.
    """
    try:
        data = await anyio.Path(path).read_bytes()
    except OSError as e:
        raise FontLoadError(f"cannot read font file {path}: {e}") from e

    font = FontMetrics.from_bytes(data)
    logger.info("Loaded font %s (%d bytes)", path, len(data))
    return font
