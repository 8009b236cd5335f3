"""Color tokens, brightness and text contrast for badges."""

from __future__ import annotations

import re
from typing import NamedTuple

DEFAULT_LABEL_COLOR = "#555"
DEFAULT_MESSAGE_COLOR = "#4c1"

BRIGHTNESS_THRESHOLD = 0.69

# (text, shadow) for dark and light backgrounds
LIGHT_TEXT = ("#fff", "#010101")
DARK_TEXT = ("#333", "#ccc")

# shields-ish palette
_NAMED: dict[str, str] = {
    "brightgreen": "#4c1",
    "green": "#97ca00",
    "yellow": "#dfb317",
    "yellowgreen": "#a4a61d",
    "orange": "#fe7d37",
    "red": "#e05d44",
    "blue": "#007ec6",
    "grey": "#555",
    "gray": "#555",
    "lightgrey": "#9f9f9f",
    "lightgray": "#9f9f9f",
    # semantic aliases
    "success": "#4c1",
    "important": "#fe7d37",
    "critical": "#e05d44",
    "informational": "#007ec6",
    "inactive": "#9f9f9f",
    # basic CSS names
    "black": "#000000",
    "white": "#ffffff",
    "silver": "#c0c0c0",
    "maroon": "#800000",
    "purple": "#800080",
    "fuchsia": "#ff00ff",
    "magenta": "#ff00ff",
    "lime": "#00ff00",
    "olive": "#808000",
    "navy": "#000080",
    "teal": "#008080",
    "aqua": "#00ffff",
    "cyan": "#00ffff",
    "pink": "#ffc0cb",
    "brown": "#a52a2a",
    "gold": "#ffd700",
    "indigo": "#4b0082",
    "violet": "#ee82ee",
}

_HEX_RE = re.compile(r"^#?([0-9a-f]{3}|[0-9a-f]{6})$")


class ResolvedColor(NamedTuple):
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


def _parse_hex(token: str) -> ResolvedColor | None:
    m = _HEX_RE.match(token)
    if m is None:
        return None
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return ResolvedColor(
        int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    )


def resolve(token: str | None) -> ResolvedColor | None:
    """Map a color name or hex literal to RGB, or ``None`` if unrecognised."""
    if token is None:
        return None
    t = token.strip().lower()
    if not t:
        return None
    named = _NAMED.get(t)
    if named is not None:
        return _parse_hex(named)
    return _parse_hex(t)


def resolve_or(token: str | None, default: str) -> ResolvedColor:
    """Resolve *token*, falling back to the (known-good) *default*."""
    c = resolve(token)
    if c is None:
        c = resolve(default)
    if c is None:
        raise ValueError(f"default color {default!r} is not resolvable")
    return c


def brightness(rgb: ResolvedColor) -> float:
    """Perceived brightness in [0, 1]."""
    return (0.299 * rgb.r + 0.587 * rgb.g + 0.114 * rgb.b) / 255.0


def contrast_pair(color: ResolvedColor | str | None) -> tuple[str, str] | None:
    """Return ``(text_color, shadow_color)`` readable on *color*.

    ``None`` when *color* is a token that cannot be resolved.
    """
    rgb = color if isinstance(color, ResolvedColor) else resolve(color)
    if rgb is None:
        return None
    if brightness(rgb) <= BRIGHTNESS_THRESHOLD:
        return LIGHT_TEXT
    return DARK_TEXT
