"""Text measurement against real font metrics (fontTools).

Scales follow pixel-height semantics: measuring at ``scale=11`` maps the
font's ``ascent - descent`` to 11 pixels.  Advances and kerning are summed in
font units and converted once, so a given font/text/scale always produces the
same width.
"""

from __future__ import annotations

import io
import math
import unicodedata
from typing import Any

from fontTools.ttLib import TTFont

WIDTH_FONT_SCALE = 11.0
WIDTH_FUDGE_FACTOR = 1.0345

NOTDEF = ".notdef"


class FontLoadError(Exception):
    """Raised when font data cannot be parsed into usable metrics."""


def _value_x_advance(value: Any) -> int:
    if value is None:
        return 0
    return int(getattr(value, "XAdvance", 0) or 0)


class FontMetrics:
    """Read-only glyph metrics for one font.

    Build once at startup and share between renders; nothing here mutates
    after ``__init__``.
    """

    def __init__(self, ttfont: TTFont) -> None:
        try:
            hhea = ttfont["hhea"]
            self._ascent = int(hhea.ascent)
            self._descent = int(hhea.descent)
            self._line_gap = int(hhea.lineGap)
            self._advances: dict[str, int] = {
                name: int(metric[0]) for name, metric in ttfont["hmtx"].metrics.items()
            }
            self._cmap: dict[int, str] = dict(ttfont.getBestCmap() or {})
            self._pairs, self._class_pairs = self._load_kerning(ttfont)
        except FontLoadError:
            raise
        except Exception as e:
            raise FontLoadError(f"unusable font data: {e}") from e

        self.units_height = self._ascent - self._descent
        if self.units_height <= 0:
            raise FontLoadError("font has a non-positive ascent - descent")

    @classmethod
    def from_bytes(cls, data: bytes) -> FontMetrics:
        try:
            ttfont = TTFont(io.BytesIO(data))
        except Exception as e:
            raise FontLoadError(f"cannot parse font: {e}") from e
        return cls(ttfont)

    # ------------------------------------------------------------------ kerning

    @staticmethod
    def _load_kerning(
        ttfont: TTFont,
    ) -> tuple[dict[tuple[str, str], int], list[Any]]:
        pairs: dict[tuple[str, str], int] = {}
        class_pairs: list[Any] = []

        # legacy 'kern' wins over GPOS
        if "kern" in ttfont:
            for sub in getattr(ttfont["kern"], "kernTables", []):
                table = getattr(sub, "kernTable", None)
                if getattr(sub, "format", 0) != 0 or not table:
                    continue
                for pair, value in table.items():
                    pairs.setdefault(pair, int(value))

        if "GPOS" not in ttfont:
            return pairs, class_pairs

        gpos = ttfont["GPOS"].table
        if gpos.LookupList is None or gpos.FeatureList is None:
            return pairs, class_pairs

        indices: set[int] = set()
        for rec in gpos.FeatureList.FeatureRecord:
            if rec.FeatureTag == "kern":
                indices.update(rec.Feature.LookupListIndex)

        for i in sorted(indices):
            lookup = gpos.LookupList.Lookup[i]
            for st in lookup.SubTable:
                lookup_type = lookup.LookupType
                if lookup_type == 9:
                    lookup_type = st.ExtensionLookupType
                    st = st.ExtSubTable
                if lookup_type != 2:
                    continue
                if st.Format == 1:
                    for first, pair_set in zip(st.Coverage.glyphs, st.PairSet):
                        for rec in pair_set.PairValueRecord:
                            pairs.setdefault(
                                (first, rec.SecondGlyph), _value_x_advance(rec.Value1)
                            )
                elif st.Format == 2:
                    class_pairs.append(st)

        return pairs, class_pairs

    def kern_unscaled(self, left: str, right: str) -> int:
        value = self._pairs.get((left, right))
        if value is not None:
            return value
        for st in self._class_pairs:
            if left not in st.Coverage.glyphs:
                continue
            c1 = st.ClassDef1.classDefs.get(left, 0) if st.ClassDef1 else 0
            c2 = st.ClassDef2.classDefs.get(right, 0) if st.ClassDef2 else 0
            return _value_x_advance(st.Class1Record[c1].Class2Record[c2].Value1)
        return 0

    # ------------------------------------------------------------------ metrics

    def glyph_for(self, ch: str) -> str:
        return self._cmap.get(ord(ch), NOTDEF)

    def h_advance_unscaled(self, glyph: str) -> int:
        return self._advances.get(glyph, 0)

    def scaled(self, units: float, scale: float) -> float:
        return units * scale / self.units_height

    def ascent(self, scale: float) -> float:
        return self.scaled(self._ascent, scale)

    def descent(self, scale: float) -> float:
        return self.scaled(self._descent, scale)

    def line_gap(self, scale: float) -> float:
        return self.scaled(self._line_gap, scale)

    def h_advance(self, glyph: str, scale: float) -> float:
        return self.scaled(self.h_advance_unscaled(glyph), scale)

    def kern(self, left: str, right: str, scale: float) -> float:
        return self.scaled(self.kern_unscaled(left, right), scale)


def _is_control(ch: str) -> bool:
    return unicodedata.category(ch) == "Cc"


def strip_control(text: str) -> str:
    """Drop control characters; they have no advance and are not valid XML."""
    return "".join(ch for ch in text if not _is_control(ch))


def measure(
    font: FontMetrics, text: str, scale: float = WIDTH_FONT_SCALE
) -> tuple[int, float]:
    """Return ``(width, height)`` of *text* as a single line.

    Control characters are skipped.  An empty line has width 0.
    """
    caret = 0
    first_x: int | None = None
    last: tuple[str, int] | None = None

    for ch in text:
        if _is_control(ch):
            continue
        glyph = font.glyph_for(ch)
        if last is not None:
            caret += font.kern_unscaled(last[0], glyph)
        if first_x is None:
            first_x = caret
        last = (glyph, caret)
        caret += font.h_advance_unscaled(glyph)

    height = font.ascent(scale) - font.descent(scale) + font.line_gap(scale)
    if last is None or first_x is None:
        return 0, height

    glyph, x = last
    extent = x + font.h_advance_unscaled(glyph) - first_x
    return math.ceil(font.scaled(extent, scale)), height


def round_up_to_odd(value: float) -> int:
    n = int(value)
    return n + 1 if n % 2 == 0 else n


def preferred_width(
    font: FontMetrics, text: str, scale: float = WIDTH_FONT_SCALE
) -> float:
    """Width a badge field reserves for *text*.

    The measured width is bumped to the next odd integer and stretched by
    ``WIDTH_FUDGE_FACTOR`` to leave room for the 10x text scaling.
    """
    width, _ = measure(font, text, scale)
    return round_up_to_odd(width) * WIDTH_FUDGE_FACTOR
