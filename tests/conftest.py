"""Shared fixtures for the visitor-badge test suite."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
import pytest_asyncio
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from httpx import ASGITransport, AsyncClient

from visitor_badge import db
from visitor_badge.badges import FontMetrics
from visitor_badge.config import ConfigManager

# ---------------------------------------------------------------------------
# Deterministic test font
# ---------------------------------------------------------------------------

# ascent - descent = 1000 units, so at scale 11 one unit is 0.011 px.
UNITS_PER_EM = 1000
ASCENT = 800
DESCENT = -200
ADVANCE = 600  # every printable ASCII character
NOTDEF_ADVANCE = 500


def _box_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((450, 700))
    pen.lineTo((450, 0))
    pen.closePath()
    return pen.glyph()


def _glyph_name(cp: int) -> str:
    return "space" if cp == 32 else f"uni{cp:04X}"


def build_font_builder(
    kerning: dict[tuple[str, str], int] | None = None,
) -> FontBuilder:
    """A TrueType font mapping printable ASCII to fixed-advance box glyphs."""
    codepoints = list(range(32, 127))
    glyph_order = [".notdef"] + [_glyph_name(cp) for cp in codepoints]
    glyph = _box_glyph()

    fb = FontBuilder(UNITS_PER_EM, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap({cp: _glyph_name(cp) for cp in codepoints})
    fb.setupGlyf({name: glyph for name in glyph_order})
    metrics = {name: (ADVANCE, 50) for name in glyph_order}
    metrics[".notdef"] = (NOTDEF_ADVANCE, 50)
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=ASCENT, descent=DESCENT)
    fb.setupNameTable({"familyName": "BadgeTest", "styleName": "Regular"})
    fb.setupOS2(sTypoAscender=ASCENT, usWinAscent=ASCENT, usWinDescent=-DESCENT)
    fb.setupPost()

    if kerning:
        from fontTools.ttLib import newTable
        from fontTools.ttLib.tables._k_e_r_n import KernTable_format_0

        kern = newTable("kern")
        kern.version = 0
        sub = KernTable_format_0()
        sub.coverage = 1
        sub.kernTable = dict(kerning)
        kern.kernTables = [sub]
        fb.font["kern"] = kern

    return fb


def build_font_bytes() -> bytes:
    buf = io.BytesIO()
    build_font_builder().save(buf)
    return buf.getvalue()


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    return build_font_bytes()


@pytest.fixture(scope="session")
def test_font(font_bytes: bytes) -> FontMetrics:
    """Fixed-metrics font parsed from real TrueType bytes."""
    return FontMetrics.from_bytes(font_bytes)


@pytest.fixture(scope="session")
def kerned_font() -> FontMetrics:
    """Same font with an A/V kerning pair of -100 units (kept in memory)."""
    fb = build_font_builder(kerning={("uni0041", "uni0056"): -100})
    return FontMetrics(fb.font)


# A/V as a glyph pair, B|C against W|X as a class pair, both under 'kern'.
# X/Y sits in an unrelated feature and must not count as kerning.
GPOS_FEATURES = """\
languagesystem DFLT dflt;

@LEFT = [uni0042 uni0043];
@RIGHT = [uni0057 uni0058];

lookup pair_kerning {
    pos uni0041 uni0056 -100;
    pos @LEFT @RIGHT -300;
} pair_kerning;

feature kern {
    lookup pair_kerning;
} kern;

feature dist {
    pos uni0058 uni0059 -400;
} dist;
"""


def build_gpos_font(
    use_extension: bool = False,
    kerning: dict[tuple[str, str], int] | None = None,
) -> FontMetrics:
    from fontTools.feaLib.builder import addOpenTypeFeaturesFromString

    fea = GPOS_FEATURES
    if use_extension:
        fea = fea.replace("lookup pair_kerning {", "lookup pair_kerning useExtension {")
    fb = build_font_builder(kerning=kerning)
    addOpenTypeFeaturesFromString(fb.font, fea)
    return FontMetrics(fb.font)


@pytest.fixture(scope="session", params=[False, True], ids=["plain", "extension"])
def kerned_gpos_font(request) -> FontMetrics:
    """Font whose kerning lives only in GPOS pair adjustments."""
    return build_gpos_font(use_extension=request.param)


# ---------------------------------------------------------------------------
# Temporary data directory & DB
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_data_dir(tmp_path: Path):
    """Provides a fresh temp directory and patches main module globals."""
    import main as app_module

    orig_base = app_module.BASE_DIR
    orig_data = app_module.DATA_DIR
    orig_db = app_module.DB_PATH

    app_module.BASE_DIR = tmp_path
    app_module.DATA_DIR = tmp_path / "visitor_badge_data"
    app_module.DB_PATH = app_module.DATA_DIR / "visitor_badge.sqlite3"
    app_module.DATA_DIR.mkdir(parents=True, exist_ok=True)

    yield tmp_path

    app_module.BASE_DIR = orig_base
    app_module.DATA_DIR = orig_data
    app_module.DB_PATH = orig_db


@pytest_asyncio.fixture()
async def initialized_db(tmp_data_dir: Path):
    """Configure the db module against a fresh temp DB and migrate it."""
    db_path = tmp_data_dir / "visitor_badge_data" / "visitor_badge.sqlite3"
    db.configure(db_path)
    await db.init_db()
    yield db_path
    await db.dispose()


# ---------------------------------------------------------------------------
# Async HTTP test client (uses the real FastAPI app)
# ---------------------------------------------------------------------------


@pytest.fixture()
def app_state(test_font: FontMetrics):
    """Install a font and default config on the app module (no lifespan)."""
    import main as app_module

    orig_font = app_module.font
    orig_cfg = app_module.config_manager

    app_module.font = test_font
    app_module.config_manager = ConfigManager.default()

    yield app_module

    app_module.font = orig_font
    app_module.config_manager = orig_cfg


@pytest_asyncio.fixture()
async def client(initialized_db: Path, app_state):
    """Async httpx client wired to the FastAPI app (no lifespan)."""
    transport = ASGITransport(app=app_state.app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
