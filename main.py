from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import anyio
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError
from fastapi import FastAPI, Header, HTTPException, Response

from visitor_badge import db
from visitor_badge.badges import (
    BadgeRequest,
    FontLoadError,
    FontMetrics,
    Style,
    render_badge,
    resolve,
    svg_response,
)
from visitor_badge.config import ConfigManager, validate_counter_id
from visitor_badge.fonts import load_font

logger = logging.getLogger(__name__)

# ----------------------------
# Configuration
# ----------------------------

BASE_DIR = Path(os.environ.get("VISITOR_BADGE_HOME", ".")).resolve()

DATA_DIR = BASE_DIR / "visitor_badge_data"
DB_PATH = DATA_DIR / "visitor_badge.sqlite3"

ph = PasswordHasher()

# Populated during lifespan; tests swap these directly.
config_manager: ConfigManager = ConfigManager.default()
font: FontMetrics | None = None


def _require_font() -> FontMetrics:
    if font is None:
        raise RuntimeError("Font not loaded – the app lifespan has not run")
    return font


# ----------------------------
# Request helpers
# ----------------------------


def normalize_counter_id(counter_id: str) -> str:
    try:
        return validate_counter_id(counter_id)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def parse_style(raw: str | None, default: Style) -> Style:
    if raw is None or not raw.strip():
        return default
    try:
        return Style.parse(raw)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def pick_color(requested: str | None, fallback: str) -> str:
    """Use *requested* when it names a known color, else *fallback*."""
    if requested and resolve(requested) is not None:
        return requested.strip()
    return fallback


# ----------------------------
# Auth helpers
# ----------------------------


def extract_token(authorization: str | None, x_access_token: str | None) -> str:
    if x_access_token:
        return x_access_token.strip()
    if authorization:
        parts = authorization.strip().split(None, 1)
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1].strip()
    raise HTTPException(status_code=401, detail="Missing token")


def verify_admin_token(token: str) -> None:
    token_hash = config_manager.global_config.admin_token_hash
    if not token_hash:
        raise HTTPException(
            status_code=403, detail="Counter registration is disabled"
        )
    try:
        if not ph.verify(token_hash, token):
            raise HTTPException(status_code=401, detail="Invalid token")
    except VerifyMismatchError:
        raise HTTPException(status_code=401, detail="Invalid token")


# ----------------------------
# Lifespan (async startup)
# ----------------------------


async def init_dirs() -> None:
    await anyio.Path(DATA_DIR).mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    global config_manager, font, DATA_DIR, DB_PATH

    config_manager = ConfigManager.from_env(BASE_DIR)

    font_path = config_manager.font_path(BASE_DIR)
    try:
        font = await load_font(font_path)
    except FontLoadError:
        logger.exception("Cannot start without a usable font (%s)", font_path)
        raise

    DATA_DIR = config_manager.data_dir(BASE_DIR)
    DB_PATH = DATA_DIR / "visitor_badge.sqlite3"
    await init_dirs()
    db.configure(DB_PATH)
    await db.init_db()

    logger.info(
        "visitor-badge ready (db=%s, default counter=%s)",
        DB_PATH,
        config_manager.global_config.default_counter,
    )
    yield
    await db.dispose()


# ----------------------------
# App setup
# ----------------------------

app = FastAPI(title="Visitor Badge", version="1.0", lifespan=lifespan)


# ----------------------------
# Badges
# ----------------------------


async def count_for_badge(counter_id: str) -> int:
    """Record one view of *counter_id* and return the new count."""
    count = await db.increment_view_count(counter_id)
    if count is None and config_manager.global_config.auto_register:
        logger.warning("Auto-registering unknown counter %s", counter_id)
        await db.register_counter(counter_id)
        count = await db.increment_view_count(counter_id)
    if count is None:
        raise HTTPException(status_code=404, detail="query error")
    return count


def badge_response(
    counter_id: str,
    count: int,
    label: str | None,
    style: Style,
    color: str | None,
    label_color: str | None,
) -> Response:
    cfg = config_manager.badge_for(counter_id)
    request = BadgeRequest(
        label=cfg.label if label is None else label,
        message=str(count),
        font=_require_font(),
        style=style,
        font_family=cfg.font_family,
        label_color=pick_color(label_color, cfg.label_color),
        color=pick_color(color, cfg.color),
    )
    svg = render_badge(request)
    seed = "|".join(
        [
            counter_id,
            request.style.value,
            request.label,
            request.message,
            request.label_color or "",
            request.color or "",
        ]
    )
    return svg_response(svg, cache_control=cfg.cache_control, etag_seed=seed)


@app.get("/")
async def default_badge(
    label: str | None = None,
    style: str | None = None,
    color: str | None = None,
    label_color: str | None = None,
    labelColor: str | None = None,  # noqa: N803  (shields.io spelling)
) -> Response:
    counter_id = config_manager.global_config.default_counter
    st = parse_style(style, config_manager.badge_for(counter_id).style)
    count = await count_for_badge(counter_id)
    return badge_response(counter_id, count, label, st, color, label_color or labelColor)


@app.get("/badge/{counter_id}")
async def counter_badge(
    counter_id: str,
    label: str | None = None,
    style: str | None = None,
    color: str | None = None,
    label_color: str | None = None,
    labelColor: str | None = None,  # noqa: N803
) -> Response:
    cid = normalize_counter_id(counter_id)
    st = parse_style(style, config_manager.badge_for(cid).style)
    count = await count_for_badge(cid)
    return badge_response(cid, count, label, st, color, label_color or labelColor)


# ----------------------------
# Counter API
# ----------------------------


@app.get("/api/counters/{counter_id}")
async def get_counter(counter_id: str) -> dict[str, Any]:
    cid = normalize_counter_id(counter_id)
    count = await db.get_view_count(cid)
    if count is None:
        raise HTTPException(status_code=404, detail="Counter not found")
    return {"id": cid, "view_count": count}


@app.post("/api/counters/{counter_id}")
async def create_counter(
    counter_id: str,
    start: int = 0,
    authorization: str | None = Header(default=None),
    x_access_token: str | None = Header(default=None, alias="X-Access-Token"),
) -> dict[str, Any]:
    """Register a counter.

    Auth:
      - Authorization: Bearer <token>
        OR
      - X-Access-Token: <token>
    """
    token = extract_token(authorization, x_access_token)
    verify_admin_token(token)

    cid = normalize_counter_id(counter_id)
    if start < 0:
        raise HTTPException(status_code=422, detail="start must be >= 0")

    created = await db.register_counter(cid, start=start)
    count = await db.get_view_count(cid)
    return {"id": cid, "view_count": count, "created": created}


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080, log_level="info")
