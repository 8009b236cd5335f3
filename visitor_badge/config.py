"""Declarative configuration manager for visitor-badge.

Parses a TOML config file and provides:

* Global settings (data directory, default counter, admin token hash).
* Badge defaults (label, style, font, colors, cache policy).
* Per-counter overrides merged over the badge defaults.

Environment variables fill in when no config file is present.
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from visitor_badge.badges.color import (
    DEFAULT_LABEL_COLOR,
    DEFAULT_MESSAGE_COLOR,
    resolve,
)
from visitor_badge.badges.render import DEFAULT_FONT_FAMILY
from visitor_badge.badges.styles import Style

COUNTER_ID_RE = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")

DEFAULT_LABEL = "Profile views"
DEFAULT_CACHE_CONTROL = "no-cache, no-store, must-revalidate, max-age=0"
BUNDLED_FONT_PATH = Path(__file__).resolve().parent / "data" / "DejaVuSans.ttf"

# ------------------------------------------------------------------
# Data classes
# ------------------------------------------------------------------


@dataclass(frozen=True)
class BadgeConfig:
    """How badges look unless a request or counter says otherwise."""

    label: str = DEFAULT_LABEL
    style: Style = Style.FLAT
    font_path: str | None = None
    font_family: str = DEFAULT_FONT_FAMILY
    label_color: str = DEFAULT_LABEL_COLOR
    color: str = DEFAULT_MESSAGE_COLOR
    cache_control: str = DEFAULT_CACHE_CONTROL


@dataclass(frozen=True)
class CounterConfig:
    """Per-counter badge overrides.  ``None`` means "inherit"."""

    name: str
    label: str | None = None
    style: Style | None = None
    label_color: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class GlobalConfig:
    """Top-level / global settings."""

    data_dir: str = "visitor_badge_data"
    default_counter: str = "lxze"
    auto_register: bool = False
    admin_token_hash: str | None = None


# ------------------------------------------------------------------
# Validation helpers
# ------------------------------------------------------------------


def validate_counter_id(counter_id: str) -> str:
    cid = counter_id.strip()
    if not COUNTER_ID_RE.match(cid):
        raise ValueError(
            f"Counter id {counter_id!r} is invalid; use 1-64 letters, digits, "
            "dots, hyphens, and underscores"
        )
    return cid


def _color(raw: Any, where: str) -> str | None:
    if raw is None or raw == "":
        return None
    value = str(raw).strip()
    if resolve(value) is None:
        raise ValueError(f"{where}: unknown color {value!r}")
    return value


def _style(raw: Any, where: str) -> Style | None:
    if raw is None or raw == "":
        return None
    try:
        return Style.parse(str(raw))
    except ValueError as e:
        raise ValueError(f"{where}: {e}") from e


# ------------------------------------------------------------------
# ConfigManager
# ------------------------------------------------------------------


class ConfigManager:
    """Manages the declarative TOML configuration for visitor-badge.

    Typical usage::

        cfg = ConfigManager.from_file(Path("config.toml"))
        badge = cfg.badge_for("lxze")
    """

    def __init__(
        self,
        global_config: GlobalConfig,
        badge: BadgeConfig,
        counters: dict[str, CounterConfig] | None = None,
    ) -> None:
        self._global = global_config
        self._badge = badge
        self._counters = dict(counters or {})

    # -------------------------------------------------------------- factories

    @classmethod
    def from_file(cls, path: Path) -> ConfigManager:
        """Load configuration from a TOML file."""
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        return cls._from_dict(raw)

    @classmethod
    def from_str(cls, toml_str: str) -> ConfigManager:
        """Load configuration from a TOML string (handy for tests)."""
        return cls._from_dict(tomllib.loads(toml_str))

    @classmethod
    def _from_dict(cls, raw: dict[str, Any]) -> ConfigManager:
        """Build a ``ConfigManager`` from a parsed TOML dictionary."""
        # -- global section --
        g = raw.get("global", {})
        global_config = GlobalConfig(
            data_dir=str(g.get("data_dir", GlobalConfig.data_dir)),
            default_counter=validate_counter_id(
                str(g.get("default_counter", GlobalConfig.default_counter))
            ),
            auto_register=bool(g.get("auto_register", False)),
            admin_token_hash=g.get("admin_token_hash") or None,
        )

        # -- badge section --
        b = raw.get("badge", {})
        badge = BadgeConfig(
            label=str(b.get("label", DEFAULT_LABEL)),
            style=_style(b.get("style"), "badge.style") or Style.FLAT,
            font_path=b.get("font_path") or None,
            font_family=str(b.get("font_family", DEFAULT_FONT_FAMILY)),
            label_color=_color(b.get("label_color"), "badge.label_color")
            or DEFAULT_LABEL_COLOR,
            color=_color(b.get("color"), "badge.color") or DEFAULT_MESSAGE_COLOR,
            cache_control=str(b.get("cache_control", DEFAULT_CACHE_CONTROL)),
        )

        # -- counters section --
        counters: dict[str, CounterConfig] = {}
        for name, cdata in raw.get("counters", {}).items():
            if not isinstance(cdata, dict):
                continue
            cid = validate_counter_id(name)
            where = f"counters.{cid}"
            counters[cid] = CounterConfig(
                name=cid,
                label=cdata.get("label"),
                style=_style(cdata.get("style"), f"{where}.style"),
                label_color=_color(cdata.get("label_color"), f"{where}.label_color"),
                color=_color(cdata.get("color"), f"{where}.color"),
            )

        return cls(global_config, badge, counters)

    @classmethod
    def default(cls) -> ConfigManager:
        """Return the built-in defaults (no counter overrides)."""
        return cls(GlobalConfig(), BadgeConfig())

    @classmethod
    def from_env(cls, base_dir: Path) -> ConfigManager:
        """Load the config named by ``VISITOR_BADGE_CONF`` or fall back to env.

        ``VISITOR_BADGE_CONF`` may point to either a file or a directory.
        When it is a directory we look for ``config.toml`` inside it.  With
        no config file, ``VISITOR_BADGE_DATA``, ``VISITOR_BADGE_FONT`` and
        ``VISITOR_BADGE_DEFAULT_COUNTER`` override the defaults.
        """
        raw = os.environ.get("VISITOR_BADGE_CONF", "")
        if raw:
            p = Path(raw)
            path = p / "config.toml" if p.is_dir() else p
        else:
            path = base_dir / "config.toml"
        if path.is_file():
            return cls.from_file(path)

        cfg = cls.default()
        g = cfg.global_config
        b = cfg.badge
        data_dir = os.environ.get("VISITOR_BADGE_DATA")
        if data_dir:
            g = replace(g, data_dir=data_dir)
        counter = os.environ.get("VISITOR_BADGE_DEFAULT_COUNTER")
        if counter:
            g = replace(g, default_counter=validate_counter_id(counter))
        font = os.environ.get("VISITOR_BADGE_FONT")
        if font:
            b = replace(b, font_path=font)
        return cls(g, b)

    # -------------------------------------------------------------- accessors

    @property
    def global_config(self) -> GlobalConfig:
        return self._global

    @property
    def badge(self) -> BadgeConfig:
        return self._badge

    @property
    def counters(self) -> dict[str, CounterConfig]:
        return dict(self._counters)

    def data_dir(self, base_dir: Path) -> Path:
        """Resolve the data directory against *base_dir* when relative."""
        p = Path(self._global.data_dir)
        return p if p.is_absolute() else (base_dir / p).resolve()

    def font_path(self, base_dir: Path) -> Path:
        """Configured font file, or the bundled DejaVu Sans."""
        if not self._badge.font_path:
            return BUNDLED_FONT_PATH
        p = Path(self._badge.font_path)
        return p if p.is_absolute() else (base_dir / p).resolve()

    def badge_for(self, counter_id: str) -> BadgeConfig:
        """Badge defaults with *counter_id*'s overrides applied."""
        c = self._counters.get(counter_id)
        if c is None:
            return self._badge
        overrides = {
            k: v
            for k, v in (
                ("label", c.label),
                ("style", c.style),
                ("label_color", c.label_color),
                ("color", c.color),
            )
            if v is not None
        }
        return replace(self._badge, **overrides)
