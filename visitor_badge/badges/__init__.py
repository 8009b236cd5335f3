from visitor_badge.badges.color import (
    DEFAULT_LABEL_COLOR,
    DEFAULT_MESSAGE_COLOR,
    ResolvedColor,
    brightness,
    contrast_pair,
    resolve,
)
from visitor_badge.badges.layout import Geometry, compute_geometry
from visitor_badge.badges.measure import (
    FontLoadError,
    FontMetrics,
    measure,
    preferred_width,
    round_up_to_odd,
    strip_control,
)
from visitor_badge.badges.render import (
    DEFAULT_FONT_FAMILY,
    BadgeRequest,
    Renderer,
    render_badge,
    svg_response,
)
from visitor_badge.badges.styles import STYLES, Style, StyleDescriptor, descriptor_for

__all__ = [
    "DEFAULT_FONT_FAMILY",
    "DEFAULT_LABEL_COLOR",
    "DEFAULT_MESSAGE_COLOR",
    "STYLES",
    "BadgeRequest",
    "FontLoadError",
    "FontMetrics",
    "Geometry",
    "Renderer",
    "ResolvedColor",
    "Style",
    "StyleDescriptor",
    "brightness",
    "compute_geometry",
    "contrast_pair",
    "descriptor_for",
    "measure",
    "preferred_width",
    "render_badge",
    "resolve",
    "round_up_to_odd",
    "strip_control",
    "svg_response",
]
