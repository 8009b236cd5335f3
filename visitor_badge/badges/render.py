"""Badge rendering: one ``BadgeRequest`` in, one SVG document out."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from fastapi import Response

from visitor_badge.badges import color
from visitor_badge.badges.layout import compute_geometry
from visitor_badge.badges.measure import (
    WIDTH_FONT_SCALE,
    FontMetrics,
    preferred_width,
    strip_control,
)
from visitor_badge.badges.styles import Style, descriptor_for
from visitor_badge.badges.xml import Document, Node, serialize

DEFAULT_FONT_FAMILY = "Verdana,Geneva,DejaVu Sans,sans-serif"

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Text is laid out at 10x and scaled back down for sub-pixel positioning.
FONT_SCALE_UP_FACTOR = 10.0
FONT_SCALE_DOWN_VALUE = "scale(.1)"
FONT_SIZE = "110"

TEXT_BASELINE = 140.0
SHADOW_BASELINE = 150.0
SHADOW_OPACITY = ".3"


@dataclass(frozen=True, slots=True)
class BadgeRequest:
    label: str
    message: str
    font: FontMetrics
    style: Style = Style.FLAT
    font_family: str = DEFAULT_FONT_FAMILY
    label_color: str | None = None
    color: str | None = None


class Renderer:
    """Derives everything a badge needs once, then renders it."""

    def __init__(self, request: BadgeRequest) -> None:
        self.label = strip_control(request.label)
        self.message = strip_control(request.message)
        self.font_family = request.font_family

        self.label_color = color.resolve_or(
            request.label_color, color.DEFAULT_LABEL_COLOR
        )
        self.color = color.resolve_or(request.color, color.DEFAULT_MESSAGE_COLOR)

        self.geometry = compute_geometry(
            preferred_width(request.font, self.label, WIDTH_FONT_SCALE),
            preferred_width(request.font, self.message, WIDTH_FONT_SCALE),
        )
        self.accessible_text = f"{self.label}: {self.message}"
        self.style = descriptor_for(request.style)

    def render(self) -> str:
        svg = Node("svg").attrs(
            [
                ("xmlns", SVG_NS),
                ("xmlns:xlink", XLINK_NS),
                ("width", self.geometry.width),
                ("height", self.style.height),
                ("role", "img"),
                ("aria-label", self.accessible_text),
            ]
        )
        svg.child(Node("title").text(self.accessible_text))
        svg.children(
            self.style.background(
                self.geometry, self.label_color.hex, self.color.hex
            )
        )
        svg.child(self._foreground())
        return serialize(Document().add(svg))

    # ------------------------------------------------------------------ text

    def _text_elements(
        self,
        left_margin: float,
        content: str,
        background: color.ResolvedColor,
        text_width: float,
    ) -> list[Node]:
        text_color, shadow_color = color.contrast_pair(background) or ("", "")
        padding = self.geometry.horizontal_padding
        x = FONT_SCALE_UP_FACTOR * (left_margin + 0.5 * text_width + padding)
        text_length = FONT_SCALE_UP_FACTOR * text_width

        nodes: list[Node] = []
        if self.style.shadow:
            nodes.append(
                Node("text")
                .attrs(
                    [
                        ("aria-hidden", "true"),
                        ("fill", shadow_color),
                        ("fill-opacity", SHADOW_OPACITY),
                        ("x", x),
                        ("y", SHADOW_BASELINE + self.style.vertical_margin),
                        ("textLength", text_length),
                    ]
                )
                .text(content)
            )
        nodes.append(
            Node("text")
            .attrs(
                [
                    ("fill", text_color),
                    ("x", x),
                    ("y", TEXT_BASELINE + self.style.vertical_margin),
                    ("textLength", text_length),
                ]
            )
            .text(content)
        )
        return nodes

    def _foreground(self) -> Node:
        g = self.geometry
        return (
            Node("g")
            .attrs(
                [
                    ("fill", "#fff"),
                    ("text-anchor", "middle"),
                    ("font-family", self.font_family),
                    ("text-rendering", "geometricPrecision"),
                    ("font-size", FONT_SIZE),
                    ("transform", FONT_SCALE_DOWN_VALUE),
                ]
            )
            .children(
                self._text_elements(
                    g.label_margin, self.label, self.label_color, g.label_width
                )
            )
            .children(
                self._text_elements(
                    g.message_margin, self.message, self.color, g.message_width
                )
            )
        )


def render_badge(request: BadgeRequest) -> str:
    return Renderer(request).render()


def svg_response(svg: str, cache_control: str, etag_seed: str) -> Response:
    etag = hashlib.sha256(etag_seed.encode("utf-8")).hexdigest()
    return Response(
        content=svg,
        media_type="image/svg+xml; charset=utf-8",
        headers={
            "Cache-Control": cache_control,
            "ETag": f'"{etag}"',
        },
    )
