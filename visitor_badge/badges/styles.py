"""Visual badge styles.

The set of styles is closed, so each one is a fixed ``StyleDescriptor`` in
the ``STYLES`` table rather than a class hierarchy.  Values follow the
shields.io templates.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from visitor_badge.badges.layout import Geometry
from visitor_badge.badges.xml import Node

GRADIENT_ID = "s"
CLIP_ID = "r"


class Style(str, enum.Enum):
    FLAT = "flat"
    FLAT_SQUARE = "flat-square"
    PLASTIC = "plastic"

    @classmethod
    def parse(cls, value: str) -> Style:
        v = value.strip().lower().replace("_", "-")
        try:
            return cls(v)
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(
                f"unknown style {value!r}; expected one of: {choices}"
            ) from None


@dataclass(frozen=True, slots=True)
class GradientStop:
    offset: str
    stop_color: str
    stop_opacity: str

    def node(self) -> Node:
        return Node("stop").attrs(
            [
                ("offset", self.offset),
                ("stop-color", self.stop_color),
                ("stop-opacity", self.stop_opacity),
            ]
        )


@dataclass(frozen=True, slots=True)
class StyleDescriptor:
    height: float
    vertical_margin: float
    shadow: bool
    radius: float = 0.0
    gradient: tuple[GradientStop, ...] = ()
    background_attrs: tuple[tuple[str, str], ...] = ()

    @property
    def has_gradient(self) -> bool:
        return bool(self.gradient)

    def background(
        self, geometry: Geometry, label_fill: str, message_fill: str
    ) -> list[Node]:
        """Nodes drawn beneath the text: gradient, clip path, segment rects."""
        nodes: list[Node] = []

        if self.has_gradient:
            nodes.append(
                Node("linearGradient")
                .attrs([("id", GRADIENT_ID), ("x2", "0"), ("y2", "100%")])
                .children(stop.node() for stop in self.gradient)
            )

        group = Node("g")
        if self.radius > 0:
            nodes.append(
                Node("clipPath")
                .attr("id", CLIP_ID)
                .child(
                    Node("rect").attrs(
                        [
                            ("width", geometry.width),
                            ("height", self.height),
                            ("rx", self.radius),
                            ("fill", "#fff"),
                        ]
                    )
                )
            )
            group.attr("clip-path", f"url(#{CLIP_ID})")
        group.attrs(self.background_attrs)

        group.child(
            Node("rect").attrs(
                [
                    ("width", geometry.left_width),
                    ("height", self.height),
                    ("fill", label_fill),
                ]
            )
        )
        group.child(
            Node("rect").attrs(
                [
                    ("x", geometry.left_width),
                    ("width", geometry.right_width),
                    ("height", self.height),
                    ("fill", message_fill),
                ]
            )
        )
        if self.has_gradient:
            group.child(
                Node("rect").attrs(
                    [
                        ("width", geometry.width),
                        ("height", self.height),
                        ("fill", f"url(#{GRADIENT_ID})"),
                    ]
                )
            )

        nodes.append(group)
        return nodes


STYLES: dict[Style, StyleDescriptor] = {
    Style.FLAT: StyleDescriptor(
        height=20.0,
        vertical_margin=0.0,
        shadow=True,
        radius=3.0,
    ),
    Style.FLAT_SQUARE: StyleDescriptor(
        height=20.0,
        vertical_margin=0.0,
        shadow=True,
        background_attrs=(("shape-rendering", "crispEdges"),),
    ),
    Style.PLASTIC: StyleDescriptor(
        height=18.0,
        vertical_margin=-10.0,
        shadow=True,
        radius=4.0,
        gradient=(
            GradientStop("0", "#fff", ".7"),
            GradientStop(".1", "#aaa", ".1"),
            GradientStop(".9", "#000", ".3"),
            GradientStop("1", "#000", ".5"),
        ),
    ),
}


def descriptor_for(style: Style) -> StyleDescriptor:
    return STYLES[style]
