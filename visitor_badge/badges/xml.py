"""A tiny ordered XML tree for assembling badge documents.

Nodes are built bottom-up with chainable calls::

    rect = Node("rect").attr("width", 40).attr("fill", "#555")
    g = Node("g").attr("clip-path", "url(#r)").child(rect)
    serialize(g)  # '<g clip-path="url(#r)"><rect width="40" fill="#555"/></g>'

Attributes keep their insertion order and duplicates are never collapsed.
Text is stored raw and escaped only when serialized.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Union


def format_number(value: float) -> str:
    """Shortest decimal form of *value*, rounded to 4 places."""
    s = f"{round(value, 4):.4f}".rstrip("0").rstrip(".")
    return "0" if s == "-0" else s


def escape(s: str) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"`` (ampersand first)."""
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


@dataclass(frozen=True, slots=True)
class Text:
    """A raw text run inside an element body."""

    content: str


Child = Union["Node", Text]


class Node:
    """An element with ordered attributes and children."""

    __slots__ = ("tag", "attributes", "contents")

    def __init__(self, tag: str) -> None:
        self.tag = tag
        self.attributes: list[tuple[str, str]] = []
        self.contents: list[Child] = []

    def __repr__(self) -> str:
        return f"Node({self.tag!r}, attributes={self.attributes!r})"

    # ----------------------------------------------------------------- builders

    def attr(self, name: str, value: Any) -> Node:
        if isinstance(value, float):
            value = format_number(value)
        self.attributes.append((name, str(value)))
        return self

    def attrs(self, pairs: Iterable[tuple[str, Any]]) -> Node:
        for name, value in pairs:
            self.attr(name, value)
        return self

    def child(self, node: Child) -> Node:
        self.contents.append(node)
        return self

    def children(self, nodes: Iterable[Child]) -> Node:
        self.contents.extend(nodes)
        return self

    def text(self, content: str) -> Node:
        self.contents.append(Text(content))
        return self


@dataclass
class Document:
    """Ordered list of top-level nodes."""

    nodes: list[Node] = field(default_factory=list)

    def add(self, node: Node) -> Document:
        self.nodes.append(node)
        return self


def _write(node: Node, out: list[str]) -> None:
    out.append("<")
    out.append(node.tag)
    for name, value in node.attributes:
        out.append(f' {name}="{escape(value)}"')

    if not node.contents:
        out.append("/>")
        return

    out.append(">")
    for c in node.contents:
        if isinstance(c, Text):
            out.append(escape(c.content))
        else:
            _write(c, out)
    out.append(f"</{node.tag}>")


def serialize(doc: Node | Document) -> str:
    """Render *doc* (a single node or a whole document) to text."""
    out: list[str] = []
    nodes = doc.nodes if isinstance(doc, Document) else [doc]
    for node in nodes:
        _write(node, out)
    return "".join(out)
