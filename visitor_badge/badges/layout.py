"""Badge geometry."""

from __future__ import annotations

from dataclasses import dataclass

HORIZONTAL_PADDING = 5.0
LABEL_MARGIN = 1.0


@dataclass(frozen=True, slots=True)
class Geometry:
    horizontal_padding: float
    label_margin: float
    label_width: float
    message_width: float
    left_width: float
    right_width: float
    message_margin: float
    width: float


def compute_geometry(
    label_width: float,
    message_width: float,
    horizontal_padding: float = HORIZONTAL_PADDING,
    label_margin: float = LABEL_MARGIN,
) -> Geometry:
    """Lay out the two badge segments around the measured text widths."""
    left_width = label_width + 2 * horizontal_padding
    right_width = message_width + 2 * horizontal_padding
    return Geometry(
        horizontal_padding=horizontal_padding,
        label_margin=label_margin,
        label_width=label_width,
        message_width=message_width,
        left_width=left_width,
        right_width=right_width,
        message_margin=left_width - 1,
        width=left_width + right_width,
    )
