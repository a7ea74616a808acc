"""Ring diagram rendering with Pillow.

Weighted segments are turned into ring sections and each section becomes one
arc. Arcs are laid out by accumulating weights clockwise from 3 o'clock, each
stopping a small gap short of the next one. Free space is drawn in a muted
color and the selected segment gets a thicker stroke; selection never changes
the weights themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from PIL import Image, ImageDraw

from andromeda.config import settings
from andromeda.domain import WeightedSegment
from andromeda.storage.weighting import ring_sections

Color = Tuple[int, int, int, int]


@dataclass(frozen=True)
class RingStyle:
    size: int = settings.DEFAULT_RING_SIZE
    line_width: float = settings.DEFAULT_RING_LINE_WIDTH
    selected_scale: float = settings.DEFAULT_RING_SELECTED_SCALE
    arc_gap_degrees: float = settings.DEFAULT_RING_ARC_GAP_DEGREES
    background: Color = (0, 0, 0, 0)
    track_color: Color = (48, 48, 48, 255)
    occupied_color: Color = (99, 208, 223, 255)
    free_color: Color = (128, 128, 128, 255)

    @classmethod
    def from_settings(cls) -> RingStyle:
        return cls(
            size=settings.get_int("ring_size", settings.DEFAULT_RING_SIZE),
            line_width=settings.get_float("ring_line_width", settings.DEFAULT_RING_LINE_WIDTH),
            selected_scale=settings.get_float(
                "ring_selected_scale", settings.DEFAULT_RING_SELECTED_SCALE
            ),
            arc_gap_degrees=settings.get_float(
                "ring_arc_gap_degrees", settings.DEFAULT_RING_ARC_GAP_DEGREES
            ),
        )


def ring_radius(size: int, line_width: float) -> float:
    """Radius of the stroke centre line, leaving room for half a stroke."""
    return size * 0.5 - (1.0 + line_width * 0.5)


def arc_angles(start: float, weight: float, gap_degrees: float) -> Tuple[float, float]:
    """Start and end angle in degrees for one section.

    The gap never takes more than half of a section's own arc.
    """
    start_degrees = 360.0 * start
    sweep = 360.0 * weight
    return start_degrees, start_degrees + sweep - min(gap_degrees, sweep * 0.5)


def stroke_width(index: int, selected_index: Optional[int], style: RingStyle) -> float:
    if selected_index is not None and index == selected_index:
        return style.line_width * style.selected_scale
    return style.line_width


def _stroke_box(center: float, radius: float, width: float) -> Tuple[float, float, float, float]:
    # Pillow grows strokes inwards from the box; centre them on the radius.
    outer = radius + width * 0.5
    return (center - outer, center - outer, center + outer, center + outer)


def render_ring(
    weighted: Iterable[WeightedSegment],
    selected_index: Optional[int] = None,
    style: Optional[RingStyle] = None,
) -> Image.Image:
    """Draw the ring diagram and return it as an RGBA image."""
    style = style or RingStyle()
    payload = ring_sections(weighted, selected_index)
    image = Image.new("RGBA", (style.size, style.size), style.background)
    draw = ImageDraw.Draw(image)

    center = style.size * 0.5
    radius = ring_radius(style.size, style.line_width)
    track_width = max(1, int(round(style.line_width)))
    draw.ellipse(_stroke_box(center, radius, style.line_width), outline=style.track_color, width=track_width)

    position = 0.0
    for section in payload["sections"]:
        start, end = arc_angles(position, section["weight"], style.arc_gap_degrees)
        position += section["weight"]
        if end <= start:
            continue
        width = stroke_width(section["index"], payload["selected_index"], style)
        color = style.occupied_color if section["is_occupied"] else style.free_color
        draw.arc(
            _stroke_box(center, radius, width),
            start=start,
            end=end,
            fill=color,
            width=max(1, int(round(width))),
        )
    return image
