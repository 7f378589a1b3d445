"""Wheel layout: RESPIN placement, segment geometry, labels and SVG rendering."""

import math
from dataclasses import dataclass
from typing import Optional, Sequence
from xml.sax.saxutils import escape

from config import RESPIN_LABEL, INCLUDE_FREE_SPINS, DEFAULT_NAMES
from engine.geometry import TWO_PI
from engine.spin import WheelSpec
from utils.constants import SEGMENT_COLORS, RESPIN_COLOR, BLANK_COLOR

POINTER_MARGIN = 18
BLANK_SEGMENTS = 8


def build_wheel_names(names: Optional[Sequence[str]] = None,
                      include_free_spins: bool = INCLUDE_FREE_SPINS) -> list[str]:
    """
    Segment labels for a set of names. With free spins on, two RESPIN tiles
    sit opposite each other: one at the start, one at the middle.
    """
    base = list(names) if names else list(DEFAULT_NAMES)
    if not include_free_spins:
        return base
    mid = (len(base) + 2) // 2
    result = [RESPIN_LABEL] + base
    result.insert(mid, RESPIN_LABEL)
    return result


def build_wheel(names: Optional[Sequence[str]] = None,
                include_free_spins: bool = INCLUDE_FREE_SPINS) -> WheelSpec:
    return WheelSpec.from_names(build_wheel_names(names, include_free_spins))


def fairness_text(wheel: WheelSpec) -> str:
    """Odds line shown under the wheel."""
    total = wheel.segment_count
    text = f"Each name {100 / total:.2f}% chance"
    if wheel.respin_count:
        text += f", Free Spin {wheel.respin_count / total * 100:.2f}% chance"
    return text


def is_numbers_wheel(labels: Sequence[str]) -> bool:
    return bool(labels) and all(
        label != RESPIN_LABEL and label.isdigit() for label in labels
    )


def font_size(segment_count: int, is_numbers: bool = False) -> int:
    # Numbers are short, so they get bigger type on small wheels
    if is_numbers and segment_count <= 20:
        if segment_count <= 10:
            return 20
        if segment_count <= 15:
            return 18
        return 16
    if segment_count <= 10:
        return 16
    if segment_count <= 20:
        return 14
    if segment_count <= 30:
        return 12
    return 10


def max_label_length(segment_count: int) -> int:
    if segment_count <= 10:
        return 20
    if segment_count <= 20:
        return 15
    return 12


def truncate_label(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def segment_color(index: int, label: str) -> str:
    if label == RESPIN_LABEL:
        return RESPIN_COLOR
    if label == "":
        return BLANK_COLOR
    return SEGMENT_COLORS[index % len(SEGMENT_COLORS)]


@dataclass(frozen=True)
class Segment:
    index: int
    label: str
    display_label: str
    start_angle: float
    end_angle: float
    color: str

    @property
    def mid_angle(self) -> float:
        return (self.start_angle + self.end_angle) / 2


@dataclass(frozen=True)
class WheelLayout:
    size: float
    center: float
    radius: float
    font_size: int
    segments: tuple


def layout_wheel(wheel: WheelSpec, size: float = 400) -> WheelLayout:
    """Geometry of every slice in wheel coordinates (before rotation)."""
    n = wheel.segment_count
    slice_angle = wheel.segment_angle
    numbers = is_numbers_wheel(wheel.segments)
    max_len = max_label_length(n)
    segments = []
    for i, label in enumerate(wheel.segments):
        display = label if label in (RESPIN_LABEL, "") else truncate_label(label, max_len)
        segments.append(Segment(
            index=i,
            label=label,
            display_label=display,
            start_angle=i * slice_angle,
            end_angle=(i + 1) * slice_angle,
            color=segment_color(i, label),
        ))
    center = size / 2
    return WheelLayout(
        size=size,
        center=center,
        radius=center - POINTER_MARGIN,
        font_size=font_size(n, numbers),
        segments=tuple(segments),
    )


def blank_wheel() -> WheelSpec:
    """Placeholder wheel shown before any names are entered."""
    return WheelSpec(("",) * BLANK_SEGMENTS)


def _point(cx: float, r: float, angle: float) -> tuple:
    return cx + r * math.cos(angle), cx + r * math.sin(angle)


def render_svg(wheel: WheelSpec, rotation: float = 0.0, size: float = 400) -> str:
    """
    SVG snapshot of the wheel turned by `rotation` radians, pointer fixed at
    angle 0 (3 o'clock). The slice under the pointer matches resolve_index().
    """
    layout = layout_wheel(wheel, size)
    c, r = layout.center, layout.radius
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{size:g}" height="{size:g}" '
        f'viewBox="0 0 {size:g} {size:g}">'
    ]
    for seg in layout.segments:
        a0 = seg.start_angle + rotation
        a1 = seg.end_angle + rotation
        if wheel.segment_count == 1:
            parts.append(f'<circle cx="{c:.2f}" cy="{c:.2f}" r="{r:.2f}" fill="{seg.color}"/>')
        else:
            x0, y0 = _point(c, r, a0)
            x1, y1 = _point(c, r, a1)
            large = 1 if (a1 - a0) > math.pi else 0
            parts.append(
                f'<path d="M{c:.2f},{c:.2f} L{x0:.2f},{y0:.2f} '
                f'A{r:.2f},{r:.2f} 0 {large} 1 {x1:.2f},{y1:.2f} Z" fill="{seg.color}"/>'
            )
        if seg.display_label:
            mid = (seg.mid_angle + rotation) % TWO_PI
            tx, ty = _point(c, r * 0.62, mid)
            parts.append(
                f'<text x="{tx:.2f}" y="{ty:.2f}" font-size="{layout.font_size}" '
                f'text-anchor="middle" dominant-baseline="middle" '
                f'transform="rotate({math.degrees(mid):.2f} {tx:.2f} {ty:.2f})">'
                f'{escape(seg.display_label)}</text>'
            )
    px = c + r + 2
    parts.append(
        f'<polygon points="{px:.2f},{c:.2f} {px + 16:.2f},{c - 10:.2f} {px + 16:.2f},{c + 10:.2f}" '
        f'fill="#111827"/>'
    )
    parts.append("</svg>")
    return "".join(parts)
