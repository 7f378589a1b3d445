"""Angle helpers shared by spin resolution, animation and drag handling."""

import math

TWO_PI = 2 * math.pi


def resolve_index(rotation: float, segment_count: int) -> int:
    """Index of the segment under the fixed pointer for a given wheel rotation."""
    normalized = (TWO_PI - (rotation % TWO_PI)) % TWO_PI
    # floor can reach segment_count when normalized rounds up to 2π
    return int(math.floor(normalized / (TWO_PI / segment_count))) % segment_count


def angle_from_point(center_x: float, center_y: float, x: float, y: float) -> float:
    """Angle of (x, y) around the centre, in [0, 2π)."""
    angle = math.atan2(y - center_y, x - center_x)
    if angle < 0:
        angle += TWO_PI
    return angle


def normalize_angle_difference(diff: float) -> float:
    """Wrap an angle difference into [-π, π] so drags follow the shortest path."""
    while diff > math.pi:
        diff -= TWO_PI
    while diff < -math.pi:
        diff += TWO_PI
    return diff
