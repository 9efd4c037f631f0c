"""Small planar geometry helpers shared by the detection services."""

import math
from typing import NamedTuple, Sequence


class Point(NamedTuple):
    """2D point in image coordinates."""
    x: float
    y: float


def distance(p1, p2) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def line_length(line) -> float:
    """Length of a segment with x1, y1, x2, y2 attributes."""
    return math.hypot(line.x2 - line.x1, line.y2 - line.y1)


def line_angle(line) -> float:
    """Direction of a segment in degrees, in (-180, 180]."""
    return math.degrees(math.atan2(line.y2 - line.y1, line.x2 - line.x1))


def angle_between(line1, line2) -> float:
    """
    Angle between the directions of two segments in degrees.

    Direction matters: two collinear segments drawn in opposite
    directions are 180 degrees apart.
    """
    diff = abs(math.atan2(line1.y2 - line1.y1, line1.x2 - line1.x1) -
               math.atan2(line2.y2 - line2.y1, line2.x2 - line2.x1))
    diff = math.degrees(diff)
    if diff > 180:
        diff = 360 - diff
    return diff


def midpoint(line) -> Point:
    return Point((line.x1 + line.x2) / 2, (line.y1 + line.y2) / 2)


def point_to_segment_distance(point, line) -> float:
    """
    Distance from a point to a line segment.

    The point is projected onto the segment's supporting line and the
    parameter is clamped to [0, 1] so the nearest endpoint is used when
    the projection falls outside the segment.
    """
    dx = line.x2 - line.x1
    dy = line.y2 - line.y1
    len_sq = dx * dx + dy * dy

    if len_sq == 0:
        # Degenerate segment
        return math.hypot(point.x - line.x1, point.y - line.y1)

    t = ((point.x - line.x1) * dx + (point.y - line.y1) * dy) / len_sq
    t = max(0.0, min(1.0, t))

    proj_x = line.x1 + t * dx
    proj_y = line.y1 + t * dy
    return math.hypot(point.x - proj_x, point.y - proj_y)


def point_in_polygon(point, polygon: Sequence) -> bool:
    """Even-odd ray casting test."""
    inside = False
    x, y = point.x, point.y

    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y

        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i

    return inside
