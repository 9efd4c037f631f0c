"""Hough line transform over binary edge maps."""

import math
import logging
from typing import List, Optional, Tuple
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

NUM_ANGLES = 180
ANGLE_STEP = math.pi / 180  # 1 degree
DIST_STEP = 1

# Lines closer than this to parallel with a boundary are not intersected with it
MIN_TRIG_VALUE = 0.01


@dataclass
class LineCandidate:
    """Line segment with its Hough support."""
    x1: float
    y1: float
    x2: float
    y2: float
    votes: int = 1
    angle: Optional[float] = None  # radians, polar form
    dist: Optional[float] = None   # pixels from origin, polar form

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)


def polar_to_cartesian(
    angle: float,
    dist: float,
    width: int,
    height: int
) -> Optional[Tuple[float, float, float, float]]:
    """
    Clip the line x*cos(angle) + y*sin(angle) = dist to the image bounds.

    Args:
        angle: Line normal angle in radians
        dist: Signed distance from the origin
        width: Image width
        height: Image height

    Returns:
        (x1, y1, x2, y2) of the first two distinct boundary intersections,
        or None if the line does not cross the image
    """
    cos = math.cos(angle)
    sin = math.sin(angle)

    points = []

    if abs(sin) > MIN_TRIG_VALUE:
        # x = 0
        y = dist / sin
        if 0 <= y <= height:
            points.append((0.0, y))

        # x = width
        y = (dist - width * cos) / sin
        if 0 <= y <= height:
            points.append((float(width), y))

    if abs(cos) > MIN_TRIG_VALUE:
        # y = 0
        x = dist / cos
        if 0 <= x <= width:
            points.append((x, 0.0))

        # y = height
        x = (dist - height * sin) / cos
        if 0 <= x <= width:
            points.append((x, float(height)))

    unique = []
    for px, py in points:
        if not any(abs(ux - px) < 1 and abs(uy - py) < 1 for ux, uy in unique):
            unique.append((px, py))

    if len(unique) < 2:
        return None

    (x1, y1), (x2, y2) = unique[0], unique[1]
    return x1, y1, x2, y2


def _local_maxima(grid: np.ndarray, threshold: int) -> np.ndarray:
    """
    Cells >= threshold with no strictly greater 3x3 neighbour.

    Equal neighbours do not disqualify a cell, so plateaus yield
    several peaks.
    """
    rows, cols = grid.shape
    padded = np.pad(grid, 1, mode="constant", constant_values=-1)

    neighbor_max = np.full(grid.shape, -1, dtype=grid.dtype)
    for da in (-1, 0, 1):
        for dd in (-1, 0, 1):
            if da == 0 and dd == 0:
                continue
            window = padded[1 + da:1 + da + rows, 1 + dd:1 + dd + cols]
            np.maximum(neighbor_max, window, out=neighbor_max)

    return (grid >= threshold) & (grid >= neighbor_max)


def hough_line_transform(
    edges: np.ndarray,
    threshold: int = 100,
    min_line_length: float = 50
) -> List[LineCandidate]:
    """
    Detect straight lines in a binary edge map.

    Every non-zero pixel votes for all 180 one-degree angle buckets. The
    accumulator is a flat array indexed angle * num_dists + dist with
    distances offset by the image diagonal.

    Args:
        edges: Binary edge map of shape (H, W)
        threshold: Minimum votes for a peak
        min_line_length: Minimum length of the clipped segment

    Returns:
        Line candidates ordered by votes (descending), ties in
        accumulator scan order
    """
    height, width = edges.shape
    diagonal = math.sqrt(width * width + height * height)
    num_dists = int(math.ceil(diagonal * 2 / DIST_STEP))

    accumulator = np.zeros(NUM_ANGLES * num_dists, dtype=np.int64)

    ys, xs = np.nonzero(edges)
    xs = xs.astype(np.float64)
    ys = ys.astype(np.float64)

    if xs.size and num_dists:
        for angle_idx in range(NUM_ANGLES):
            angle = angle_idx * ANGLE_STEP
            dist = xs * math.cos(angle) + ys * math.sin(angle)
            dist_idx = np.floor((dist + diagonal) / DIST_STEP).astype(np.int64)
            dist_idx = dist_idx[(dist_idx >= 0) & (dist_idx < num_dists)]

            offset = angle_idx * num_dists
            accumulator[offset:offset + num_dists] += np.bincount(
                dist_idx, minlength=num_dists
            )[:num_dists]

    grid = accumulator.reshape(NUM_ANGLES, num_dists)
    peaks = np.argwhere(_local_maxima(grid, threshold)) if num_dists else []

    lines = []
    for angle_idx, dist_idx in peaks:
        angle = angle_idx * ANGLE_STEP
        dist = dist_idx * DIST_STEP - diagonal

        segment = polar_to_cartesian(angle, dist, width, height)
        if segment is None:
            continue

        x1, y1, x2, y2 = segment
        line = LineCandidate(
            x1=x1, y1=y1, x2=x2, y2=y2,
            votes=int(grid[angle_idx, dist_idx]),
            angle=angle,
            dist=dist
        )
        if line.length < min_line_length:
            continue

        lines.append(line)

    # Stable: equal votes keep scan order
    lines.sort(key=lambda line: line.votes, reverse=True)

    logger.info(f"Hough transform: {len(xs)} edge pixels, {len(lines)} line candidates")

    return lines
