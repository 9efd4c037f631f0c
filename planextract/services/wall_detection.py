"""Wall detection from binary floor plan images.

Edges are found with a simplified Canny detector, turned into line
candidates with a Hough transform, filtered to near horizontal/vertical
lines and merged where several candidates describe the same wall.
"""

import math
import logging
from typing import List, Sequence

import cv2
import numpy as np

from planextract.services.edge_detection import canny_edge_detection
from planextract.services.geometry import angle_between, line_angle, midpoint, distance
from planextract.services.hough import LineCandidate, hough_line_transform

logger = logging.getLogger(__name__)

# A wall is a line candidate, possibly averaged from several
Wall = LineCandidate


def is_orthogonal(line: LineCandidate, angle_threshold: float = 5.0) -> bool:
    """Check if a line is within angle_threshold degrees of 0, 90 or 180."""
    normalized = line_angle(line) % 180

    return (
        abs(normalized) < angle_threshold or
        abs(normalized - 90) < angle_threshold or
        abs(normalized - 180) < angle_threshold
    )


def line_to_line_distance(line1: LineCandidate, line2: LineCandidate) -> float:
    """Distance between two lines, approximated by their midpoints."""
    return distance(midpoint(line1), midpoint(line2))


def average_lines(lines: Sequence[LineCandidate]) -> Wall:
    """Vote-weighted average of line endpoints."""
    sum_x1 = sum_y1 = sum_x2 = sum_y2 = 0.0
    total = 0

    for line in lines:
        weight = line.votes or 1
        sum_x1 += line.x1 * weight
        sum_y1 += line.y1 * weight
        sum_x2 += line.x2 * weight
        sum_y2 += line.y2 * weight
        total += weight

    return Wall(
        x1=sum_x1 / total,
        y1=sum_y1 / total,
        x2=sum_x2 / total,
        y2=sum_y2 / total,
        votes=total
    )


def merge_parallel_lines(
    lines: Sequence[LineCandidate],
    distance_threshold: float = 10.0,
    angle_threshold: float = 2.0
) -> List[Wall]:
    """
    Greedily merge near-parallel lines that lie close together.

    Each unused line seeds a group and absorbs every later unused line
    whose angle to the seed and midpoint distance are both below the
    thresholds.

    Args:
        lines: Line candidates, in priority order
        distance_threshold: Maximum midpoint distance (pixels)
        angle_threshold: Maximum direction difference (degrees)

    Returns:
        One wall per group
    """
    merged = []
    used = set()

    for i, seed in enumerate(lines):
        if i in used:
            continue

        group = [seed]
        used.add(i)

        for j in range(i + 1, len(lines)):
            if j in used:
                continue

            other = lines[j]
            if angle_between(seed, other) < angle_threshold:
                if line_to_line_distance(seed, other) < distance_threshold:
                    group.append(other)
                    used.add(j)

        if len(group) == 1:
            merged.append(seed)
        else:
            merged.append(average_lines(group))

    return merged


def create_wall_grid(walls: Sequence[Wall], width: int, height: int) -> np.ndarray:
    """
    Rasterize walls into a (height, width) grid with wall pixels at 255.

    Endpoints are rounded half up and drawn as 8-connected one pixel lines.
    """
    grid = np.zeros((height, width), dtype=np.uint8)

    for wall in walls:
        start = (int(math.floor(wall.x1 + 0.5)), int(math.floor(wall.y1 + 0.5)))
        end = (int(math.floor(wall.x2 + 0.5)), int(math.floor(wall.y2 + 0.5)))
        cv2.line(grid, start, end, 255, thickness=1, lineType=cv2.LINE_8)

    return grid


class WallDetector:
    """Detect wall segments in binary floor plan images."""

    def __init__(
        self,
        low_threshold: int = 50,
        high_threshold: int = 100,
        hough_threshold: int = 100,
        min_line_length: float = 50,
        angle_threshold: float = 5.0,     # degrees from horizontal/vertical
        distance_threshold: float = 15.0,  # max midpoint distance to merge
        merge_angle_threshold: float = 2.0
    ):
        self.low_threshold = low_threshold
        self.high_threshold = high_threshold
        self.hough_threshold = hough_threshold
        self.min_line_length = min_line_length
        self.angle_threshold = angle_threshold
        self.distance_threshold = distance_threshold
        self.merge_angle_threshold = merge_angle_threshold

    def detect_walls(self, binary: np.ndarray) -> List[Wall]:
        """
        Detect walls in a binary image.

        Args:
            binary: uint8 (H, W) image with values 0 or 255

        Returns:
            Merged wall segments
        """
        edges = canny_edge_detection(
            binary,
            low_threshold=self.low_threshold,
            high_threshold=self.high_threshold
        )

        lines = hough_line_transform(
            edges,
            threshold=self.hough_threshold,
            min_line_length=self.min_line_length
        )

        # Most walls are orthogonal
        wall_lines = [line for line in lines if is_orthogonal(line, self.angle_threshold)]
        logger.info(f"Orthogonal filter: {len(lines)} → {len(wall_lines)} lines")

        walls = merge_parallel_lines(
            wall_lines,
            distance_threshold=self.distance_threshold,
            angle_threshold=self.merge_angle_threshold
        )
        logger.info(f"Merged parallel lines: {len(wall_lines)} → {len(walls)} walls")

        return walls
