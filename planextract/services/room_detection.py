"""Room detection by flood filling background regions."""

import uuid
import logging
from typing import List
from dataclasses import dataclass, field

import cv2
import numpy as np

from planextract.services.geometry import Point

logger = logging.getLogger(__name__)

BACKGROUND = 0


@dataclass(frozen=True)
class BBox:
    """Inclusive pixel bounds of a region."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y


@dataclass(frozen=True, eq=False)
class Region:
    """Connected block of background pixels."""
    id: int
    pixels: np.ndarray = field(repr=False)  # (N, 2) array of x, y
    bbox: BBox
    area: int


@dataclass(frozen=True)
class Room:
    """Room polygon derived from a region."""
    id: str
    polygon_vertices: List[Point]
    centroid: Point
    area: int
    bbox: BBox


def flood_fill_regions(binary: np.ndarray, min_area: int = 100) -> List[Region]:
    """
    Find 4-connected regions of background (0) pixels.

    Regions are numbered in the row-major order of their first pixel.
    Regions smaller than min_area still consume an id but are not returned.

    Args:
        binary: uint8 (H, W) image with values 0 or 255
        min_area: Minimum region area in pixels

    Returns:
        Regions with area >= min_area, in id order
    """
    height, width = binary.shape
    if binary.size == 0:
        return []

    background = (binary == BACKGROUND).astype(np.uint8)
    num_labels, labels, stats, _ = cv2.connectedComponentsWithStats(
        background, connectivity=4
    )

    flat = labels.ravel()
    label_ids, first_index = np.unique(flat, return_index=True)

    # Label 0 is everything that is not background
    seeds = sorted(
        (int(first), int(label))
        for label, first in zip(label_ids, first_index)
        if label != 0
    )

    # Pixel indices grouped by label, each group in row-major order
    order = np.argsort(flat, kind="stable")
    starts = np.concatenate(([0], np.cumsum(np.bincount(flat, minlength=num_labels))))

    regions = []
    for region_id, (_, label) in enumerate(seeds):
        area = int(stats[label, cv2.CC_STAT_AREA])
        if area < min_area:
            continue

        indices = order[starts[label]:starts[label + 1]]
        ys, xs = np.divmod(indices, width)

        left = int(stats[label, cv2.CC_STAT_LEFT])
        top = int(stats[label, cv2.CC_STAT_TOP])
        bbox = BBox(
            min_x=left,
            min_y=top,
            max_x=left + int(stats[label, cv2.CC_STAT_WIDTH]) - 1,
            max_y=top + int(stats[label, cv2.CC_STAT_HEIGHT]) - 1
        )

        regions.append(Region(
            id=region_id,
            pixels=np.column_stack((xs, ys)),
            bbox=bbox,
            area=area
        ))

    logger.info(
        f"Flood fill: {len(seeds)} background regions, "
        f"{len(regions)} with area >= {min_area}"
    )

    return regions


def trace_boundary(region: Region) -> List[Point]:
    """
    Polygon outline of a region.

    Returns the four corners of the bounding box, clockwise from the
    top-left, rather than a traced contour.
    """
    bbox = region.bbox
    return [
        Point(bbox.min_x, bbox.min_y),
        Point(bbox.max_x, bbox.min_y),
        Point(bbox.max_x, bbox.max_y),
        Point(bbox.min_x, bbox.max_y),
    ]


def calculate_centroid(region: Region) -> Point:
    """Mean coordinate of all pixels in a region."""
    mean_x, mean_y = region.pixels.mean(axis=0)
    return Point(float(mean_x), float(mean_y))


class RoomDetector:
    """Turn enclosed background regions into rooms."""

    def __init__(self, min_room_area: int = 500):
        self.min_room_area = min_room_area

    def detect_rooms(self, binary: np.ndarray) -> List[Room]:
        """
        Detect rooms in a binary image.

        Args:
            binary: uint8 (H, W) image with walls at 255 and background at 0

        Returns:
            One room per region of at least min_room_area pixels
        """
        regions = flood_fill_regions(binary, self.min_room_area)

        return [
            Room(
                id=str(uuid.uuid4()),
                polygon_vertices=trace_boundary(region),
                centroid=calculate_centroid(region),
                area=region.area,
                bbox=region.bbox
            )
            for region in regions
        ]
