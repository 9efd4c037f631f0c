"""Automatic scale calibration from dimension labels.

Each dimension label is matched with the nearest detected wall; the ratio
of the wall's pixel length to the labelled length gives one pixels-per-cm
estimate. Estimates are only accepted as a calibration when enough of them
agree closely.
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

import numpy as np

from planextract.services.geometry import Point, line_length, point_to_segment_distance
from planextract.services.hough import LineCandidate
from planextract.services.text_parsing import (
    MAX_DIMENSION_CM,
    MIN_DIMENSION_CM,
    TextToken,
    TokenType,
    parse_dimension,
)

logger = logging.getLogger(__name__)

MIN_TOKEN_CONFIDENCE = 60

# Plausible scale range (pixels per cm)
MIN_PIXELS_PER_CM = 0.5
MAX_PIXELS_PER_CM = 20.0


class CalibrationErrorType(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    INCONSISTENT_SCALE = "inconsistent_scale"


@dataclass(frozen=True)
class Measurement:
    """A dimension label matched to a wall."""
    dimension_text: str
    length_cm: int
    length_px: float
    pixels_per_cm: float
    confidence: float
    wall: LineCandidate
    distance: float


@dataclass(frozen=True)
class CalibrationResult:
    """
    Outcome of auto-calibration.

    pixels_per_cm is only set when success is True. Failed results keep
    the measurements and, for inconsistent scales, the average and
    coefficient of variation for manual review.
    """
    success: bool
    pixels_per_cm: Optional[float] = None
    measurements: List[Measurement] = field(default_factory=list)
    cv: Optional[float] = None
    confidence: Optional[float] = None
    error: Optional[str] = None
    error_type: Optional[CalibrationErrorType] = None
    avg_pixels_per_cm: Optional[float] = None


def weighted_average(values: Sequence[float], weights: Sequence[float]) -> float:
    """Sum of value * weight divided by the sum of weights."""
    values = np.asarray(values, dtype=np.float64)
    weights = np.asarray(weights, dtype=np.float64)

    weight_sum = weights.sum()
    if weight_sum == 0:
        raise ValueError("Weights sum to zero")

    return float((values * weights).sum() / weight_sum)


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population standard deviation divided by the mean; 0 for no values."""
    if len(values) == 0:
        return 0.0

    values = np.asarray(values, dtype=np.float64)
    return float(values.std() / values.mean())


def pixels_to_cm(pixels: float, pixels_per_cm: float) -> float:
    return pixels / pixels_per_cm


def cm_to_pixels(cm: float, pixels_per_cm: float) -> float:
    return cm * pixels_per_cm


def find_nearest_wall(
    point: Point,
    walls: Iterable[LineCandidate],
    max_distance: float
) -> Optional[Tuple[LineCandidate, float]]:
    """
    Nearest wall to a point, by point-to-segment distance.

    Returns:
        (wall, distance) for the closest wall strictly within
        max_distance, or None
    """
    nearest = None
    min_dist = float("inf")

    for wall in walls:
        dist = point_to_segment_distance(point, wall)
        if dist < min_dist and dist < max_distance:
            min_dist = dist
            nearest = wall

    if nearest is None:
        return None

    return nearest, min_dist


class ScaleCalibrator:
    """Derive a pixels-per-cm ratio from dimension labels and walls."""

    def __init__(
        self,
        max_distance: float = 100.0,  # max pixels between label and wall
        min_measurements: int = 2,
        max_cv: float = 0.05          # max coefficient of variation (5%)
    ):
        self.max_distance = max_distance
        self.min_measurements = min_measurements
        self.max_cv = max_cv

    def _measure(self, token: TextToken, walls: Sequence[LineCandidate]) -> Optional[Measurement]:
        """Match one dimension label to a wall, or None if it is unusable."""
        if token.type is not TokenType.DIMENSION or token.confidence < MIN_TOKEN_CONFIDENCE:
            return None

        length_cm = parse_dimension(token.text)
        if not length_cm or not MIN_DIMENSION_CM <= length_cm <= MAX_DIMENSION_CM:
            logger.debug(f"Skipping unparseable dimension '{token.text}'")
            return None

        center = Point(token.bbox.center_x, token.bbox.center_y)
        match = find_nearest_wall(center, walls, self.max_distance)
        if match is None:
            logger.debug(f"No wall within {self.max_distance}px of '{token.text}'")
            return None

        wall, dist = match
        length_px = line_length(wall)
        pixels_per_cm = length_px / length_cm

        if not MIN_PIXELS_PER_CM <= pixels_per_cm <= MAX_PIXELS_PER_CM:
            logger.debug(f"Implausible scale {pixels_per_cm:.2f} px/cm for '{token.text}'")
            return None

        return Measurement(
            dimension_text=token.text,
            length_cm=length_cm,
            length_px=length_px,
            pixels_per_cm=pixels_per_cm,
            confidence=token.confidence,
            wall=wall,
            distance=dist
        )

    def calibrate(
        self,
        walls: Sequence[LineCandidate],
        tokens: Iterable[TextToken]
    ) -> CalibrationResult:
        """
        Calibrate the scale.

        Args:
            walls: Detected walls
            tokens: Recognized text; only dimension tokens are used

        Returns:
            CalibrationResult; failures are reported, not raised
        """
        measurements = []
        for token in tokens:
            measurement = self._measure(token, walls)
            if measurement is not None:
                measurements.append(measurement)

        logger.info(f"Calibration: {len(measurements)} usable measurements")

        if len(measurements) < self.min_measurements:
            return CalibrationResult(
                success=False,
                measurements=measurements,
                error=(
                    f"Insufficient dimension annotations found. Need at least "
                    f"{self.min_measurements}, found {len(measurements)}."
                ),
                error_type=CalibrationErrorType.INSUFFICIENT_DATA
            )

        ratios = [m.pixels_per_cm for m in measurements]
        avg_pixels_per_cm = weighted_average(ratios, [m.confidence for m in measurements])
        cv = coefficient_of_variation(ratios)

        if cv > self.max_cv:
            return CalibrationResult(
                success=False,
                measurements=measurements,
                cv=cv,
                avg_pixels_per_cm=avg_pixels_per_cm,
                error=(
                    f"Inconsistent measurements detected (CV: {cv * 100:.1f}%). "
                    f"This may indicate mixed scales or OCR errors. "
                    f"Manual calibration recommended."
                ),
                error_type=CalibrationErrorType.INCONSISTENT_SCALE
            )

        return CalibrationResult(
            success=True,
            pixels_per_cm=avg_pixels_per_cm,
            measurements=measurements,
            cv=cv,
            confidence=float(np.mean([m.confidence for m in measurements])),
            avg_pixels_per_cm=avg_pixels_per_cm
        )


def auto_calibrate(
    walls: Sequence[LineCandidate],
    tokens: Iterable[TextToken],
    max_distance: float = 100.0,
    min_measurements: int = 2,
    max_cv: float = 0.05
) -> CalibrationResult:
    """Calibrate with a one-off ScaleCalibrator."""
    calibrator = ScaleCalibrator(
        max_distance=max_distance,
        min_measurements=min_measurements,
        max_cv=max_cv
    )
    return calibrator.calibrate(walls, tokens)
