"""Floor plan extraction pipeline.

Orchestrates preprocessing, OCR, wall detection, calibration, room
detection and room naming, reporting progress per phase.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional
from dataclasses import dataclass

import numpy as np

from planextract.core.config import Settings, settings
from planextract.core.exceptions import ExtractionError
from planextract.services.calibration import CalibrationResult, ScaleCalibrator, pixels_to_cm
from planextract.services.geometry import Point
from planextract.services.ocr_service import OCRResult, OCRService, TesseractRecognizer
from planextract.services.preprocessing import preprocess_image
from planextract.services.room_detection import BBox, RoomDetector
from planextract.services.room_naming import NamedRoom, RoomNamer
from planextract.services.wall_detection import Wall, WallDetector

logger = logging.getLogger(__name__)


class ExtractionPhase(str, Enum):
    PREPROCESSING = "preprocessing"
    OCR = "ocr"
    WALLS = "walls"
    CALIBRATION = "calibration"
    ROOMS = "rooms"
    NAMING = "naming"
    CONVERTING = "converting"
    COMPLETE = "complete"


PHASE_PROGRESS = {
    ExtractionPhase.PREPROCESSING: 0.1,
    ExtractionPhase.OCR: 0.2,
    ExtractionPhase.WALLS: 0.5,
    ExtractionPhase.CALIBRATION: 0.6,
    ExtractionPhase.ROOMS: 0.7,
    ExtractionPhase.NAMING: 0.8,
    ExtractionPhase.CONVERTING: 0.9,
    ExtractionPhase.COMPLETE: 1.0,
}

ProgressCallback = Callable[[ExtractionPhase, float], None]


@dataclass
class ConvertedRoom:
    """Room in editor units: cm when calibrated, pixels otherwise."""
    id: str
    name: str
    name_confidence: float
    width_cm: float
    height_cm: float
    position_x: float
    position_y: float
    polygon_vertices: List[Point]
    centroid: Point
    area: int
    bbox: BBox


@dataclass
class ExtractionResult:
    """Everything extracted from one floor plan."""
    rooms: List[ConvertedRoom]
    named_rooms: List[NamedRoom]
    walls: List[Wall]
    calibration: CalibrationResult
    ocr_result: OCRResult
    width: int
    height: int


def convert_rooms_to_app_format(
    rooms: List[NamedRoom],
    pixels_per_cm: Optional[float]
) -> List[ConvertedRoom]:
    """
    Size and place rooms by their bounding boxes.

    Args:
        rooms: Named rooms
        pixels_per_cm: Calibration ratio, or None to keep pixel units

    Returns:
        Converted rooms
    """
    def convert(value: float) -> float:
        return pixels_to_cm(value, pixels_per_cm) if pixels_per_cm else value

    return [
        ConvertedRoom(
            id=room.id,
            name=room.name,
            name_confidence=room.name_confidence,
            width_cm=convert(room.bbox.width),
            height_cm=convert(room.bbox.height),
            position_x=convert(room.bbox.min_x),
            position_y=convert(room.bbox.min_y),
            polygon_vertices=room.polygon_vertices,
            centroid=room.centroid,
            area=room.area,
            bbox=room.bbox
        )
        for room in rooms
    ]


class FloorPlanExtractor:
    """Extract walls, rooms, scale and room names from a floor plan image."""

    def __init__(
        self,
        ocr_service: Optional[OCRService] = None,
        config: Settings = settings
    ):
        self.config = config
        self.ocr_service = ocr_service or OCRService(
            lambda: TesseractRecognizer(
                languages=config.OCR_LANGUAGES,
                page_seg_mode=config.OCR_PAGE_SEG_MODE
            )
        )

        self.wall_detector = WallDetector(
            low_threshold=config.EDGE_LOW_THRESHOLD,
            high_threshold=config.EDGE_HIGH_THRESHOLD,
            hough_threshold=config.HOUGH_THRESHOLD,
            min_line_length=config.MIN_LINE_LENGTH,
            angle_threshold=config.WALL_ANGLE_THRESHOLD,
            distance_threshold=config.MERGE_DISTANCE_THRESHOLD,
            merge_angle_threshold=config.MERGE_ANGLE_THRESHOLD
        )
        self.room_detector = RoomDetector(min_room_area=config.MIN_ROOM_AREA)
        self.calibrator = ScaleCalibrator(
            max_distance=config.CALIBRATION_MAX_DISTANCE,
            min_measurements=config.CALIBRATION_MIN_MEASUREMENTS,
            max_cv=config.CALIBRATION_MAX_CV
        )
        self.room_namer = RoomNamer(
            max_distance=config.NAMING_MAX_DISTANCE,
            min_confidence=config.NAMING_MIN_CONFIDENCE,
            default_name=config.DEFAULT_ROOM_NAME
        )

    async def extract(
        self,
        image: np.ndarray,
        progress_callback: Optional[ProgressCallback] = None,
        error_callback: Optional[Callable[[Exception], None]] = None
    ) -> ExtractionResult:
        """
        Run the full extraction.

        Args:
            image: Decoded floor plan (BGR, BGRA or grayscale)
            progress_callback: Called with (phase, progress 0-1)
            error_callback: Called with the error before it is raised

        Returns:
            ExtractionResult

        Raises:
            ExtractionError: No walls or no rooms detected, or OCR failed
        """
        if progress_callback is None:
            progress_callback = lambda phase, progress: None

        def report(phase: ExtractionPhase) -> None:
            progress_callback(phase, PHASE_PROGRESS[phase])

        try:
            report(ExtractionPhase.PREPROCESSING)
            preprocessed = preprocess_image(
                image,
                max_dimension=self.config.MAX_IMAGE_DIMENSION,
                enable_denoising=self.config.ENABLE_DENOISING,
                enable_contrast=self.config.ENABLE_CONTRAST
            )

            report(ExtractionPhase.OCR)
            ocr_result = await asyncio.to_thread(
                self.ocr_service.extract_text, preprocessed.processed
            )

            report(ExtractionPhase.WALLS)
            walls = self.wall_detector.detect_walls(preprocessed.binary)
            if not walls:
                raise ExtractionError(
                    "No walls detected in image. Please ensure the floor plan "
                    "has clear wall lines.",
                    ExtractionError.NO_WALLS_DETECTED
                )

            report(ExtractionPhase.CALIBRATION)
            calibration = self.calibrator.calibrate(walls, ocr_result.dimensions)
            if not calibration.success:
                # Not fatal: coordinates stay in pixels
                logger.warning(f"Auto-calibration failed: {calibration.error}")

            report(ExtractionPhase.ROOMS)
            rooms = self.room_detector.detect_rooms(preprocessed.binary)
            if not rooms:
                raise ExtractionError(
                    "No rooms detected. The image may not contain enclosed "
                    "spaces or the walls may not be clear enough.",
                    ExtractionError.NO_ROOMS_DETECTED
                )

            report(ExtractionPhase.NAMING)
            named_rooms = self.room_namer.assign_names(rooms, ocr_result.room_names)

            report(ExtractionPhase.CONVERTING)
            converted = convert_rooms_to_app_format(
                named_rooms,
                calibration.pixels_per_cm if calibration.success else None
            )

            report(ExtractionPhase.COMPLETE)
            logger.info(
                f"Extraction complete: {len(walls)} walls, {len(converted)} rooms, "
                f"calibrated={calibration.success}"
            )

            return ExtractionResult(
                rooms=converted,
                named_rooms=named_rooms,
                walls=walls,
                calibration=calibration,
                ocr_result=ocr_result,
                width=preprocessed.width,
                height=preprocessed.height
            )
        except Exception as e:
            if error_callback is not None:
                error_callback(e)
            raise
