"""Extraction Pydantic schemas for API responses."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from planextract.services.calibration import CalibrationErrorType


class Point(BaseModel):
    """2D point coordinates."""
    x: float
    y: float

    model_config = ConfigDict(from_attributes=True)


class BoundingBox(BaseModel):
    """Inclusive pixel bounds."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    model_config = ConfigDict(from_attributes=True)


class Wall(BaseModel):
    """Detected wall segment in pixel coordinates."""
    x1: float
    y1: float
    x2: float
    y2: float
    votes: int = Field(..., description="Hough support, summed for merged walls")

    model_config = ConfigDict(from_attributes=True)


class Measurement(BaseModel):
    """Dimension label matched to a wall during calibration."""
    dimension_text: str
    length_cm: int
    length_px: float
    pixels_per_cm: float
    confidence: float
    wall: Wall
    distance: float

    model_config = ConfigDict(from_attributes=True)


class Calibration(BaseModel):
    """Scale calibration outcome."""
    success: bool
    pixels_per_cm: Optional[float] = Field(
        None,
        description="Only set when calibration succeeded; otherwise units are pixels"
    )
    measurements: List[Measurement] = Field(default_factory=list)
    cv: Optional[float] = None
    confidence: Optional[float] = None
    error: Optional[str] = None
    error_type: Optional[CalibrationErrorType] = None
    avg_pixels_per_cm: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class Room(BaseModel):
    """Named room in editor units."""
    id: str
    name: str
    name_confidence: float
    width_cm: float
    height_cm: float
    position_x: float
    position_y: float
    polygon_vertices: List[Point]
    centroid: Point
    area: int = Field(..., description="Area in pixels")
    bbox: BoundingBox

    model_config = ConfigDict(from_attributes=True)


class ExtractionResponse(BaseModel):
    """Schema for a completed extraction."""
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    walls: List[Wall]
    rooms: List[Room]
    calibration: Calibration
    text: str = Field("", description="All recognized text")

    @classmethod
    def from_result(cls, result) -> "ExtractionResponse":
        return cls(
            width=result.width,
            height=result.height,
            walls=[Wall.model_validate(w) for w in result.walls],
            rooms=[Room.model_validate(r) for r in result.rooms],
            calibration=Calibration.model_validate(result.calibration),
            text=result.ocr_result.full_text
        )


class ExtractionErrorDetail(BaseModel):
    """Error body for failed extractions."""
    code: str
    message: str
