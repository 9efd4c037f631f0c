"""Floor plan extraction API endpoints."""

import os
import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from planextract.core.config import settings
from planextract.core.exceptions import ExtractionError, OCRError
from planextract.schemas.extraction import ExtractionResponse
from planextract.services.floor_plan_extractor import FloorPlanExtractor
from planextract.services.preprocessing import decode_image

logger = logging.getLogger(__name__)

router = APIRouter()


ALLOWED_FILE_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/webp": ".webp",
}

# File extensions that are allowed (for fallback detection)
ALLOWED_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.bmp', '.tiff', '.tif', '.webp'}


@lru_cache
def get_extractor() -> FloorPlanExtractor:
    """Shared extractor configured from settings."""
    return FloorPlanExtractor(config=settings)


def validate_file_type(upload_file: UploadFile) -> bool:
    """Validate that the uploaded file is an allowed image type."""
    if upload_file.content_type and upload_file.content_type in ALLOWED_FILE_TYPES:
        return True

    # Fallback: check extension
    if upload_file.filename:
        ext = os.path.splitext(upload_file.filename)[1].lower()
        if ext in ALLOWED_EXTENSIONS:
            return True

    return False


@router.post("/", response_model=ExtractionResponse)
async def extract_floor_plan(
    image: UploadFile = File(..., description="Floor plan image (PNG, JPG, BMP, TIFF, WebP)"),
    extractor: FloorPlanExtractor = Depends(get_extractor)
):
    """
    Extract structured data from a floor plan image.

    - **Walls** - Hough line detection on the binarized plan
    - **Rooms** - Enclosed background regions
    - **Scale** - Calibrated from dimension labels (pixels per cm)
    - **Room names** - Matched from OCR labels

    Room sizes are in centimeters when calibration succeeds, pixels otherwise.
    """
    if not validate_file_type(image):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed extensions: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

    content = await image.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {settings.MAX_UPLOAD_SIZE // (1024*1024)}MB"
        )

    try:
        decoded = decode_image(content)
    except ValueError:
        raise HTTPException(status_code=400, detail="Could not read image data")

    try:
        result = await extractor.extract(decoded)
    except OCRError as e:
        logger.error(f"Extraction failed: {e}")
        raise HTTPException(status_code=502, detail={"code": e.code, "message": e.message})
    except ExtractionError as e:
        logger.info(f"Extraction rejected: {e.code}")
        raise HTTPException(status_code=422, detail={"code": e.code, "message": e.message})

    return ExtractionResponse.from_result(result)
