"""Classification and parsing of recognized floor plan text.

German architectural plans label walls with lengths like "3.80" or
"2,96⁵" (meters, with an optional superscript half-centimeter), wall
thicknesses like "12/30", room areas like "19.26 m²" and room names in
capitals ("KELLER") or with typical suffixes ("Wohnzimmer").
"""

import re
import math
from enum import Enum
from typing import ClassVar, Optional
from dataclasses import dataclass

SUPERSCRIPTS = "²³⁴⁵⁶⁷⁸⁹⁰"

# Plausible wall dimension range in centimeters
MIN_DIMENSION_CM = 10
MAX_DIMENSION_CM = 2000

WALL_THICKNESS_PATTERN = re.compile(r"([0-9]+)/([0-9]+)")

# Metric lengths; group 1 is whole meters, group 2 the decimal part
DIMENSION_PATTERNS = [
    re.compile(rf"([0-9]+)\.([0-9]+)[{SUPERSCRIPTS}]*"),   # "3.80" or "2.96⁵"
    re.compile(rf"([0-9]+),([0-9]+)[{SUPERSCRIPTS}]*"),    # "3,80"
    re.compile(r"([0-9]+)\.([0-9]+)\s*m", re.IGNORECASE),  # "3.8 m"
    re.compile(r"([0-9]+),([0-9]+)\s*m", re.IGNORECASE),   # "3,8 m"
]

AREA_PATTERN = re.compile(r"([0-9]+\.[0-9]+)\s*m[²2]")

ROOM_NAME_PATTERNS = [
    re.compile(r"[A-ZÄÖÜ][A-ZÄÖÜß\s]{2,}"),  # "KELLER", "TROCKENRAUM"
    re.compile(r".*raum", re.IGNORECASE),
    re.compile(r".*küche", re.IGNORECASE),
    re.compile(r".*keller", re.IGNORECASE),
    re.compile(r".*bad", re.IGNORECASE),
    re.compile(r".*wc", re.IGNORECASE),
    re.compile(r".*flur", re.IGNORECASE),
    re.compile(r".*zimmer", re.IGNORECASE),
    re.compile(r".*gang", re.IGNORECASE),
]


class TokenType(str, Enum):
    """What a piece of recognized text describes."""
    DIMENSION = "dimension"
    ROOM_NAME = "roomName"
    AREA = "area"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned text bounding box."""
    x: float
    y: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @classmethod
    def from_corners(cls, x0: float, y0: float, x1: float, y1: float) -> "BoundingBox":
        return cls(x=x0, y=y0, width=x1 - x0, height=y1 - y0)


@dataclass(frozen=True)
class TextToken:
    """Recognized word with confidence (0-100) and position."""
    text: str
    confidence: float
    bbox: BoundingBox

    type: ClassVar[TokenType] = TokenType.UNKNOWN


@dataclass(frozen=True)
class DimensionToken(TextToken):
    length_cm: Optional[int] = None

    type: ClassVar[TokenType] = TokenType.DIMENSION


@dataclass(frozen=True)
class RoomNameToken(TextToken):
    type: ClassVar[TokenType] = TokenType.ROOM_NAME


@dataclass(frozen=True)
class AreaToken(TextToken):
    area_m2: Optional[float] = None

    type: ClassVar[TokenType] = TokenType.AREA


@dataclass(frozen=True)
class UnknownToken(TextToken):
    type: ClassVar[TokenType] = TokenType.UNKNOWN


def classify_text(text: str) -> TokenType:
    """Classify text as a dimension, area, room name or unknown."""
    if WALL_THICKNESS_PATTERN.fullmatch(text):
        return TokenType.DIMENSION
    if any(p.fullmatch(text) for p in DIMENSION_PATTERNS):
        return TokenType.DIMENSION

    if AREA_PATTERN.fullmatch(text):
        return TokenType.AREA

    if any(p.fullmatch(text) for p in ROOM_NAME_PATTERNS):
        return TokenType.ROOM_NAME

    return TokenType.UNKNOWN


def make_token(text: str, confidence: float, bbox: BoundingBox) -> TextToken:
    """Classify text and build the matching token variant."""
    text = text.strip()
    token_type = classify_text(text)

    if token_type is TokenType.DIMENSION:
        return DimensionToken(text, confidence, bbox, length_cm=parse_dimension(text))
    if token_type is TokenType.AREA:
        return AreaToken(text, confidence, bbox, area_m2=parse_area(text))
    if token_type is TokenType.ROOM_NAME:
        return RoomNameToken(text, confidence, bbox)
    return UnknownToken(text, confidence, bbox)


def parse_dimension(text: str) -> Optional[int]:
    """
    Parse a dimension label to centimeters.

    "3.80" -> 380, "2,96⁵" -> 296, "3.8 m" -> 380, "12/30" -> 12 (the
    first value of a wall thickness label). A single decimal digit counts
    tenths of a meter, longer decimal parts are taken as centimeters.

    Returns:
        Length in cm, or None if the text is not a dimension or lies
        outside the plausible range
    """
    text = text.strip().rstrip(SUPERSCRIPTS)

    value = None

    wall_match = WALL_THICKNESS_PATTERN.fullmatch(text)
    if wall_match:
        value = int(wall_match.group(1))
    else:
        for pattern in DIMENSION_PATTERNS:
            match = pattern.fullmatch(text)
            if match:
                whole = int(match.group(1))
                decimals = match.group(2)
                scale = 10 if len(decimals) == 1 else 1
                value = whole * 100 + int(decimals) * scale
                break

    if value is None or not MIN_DIMENSION_CM <= value <= MAX_DIMENSION_CM:
        return None

    return value


def parse_area(text: str) -> Optional[float]:
    """Parse an area label like "19.26 m²" to square meters."""
    match = AREA_PATTERN.fullmatch(text.strip())
    if match:
        return float(match.group(1))
    return None


def _center(obj):
    if hasattr(obj, "center_x"):
        return obj.center_x, obj.center_y
    return obj.x, obj.y


def bbox_distance(a, b) -> float:
    """
    Distance between the centers of two boxes or points.

    Text bounding boxes contribute their center, anything else its x, y.
    """
    x1, y1 = _center(a)
    x2, y2 = _center(b)
    return math.hypot(x2 - x1, y2 - y1)
