"""Assign recognized room names to detected rooms."""

import logging
from functools import cmp_to_key
from typing import List, Optional, Sequence, Set, Tuple
from dataclasses import dataclass, fields

from planextract.services.room_detection import Room
from planextract.services.text_parsing import TextToken, bbox_distance

logger = logging.getLogger(__name__)

# Candidates closer than this in distance are ranked by confidence instead
DISTANCE_TIE_TOLERANCE = 20

SOURCE_OCR = "ocr"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class NamedRoom(Room):
    """Room with a display name."""
    name: str = "Raum"
    name_confidence: float = 0.0
    name_source: str = SOURCE_DEFAULT
    name_distance: Optional[float] = None


def capitalize_room_name(name: str) -> str:
    """Turn all-caps OCR text like "KÜCHE" into "Küche"; keep mixed case."""
    if name == name.upper():
        return name[:1] + name[1:].lower()
    return name


def _compare_candidates(a: Tuple[TextToken, float], b: Tuple[TextToken, float]) -> int:
    """Order by distance, or by confidence when distances are close."""
    (token_a, dist_a), (token_b, dist_b) = a, b

    if abs(dist_a - dist_b) < DISTANCE_TIE_TOLERANCE:
        return (token_b.confidence > token_a.confidence) - (token_b.confidence < token_a.confidence)
    return (dist_a > dist_b) - (dist_a < dist_b)


def match_room_name(
    room: Room,
    candidates: Sequence[TextToken],
    used_names: Set[str],
    max_distance: float
) -> Optional[Tuple[TextToken, float]]:
    """
    Pick the best unused name token for a room.

    Args:
        room: Room to name
        candidates: Name tokens that passed the confidence filter
        used_names: Texts already assigned to other rooms
        max_distance: Maximum centroid to label distance

    Returns:
        (token, distance) or None if no token is close enough
    """
    nearby = []
    for token in candidates:
        if token.text in used_names:
            continue
        dist = bbox_distance(room.centroid, token.bbox)
        if dist < max_distance:
            nearby.append((token, dist))

    if not nearby:
        return None

    nearby.sort(key=cmp_to_key(_compare_candidates))
    return nearby[0]


def _with_name(room: Room, **name_fields) -> NamedRoom:
    room_fields = {f.name: getattr(room, f.name) for f in fields(Room)}
    return NamedRoom(**room_fields, **name_fields)


class RoomNamer:
    """Greedy nearest-label room naming."""

    def __init__(
        self,
        max_distance: float = 200.0,  # max pixels from label to room centroid
        min_confidence: float = 60.0,
        default_name: str = "Raum"
    ):
        self.max_distance = max_distance
        self.min_confidence = min_confidence
        self.default_name = default_name

    def assign_names(self, rooms: Sequence[Room], name_tokens: Sequence[TextToken]) -> List[NamedRoom]:
        """
        Name rooms in order, each label text being used at most once.

        Rooms without a usable label get the default name.
        """
        candidates = [t for t in name_tokens if t.confidence >= self.min_confidence]
        used_names: Set[str] = set()

        named = []
        for room in rooms:
            match = match_room_name(room, candidates, used_names, self.max_distance)

            if match is None:
                named.append(_with_name(
                    room,
                    name=self.default_name,
                    name_confidence=0.0,
                    name_source=SOURCE_DEFAULT
                ))
                continue

            token, dist = match
            used_names.add(token.text)
            named.append(_with_name(
                room,
                name=capitalize_room_name(token.text),
                name_confidence=token.confidence,
                name_source=SOURCE_OCR,
                name_distance=dist
            ))

        logger.info(
            f"Room naming: {sum(r.name_source == SOURCE_OCR for r in named)} "
            f"of {len(named)} rooms named from OCR"
        )

        return named


def assign_room_names(
    rooms: Sequence[Room],
    name_tokens: Sequence[TextToken],
    max_distance: float = 200.0,
    min_confidence: float = 60.0,
    default_name: str = "Raum"
) -> List[NamedRoom]:
    """Name rooms with a one-off RoomNamer."""
    namer = RoomNamer(
        max_distance=max_distance,
        min_confidence=min_confidence,
        default_name=default_name
    )
    return namer.assign_names(rooms, name_tokens)
