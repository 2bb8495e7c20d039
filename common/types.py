from __future__ import annotations

from dataclasses import dataclass
from typing import List

from common.errors import InvertedBox, LatitudeOutOfRange, LongitudeOutOfRange
from common.utils import format_number


# Marker telling the extraction program to write to stdout instead of a file.
STDOUT_MARKER = "-"


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Geographic rectangle in WGS84 degrees.

    Attributes:
        north, south: latitude bounds, north > south, both in [-90, 90].
        east, west: longitude bounds, east > west, both in [-180, 180].

    Checks run in a fixed order (ordering, then latitude, then longitude) so
    the first violated rule decides which error is raised.
    """
    north: float
    south: float
    east: float
    west: float

    def __post_init__(self) -> None:
        if self.north <= self.south or self.east <= self.west:
            raise InvertedBox()
        if not (-90.0 <= self.south <= 90.0) or not (-90.0 <= self.north <= 90.0):
            raise LatitudeOutOfRange()
        if not (-180.0 <= self.west <= 180.0) or not (-180.0 <= self.east <= 180.0):
            raise LongitudeOutOfRange()

    @property
    def lat_mid(self) -> float:
        return (self.north + self.south) / 2

    @property
    def lon_mid(self) -> float:
        return (self.east + self.west) / 2


@dataclass(frozen=True, slots=True)
class ExtractionRequest:
    """A validated box plus everything derived from it for one extraction."""
    bbox: BoundingBox

    @property
    def filename(self) -> str:
        return f"osm_export_{format_number(self.bbox.lat_mid)}_{format_number(self.bbox.lon_mid)}.pbf"

    @property
    def content_disposition(self) -> str:
        return f"attachment; filename={self.filename}"

    def argv(self, db_path: str) -> List[str]:
        """Positional arguments: db, south, west, north, east, stdout marker."""
        b = self.bbox
        return [
            db_path,
            format_number(b.south),
            format_number(b.west),
            format_number(b.north),
            format_number(b.east),
            STDOUT_MARKER,
        ]
