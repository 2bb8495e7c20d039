from __future__ import annotations

from typing import Mapping, Optional

from common.errors import MalformedInput
from common.types import BoundingBox
from common.utils import parse_finite


# (long key, short key); the long key wins when both carry a value.
_KEYS = {
    "north": ("north", "n"),
    "south": ("south", "s"),
    "east": ("east", "e"),
    "west": ("west", "w"),
}


def _lookup(query: Mapping[str, Optional[str]], long_key: str, short_key: str) -> Optional[str]:
    value = query.get(long_key)
    if value is None or not value.strip():
        value = query.get(short_key)
    return value


def parse_bbox(query: Mapping[str, Optional[str]]) -> BoundingBox:
    """
    Turn raw query parameters into a BoundingBox.

    Raises (first failing check wins):
      MalformedInput      - a coordinate is missing or not a finite number
      InvertedBox         - north <= south or east <= west
      LatitudeOutOfRange  - north/south outside [-90, 90]
      LongitudeOutOfRange - east/west outside [-180, 180]
    """
    values = {}
    for name, (long_key, short_key) in _KEYS.items():
        v = parse_finite(_lookup(query, long_key, short_key))
        if v is None:
            raise MalformedInput()
        values[name] = v
    return BoundingBox(**values)
