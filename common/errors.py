"""
Error taxonomy shared by the validator, executor and configuration layer.

Bounding-box errors carry the exact plain-text message returned to the client
with HTTP 400.
"""

from __future__ import annotations


class BBoxError(ValueError):
    """Base class for a rejected bounding-box query."""

    message = "Invalid bounding box"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MalformedInput(BBoxError):
    """A coordinate is missing or is not a finite number."""

    message = (
        "Usage: ?north=<lat>&south=<lat>&east=<lon>&west=<lon>\n"
        "   or: ?n=<lat>&s=<lat>&e=<lon>&w=<lon>\n"
        "order is not important"
    )


class InvertedBox(BBoxError):
    message = "North must be north of south; east must be east of west"


class LatitudeOutOfRange(BBoxError):
    message = "Latitudes must be between -90 and 90"


class LongitudeOutOfRange(BBoxError):
    message = "Longitudes must be between -180 and 180"


class ExtractionLaunchError(RuntimeError):
    """The extraction executable could not be started."""


class ConfigError(ValueError):
    """An environment variable holds an unusable value."""
