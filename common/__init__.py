"""
Shared building blocks

- types.py: BoundingBox, ExtractionRequest
- errors.py: bounding-box / launch / config errors
- utils.py: strict number parsing, JS-style number rendering
- logging_setup.py: JSON logging to stdout
"""
