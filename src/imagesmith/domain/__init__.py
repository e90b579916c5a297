"""Domain models for imagesmith.

This module contains the value types the editor works with. They are
independent of any particular graphics backend.

Key classes:
- Color: An immutable RGBA color
- Image: A raster surface plus its geometry and format metadata
- ImageType / PixelFormat: Encoded format and in-memory layout
- Line, Rectangle, Ellipse, Polygon, QuadraticBezier, CubicBezier: Shapes
"""

from imagesmith.domain.color import BLACK, WHITE, Color
from imagesmith.domain.drawing import (
    DRAWING_OBJECT_TYPES,
    CubicBezier,
    DrawingObject,
    Ellipse,
    Line,
    Polygon,
    QuadraticBezier,
    Rectangle,
)
from imagesmith.domain.image import Image, ImageType, PixelFormat

__all__: list[str] = [
    # Enums
    "ImageType",
    "PixelFormat",
    # Core types
    "BLACK",
    "WHITE",
    "Color",
    "Image",
    # Drawing objects
    "DRAWING_OBJECT_TYPES",
    "CubicBezier",
    "DrawingObject",
    "Ellipse",
    "Line",
    "Polygon",
    "QuadraticBezier",
    "Rectangle",
]
