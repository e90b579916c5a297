"""Graphics backends for imagesmith.

A backend wraps one native graphics library behind the GraphicsBackend
interface. Concrete backends are imported lazily by the registry so that a
missing library only makes that backend unavailable.

Key classes:
- GraphicsBackend: Capability interface every backend implements
- PillowBackend (``imagesmith.backends.pillow``): Pillow
- OpenCVBackend (``imagesmith.backends.opencv``): OpenCV + numpy
"""

from imagesmith.backends.base import Coordinate, GraphicsBackend, Pixel, Rect

BACKEND_PATHS: dict[str, str] = {
    "pillow": "imagesmith.backends.pillow:PillowBackend",
    "opencv": "imagesmith.backends.opencv:OpenCVBackend",
}

__all__ = [
    "BACKEND_PATHS",
    "Coordinate",
    "GraphicsBackend",
    "Pixel",
    "Rect",
]
