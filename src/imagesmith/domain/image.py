"""Pixel surface representation.

An Image wraps the backend-native raster (a Pillow image or a numpy array)
together with the geometry and format metadata the editor needs.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class ImageType(str, Enum):
    """Encoded file format an image came from or is written as."""

    JPEG = "JPEG"
    PNG = "PNG"
    GIF = "GIF"
    UNKNOWN = "UNKNOWN"


class PixelFormat(str, Enum):
    """In-memory pixel layout of a surface."""

    RGB = "RGB"
    RGBA = "RGBA"
    INDEXED = "P"


@dataclass
class Image:
    """A raster surface owned by one editor at a time.

    Attributes:
        core: Backend-native raster handle
        width: Width in pixels, matching the handle's geometry
        height: Height in pixels, matching the handle's geometry
        backend: Name of the backend that allocated the handle
        image_type: Encoded format the image was read from
        pixel_format: In-memory pixel layout
        image_file: Source path, if the image was read from disk
    """

    core: Any = field(repr=False)
    width: int
    height: int
    backend: str
    image_type: ImageType = ImageType.UNKNOWN
    pixel_format: PixelFormat = PixelFormat.RGB
    image_file: Path | None = None

    @property
    def size(self) -> tuple[int, int]:
        """Return ``(width, height)``."""
        return (self.width, self.height)

    @property
    def released(self) -> bool:
        """True once the backend handle has been freed."""
        return self.core is None

    def is_alpha_capable(self) -> bool:
        """Whether the source encoding carries transparency worth preserving."""
        return self.image_type == ImageType.PNG

    def derive(self, core: Any, width: int, height: int, **changes: Any) -> "Image":
        """Build a replacement image that keeps this image's provenance.

        Args:
            core: New backend handle
            width: Width of the new handle
            height: Height of the new handle
            **changes: Other fields to override

        Returns:
            New Image sharing backend, type and source path
        """
        values = {
            "backend": self.backend,
            "image_type": self.image_type,
            "pixel_format": self.pixel_format,
            "image_file": self.image_file,
        }
        values.update(changes)
        return Image(core=core, width=width, height=height, **values)
