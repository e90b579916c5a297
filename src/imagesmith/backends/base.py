"""Graphics backend interface.

A backend owns the native raster representation and performs every
pixel-level operation: allocation, resampling copies, pixel access,
primitive drawing, rotation, text and codecs. The editor and the core
algorithms only talk to backends through this interface.

Alpha crosses this boundary on an inverted "transparency" scale that runs
from 0 (fully opaque) to ``max_alpha`` (fully transparent), whatever the
backend stores natively.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Any, ClassVar

import numpy as np

from imagesmith.domain import Color, Image, ImageType
from imagesmith.exceptions import InvalidArgumentError

Rect = tuple[int, int, int, int]
"""``(x, y, width, height)``"""

Pixel = tuple[int, int, int, int]
"""``(r, g, b, transparency)``"""

Coordinate = tuple[float, float]


class GraphicsBackend(ABC):
    """Capability interface implemented by each native graphics library."""

    name: ClassVar[str]
    max_alpha: ClassVar[int] = 255

    @abstractmethod
    def is_available(self) -> bool:
        """Probe whether the native library and the features we need are present."""

    def check_owned(self, image: Image) -> Image:
        """Return ``image`` if this backend allocated it.

        Raises:
            InvalidArgumentError: If the image belongs to another backend
        """
        if image.backend != self.name:
            raise InvalidArgumentError(
                f"Image belongs to backend '{image.backend}', not '{self.name}'"
            )
        return image

    # Surfaces

    @abstractmethod
    def create_blank(self, width: int, height: int, full_alpha: bool = False) -> Image:
        """Allocate a surface.

        A regular surface starts opaque black. With ``full_alpha`` it starts
        fully transparent and keeps per-pixel alpha through copies.
        """

    @abstractmethod
    def release(self, image: Image) -> None:
        """Free the native handle. Safe to call on an already released image."""

    @abstractmethod
    def copy_resample(
        self,
        src: Image,
        dst: Image,
        src_rect: Rect,
        dst_rect: Rect,
        blend: bool = False,
    ) -> None:
        """Copy ``src_rect`` of ``src`` into ``dst_rect`` of ``dst``, resampling if sizes differ.

        Source areas outside the source image read as transparent black and
        destination areas outside the destination are dropped. With ``blend``
        translucent source pixels are composited over the destination instead
        of replacing it.
        """

    @abstractmethod
    def get_pixel(self, image: Image, x: int, y: int) -> Pixel:
        """Return ``(r, g, b, transparency)`` at ``(x, y)``."""

    @abstractmethod
    def set_pixel(self, image: Image, x: int, y: int, pixel: Pixel) -> None:
        """Write ``(r, g, b, transparency)`` at ``(x, y)``."""

    @abstractmethod
    def to_array(self, image: Image) -> np.ndarray:
        """Return a ``(height, width, 4)`` uint8 RGBA copy of the pixels."""

    @abstractmethod
    def from_array(self, image: Image, array: np.ndarray) -> Image:
        """Build a new surface from an RGBA array, keeping ``image``'s provenance."""

    # Drawing
    #
    # Primitives raise ValueError, TypeError or OverflowError for geometry
    # the native library rejects, and leave the surface untouched when they do.

    @abstractmethod
    def allocate_color(self, color: Color) -> Any:
        """Translate a Color into the backend's native color value."""

    @abstractmethod
    def draw_line(
        self, image: Image, point1: Coordinate, point2: Coordinate, thickness: int, color: Color
    ) -> None:
        """Draw a straight line."""

    @abstractmethod
    def draw_polyline(
        self, image: Image, points: Sequence[Coordinate], thickness: int, color: Color
    ) -> None:
        """Draw an open polyline through ``points``."""

    @abstractmethod
    def draw_rectangle(
        self,
        image: Image,
        bounds: tuple[float, float, float, float],
        border_size: int,
        border_color: Color | None,
        fill_color: Color | None,
    ) -> None:
        """Draw a rectangle given inclusive ``(x0, y0, x1, y1)`` bounds."""

    @abstractmethod
    def draw_ellipse(
        self,
        image: Image,
        bounds: tuple[float, float, float, float],
        border_size: int,
        border_color: Color | None,
        fill_color: Color | None,
    ) -> None:
        """Draw an ellipse inscribed in inclusive ``(x0, y0, x1, y1)`` bounds."""

    @abstractmethod
    def draw_polygon(
        self,
        image: Image,
        points: Sequence[Coordinate],
        border_size: int,
        border_color: Color | None,
        fill_color: Color | None,
    ) -> None:
        """Draw a closed polygon."""

    @abstractmethod
    def flood_fill(self, image: Image, x: int, y: int, color: Color) -> None:
        """Flood fill the contiguous same-color region containing ``(x, y)``."""

    @abstractmethod
    def render_text(
        self,
        image: Image,
        text: str,
        size: int,
        x: int,
        y: int,
        color: Color,
        font_path: Path | None,
        angle: float,
    ) -> None:
        """Draw text with its baseline starting at ``(x, y)``, rotated counter-clockwise."""

    # Transforms

    @abstractmethod
    def rotate(self, image: Image, angle: float, background: Color) -> Image:
        """Return a new surface rotated counter-clockwise, canvas expanded to fit."""

    @abstractmethod
    def grayscale(self, image: Image) -> None:
        """Convert to grayscale in place, keeping alpha."""

    # Codecs

    @abstractmethod
    def read(self, path: Path, image_type: ImageType) -> Image:
        """Decode an image file. Native decode errors propagate."""

    @abstractmethod
    def write(
        self,
        image: Image,
        path: Path,
        image_type: ImageType,
        quality: int,
        interlace: bool,
    ) -> None:
        """Encode and write an image. Native encode errors propagate."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
