"""Image filters.

Filters take an image and return the filtered image. Grayscale is done by the
backend in place. Dither and Sobel read an RGBA numpy copy of the pixels,
process its luma plane with Pillow and OpenCV respectively, and return a new
surface, leaving release of the old one to the caller.

Alpha is preserved by every filter.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

import cv2
import numpy as np
from PIL import Image as PILImage

from imagesmith.domain import Image

if TYPE_CHECKING:
    from imagesmith.backends.base import GraphicsBackend

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def luminance(rgba: np.ndarray) -> np.ndarray:
    """Return the float32 luma plane of an RGBA array."""
    return rgba[..., :3].astype(np.float32) @ LUMA_WEIGHTS


def _with_gray(rgba: np.ndarray, gray: np.ndarray) -> np.ndarray:
    out = rgba.copy()
    plane = np.clip(np.rint(gray), 0, 255).astype(np.uint8)
    out[..., 0] = plane
    out[..., 1] = plane
    out[..., 2] = plane
    return out


class Filter(ABC):
    """Base class for filters."""

    name: ClassVar[str]

    @abstractmethod
    def apply(self, image: Image, backend: "GraphicsBackend") -> Image:
        """Filter an image.

        Returns either ``image`` itself (modified in place) or a new Image.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Grayscale(Filter):
    """Convert to grayscale using ITU-R 601 luma weights."""

    name = "Grayscale"

    def apply(self, image: Image, backend: "GraphicsBackend") -> Image:
        backend.grayscale(image)
        return image


class Dither(Filter):
    """Floyd-Steinberg dithering of the luma plane to black and white."""

    name = "Dither"

    def apply(self, image: Image, backend: "GraphicsBackend") -> Image:
        rgba = backend.to_array(image)
        plane = np.clip(np.rint(luminance(rgba)), 0, 255).astype(np.uint8)

        bilevel = PILImage.fromarray(plane).convert("1", dither=PILImage.Dither.FLOYDSTEINBERG)
        gray = np.asarray(bilevel.convert("L"), dtype=np.float32)

        return backend.from_array(image, _with_gray(rgba, gray))


class Sobel(Filter):
    """Sobel edge detection on the luma plane; output is the gradient magnitude."""

    name = "Sobel"

    def apply(self, image: Image, backend: "GraphicsBackend") -> Image:
        rgba = backend.to_array(image)
        gray = luminance(rgba)

        # Replicated borders keep flat image edges at zero gradient
        gx = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3, borderType=cv2.BORDER_REPLICATE)
        gy = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3, borderType=cv2.BORDER_REPLICATE)
        magnitude = np.sqrt(gx**2 + gy**2)

        return backend.from_array(image, _with_gray(rgba, magnitude))


FILTER_TYPES: dict[str, type[Filter]] = {
    "Dither": Dither,
    "Grayscale": Grayscale,
    "Sobel": Sobel,
}
