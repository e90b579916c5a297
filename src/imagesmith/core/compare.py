"""Perceptual and pixel-exact image comparison.

The difference hash (dHash) shrinks an image to ``width x height`` (9x8 by
default) ignoring the aspect ratio, then records for each row whether every
pixel is brighter than its right-hand neighbour. Similar images produce
hashes that differ in few bits, so the Hamming distance between two hashes
estimates how alike the images are:

- 0: most likely the same image
- 1-10: possibly a variation (rescaled, recompressed, retouched)
- more than 10: most likely a different image
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from imagesmith.core.resize import resample
from imagesmith.domain import Image
from imagesmith.io import read_image
from imagesmith.utils.logging import get_logger

if TYPE_CHECKING:
    from imagesmith.backends.base import GraphicsBackend

logger = get_logger(__name__)

HASH_WIDTH = 9
HASH_HEIGHT = 8
SIMILAR_THRESHOLD = 10

ImageSource = Image | str | Path


@dataclass(frozen=True, slots=True)
class PerceptualHash:
    """A difference hash as a string of ``"0"``/``"1"`` bits, row-major."""

    bits: str

    def __len__(self) -> int:
        return len(self.bits)

    def distance(self, other: "PerceptualHash") -> int:
        """Hamming distance to another hash of the same length.

        Raises:
            ValueError: If the hashes differ in length
        """
        if len(self.bits) != len(other.bits):
            raise ValueError(
                f"Cannot compare hashes of {len(self.bits)} and {len(other.bits)} bits"
            )
        return sum(1 for a, b in zip(self.bits, other.bits) if a != b)

    def to_int(self) -> int:
        return int(self.bits, 2) if self.bits else 0

    def to_hex(self) -> str:
        digits = (len(self.bits) + 3) // 4
        return f"{self.to_int():0{digits}x}"


def _gray(pixel: tuple[int, int, int, int]) -> int:
    r, g, b, _ = pixel
    return (r + g + b) // 3


def difference_hash(
    image: Image,
    backend: "GraphicsBackend",
    width: int = HASH_WIDTH,
    height: int = HASH_HEIGHT,
) -> PerceptualHash:
    """Compute the difference hash of an image.

    The image is resampled into a scratch surface; the caller's surface is
    left untouched.

    Args:
        image: Image to hash
        backend: Backend that owns the image
        width: Columns sampled per row; each row yields ``width - 1`` bits
        height: Rows sampled

    Returns:
        PerceptualHash of ``(width - 1) * height`` bits
    """
    work = resample(backend, image, width, height)
    try:
        bits = []
        for y in range(height):
            left = _gray(backend.get_pixel(work, 0, y))
            for x in range(1, width):
                right = _gray(backend.get_pixel(work, x, y))
                bits.append("1" if left > right else "0")
                left = right
    finally:
        backend.release(work)

    return PerceptualHash("".join(bits))


def _open(source: ImageSource, backend: "GraphicsBackend") -> tuple[Image, bool]:
    """Return an image for ``source`` and whether the caller must release it."""
    if isinstance(source, Image):
        return backend.check_owned(source), False
    return read_image(source, backend), True


def compare(
    image1: ImageSource,
    image2: ImageSource,
    backend: "GraphicsBackend",
    width: int = HASH_WIDTH,
    height: int = HASH_HEIGHT,
) -> int:
    """Hamming distance between the difference hashes of two images.

    Args:
        image1: Image or path
        image2: Image or path
        backend: Backend used to decode paths and sample pixels

    Returns:
        Number of differing hash bits
    """
    first, release_first = _open(image1, backend)
    try:
        second, release_second = _open(image2, backend)
        try:
            distance = difference_hash(first, backend, width, height).distance(
                difference_hash(second, backend, width, height)
            )
        finally:
            if release_second:
                backend.release(second)
    finally:
        if release_first:
            backend.release(first)

    logger.debug("Images compared", distance=distance, backend=backend.name)
    return distance


def equal(image1: ImageSource, image2: ImageSource, backend: "GraphicsBackend") -> bool:
    """Pixel-exact comparison of the RGB channels of two images.

    Alpha is ignored. Pixels are scanned row by row and the scan stops at
    the first difference.

    Args:
        image1: Image or path
        image2: Image or path
        backend: Backend used to decode paths and read pixels

    Returns:
        True if both images have the same size and RGB content
    """
    first, release_first = _open(image1, backend)
    try:
        second, release_second = _open(image2, backend)
        try:
            return _equal_pixels(first, second, backend)
        finally:
            if release_second:
                backend.release(second)
    finally:
        if release_first:
            backend.release(first)


def _equal_pixels(first: Image, second: Image, backend: "GraphicsBackend") -> bool:
    if first.width != second.width or first.height != second.height:
        return False

    for y in range(first.height):
        for x in range(first.width):
            if backend.get_pixel(first, x, y)[:3] != backend.get_pixel(second, x, y)[:3]:
                return False
    return True
