"""Image reading.

This module resolves a path to a decoded Image through the active backend
and infers the encoded format from the file extension.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from imagesmith.domain import Image, ImageType
from imagesmith.exceptions import ImageLoadError
from imagesmith.utils.logging import get_logger

if TYPE_CHECKING:
    from imagesmith.backends.base import GraphicsBackend

logger = get_logger(__name__)

_EXTENSION_TYPES = {
    "jpg": ImageType.JPEG,
    "jpeg": ImageType.JPEG,
    "png": ImageType.PNG,
    "gif": ImageType.GIF,
}


def infer_image_type(path: str | Path) -> ImageType:
    """Infer the image type from a file extension.

    Args:
        path: File path

    Returns:
        ImageType, or ImageType.UNKNOWN for unrecognized extensions

    Examples:
        >>> infer_image_type("photo.JPG")
        <ImageType.JPEG: 'JPEG'>
        >>> infer_image_type("notes.txt")
        <ImageType.UNKNOWN: 'UNKNOWN'>
    """
    extension = Path(path).suffix.lower().lstrip(".")
    return _EXTENSION_TYPES.get(extension, ImageType.UNKNOWN)


def read_image(path: str | Path, backend: "GraphicsBackend") -> Image:
    """Load an image file through a backend.

    Args:
        path: Path to the image file
        backend: Backend that decodes and owns the result

    Returns:
        Decoded Image

    Raises:
        ImageLoadError: If the file does not exist or cannot be decoded
    """
    image_path = Path(path)

    if not image_path.exists():
        raise ImageLoadError(str(image_path), "file not found")
    if not image_path.is_file():
        raise ImageLoadError(str(image_path), "not a file")

    try:
        image = backend.read(image_path, infer_image_type(image_path))
    except (OSError, ValueError) as e:
        raise ImageLoadError(str(image_path), str(e)) from e

    logger.debug(
        "Image loaded",
        path=str(image_path),
        width=image.width,
        height=image.height,
        type=image.image_type.value,
        backend=backend.name,
    )
    return image
