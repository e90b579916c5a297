"""Image writing.

This module handles output type resolution, directory creation and
quality clamping before handing the surface to the backend encoder.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from imagesmith.domain import Image, ImageType
from imagesmith.exceptions import DirectoryCreateError, ImageSaveError
from imagesmith.io.reader import infer_image_type
from imagesmith.utils.logging import get_logger

if TYPE_CHECKING:
    from imagesmith.backends.base import GraphicsBackend

logger = get_logger(__name__)

DEFAULT_JPEG_QUALITY = 75
DEFAULT_PERMISSION = 0o755


def ensure_directory(directory: Path, permission: int = DEFAULT_PERMISSION) -> None:
    """Create a directory and its parents if missing.

    Args:
        directory: Directory path
        permission: Mode for created directories

    Raises:
        DirectoryCreateError: If the directory cannot be created
    """
    if directory.is_dir():
        return

    try:
        os.makedirs(directory, mode=permission, exist_ok=True)
    except OSError as e:
        raise DirectoryCreateError(str(directory), e.strerror or str(e)) from e

    logger.debug("Directory created", path=str(directory), mode=oct(permission))


def resolve_save_type(path: Path, image_type: ImageType | str | None, image: Image) -> ImageType:
    """Decide which format to encode as.

    An explicit type wins. Otherwise the extension decides, and if that is
    not recognized the image's own source type is used. Anything still
    unknown is written as JPEG.
    """
    if image_type is not None:
        try:
            return ImageType(str(image_type).upper())
        except ValueError:
            return ImageType.JPEG

    inferred = infer_image_type(path)
    if inferred == ImageType.UNKNOWN:
        inferred = image.image_type
    if inferred == ImageType.UNKNOWN:
        return ImageType.JPEG
    return inferred


def clamp_quality(quality: int | None, default: int = DEFAULT_JPEG_QUALITY) -> int:
    """Clamp JPEG quality to 0-100, substituting ``default`` for None.

    Examples:
        >>> clamp_quality(None)
        75
        >>> clamp_quality(150)
        100
        >>> clamp_quality(-5)
        0
    """
    if quality is None:
        quality = default
    return max(0, min(100, int(quality)))


def write_image(
    image: Image,
    path: str | Path,
    backend: "GraphicsBackend",
    image_type: ImageType | str | None = None,
    quality: int | None = None,
    interlace: bool = False,
    permission: int = DEFAULT_PERMISSION,
    default_quality: int = DEFAULT_JPEG_QUALITY,
) -> ImageType:
    """Encode and write an image.

    Args:
        image: Image to write
        path: Destination file path
        backend: Backend that owns the image
        image_type: Output type, or None to infer
        quality: JPEG quality 0-100, or None for ``default_quality``
        interlace: Write progressive JPEG
        permission: Mode for directories created on the way
        default_quality: Quality used when ``quality`` is None

    Returns:
        The ImageType that was written

    Raises:
        DirectoryCreateError: If the target directory cannot be created
        ImageSaveError: If encoding or writing fails
    """
    target = Path(path)
    save_type = resolve_save_type(target, image_type, image)

    ensure_directory(target.parent, permission)

    try:
        backend.write(
            image,
            target,
            save_type,
            clamp_quality(quality, default_quality),
            interlace,
        )
    except (OSError, ValueError) as e:
        raise ImageSaveError(str(target), str(e)) from e

    logger.debug("Image saved", path=str(target), type=save_type.value, backend=backend.name)
    return save_type
