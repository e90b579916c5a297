"""Image I/O layer for imagesmith.

This module sits between the editor and the backend codecs. It owns the
file-system concerns: existence checks, format inference from extensions,
directory creation and encoder parameters.

Key functions:
- read_image: Load an image through a backend
- infer_image_type: Map a file extension to an ImageType
- write_image: Resolve type and quality, create directories, encode
- ensure_directory: Create a target directory with a given mode
"""

from imagesmith.io.reader import infer_image_type, read_image
from imagesmith.io.writer import (
    clamp_quality,
    ensure_directory,
    resolve_save_type,
    write_image,
)

__all__ = [
    "clamp_quality",
    "ensure_directory",
    "infer_image_type",
    "read_image",
    "resolve_save_type",
    "write_image",
]
