"""imagesmith - Backend-agnostic image editing.

imagesmith wraps a native graphics library (Pillow or OpenCV) behind a fluent
Editor. It resizes with five aspect-ratio policies, crops and overlays with
symbolic positioning, draws vector shapes, and compares images either
perceptually (difference hash) or pixel-exactly.

Example:
    >>> from imagesmith import create_editor
    >>> editor = create_editor()
    >>> editor.open("photo.jpg").resize_fit(200, 200).save("thumb.jpg")

The first available backend from the configured priority list is used.
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

from imagesmith.core.registry import (
    create_blank_image,
    create_drawing_object,
    create_editor,
    create_filter,
    create_image,
    detect_available_backend,
    set_backend_list,
)
from imagesmith.domain import Color, Image, ImageType

__all__ = [
    "Color",
    "Image",
    "ImageType",
    "__author__",
    "__version__",
    "create_blank_image",
    "create_drawing_object",
    "create_editor",
    "create_filter",
    "create_image",
    "detect_available_backend",
    "set_backend_list",
]
