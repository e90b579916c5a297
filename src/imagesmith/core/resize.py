"""Resize planning and resampling.

Five resize modes are supported, all derived from the source aspect ratio
``ratio = width / height``:

- exact: target width and height as given, aspect ratio discarded
- exactWidth: width as given, height follows the ratio
- exactHeight: height as given, width follows the ratio
- fit: the whole image fits inside the box, one side exact
- fill: the box is fully covered, the excess is cropped from the center

Planning is pure arithmetic. ``resample`` is the only function here that
touches a backend; it builds the resized copy and leaves the source alone so
the caller decides when to release it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from imagesmith.core.geometry import round_half_away
from imagesmith.domain import Image
from imagesmith.exceptions import InvalidResizeModeError

if TYPE_CHECKING:
    from imagesmith.backends.base import GraphicsBackend


class ResizeMode(str, Enum):
    """Resize policy names."""

    EXACT = "exact"
    EXACT_WIDTH = "exactWidth"
    EXACT_HEIGHT = "exactHeight"
    FIT = "fit"
    FILL = "fill"

    @classmethod
    def parse(cls, mode: "str | ResizeMode") -> "ResizeMode":
        """Look up a mode by name.

        Raises:
            InvalidResizeModeError: If the name is not a known mode
        """
        if isinstance(mode, ResizeMode):
            return mode
        try:
            return cls(mode)
        except ValueError:
            raise InvalidResizeModeError(str(mode)) from None


@dataclass(frozen=True)
class ResizePlan:
    """Target geometry for a resize.

    Attributes:
        width: Width to resample to
        height: Height to resample to
        crop: Final ``(width, height)`` to crop to from the center, fill mode only
    """

    width: int
    height: int
    crop: tuple[int, int] | None = None


def _at_least_one(value: float) -> int:
    return max(1, int(value))


def exact_size(new_width: int, new_height: int) -> tuple[int, int]:
    """Target size for mode exact."""
    return (_at_least_one(new_width), _at_least_one(new_height))


def exact_width_size(width: int, height: int, new_width: int) -> tuple[int, int]:
    """Target size for mode exactWidth: height = round(new_width / ratio).

    Examples:
        >>> exact_width_size(200, 100, 100)
        (100, 50)
    """
    ratio = width / height
    return (_at_least_one(new_width), _at_least_one(round_half_away(new_width / ratio)))


def exact_height_size(width: int, height: int, new_height: int) -> tuple[int, int]:
    """Target size for mode exactHeight: width = new_height * ratio, truncated.

    Examples:
        >>> exact_height_size(200, 100, 50)
        (100, 50)
    """
    ratio = width / height
    return (_at_least_one(new_height * ratio), _at_least_one(new_height))


def fit_size(width: int, height: int, new_width: int, new_height: int) -> tuple[int, int]:
    """Largest size with the source ratio that fits inside the box.

    The width-first candidate is tried before the height-first one.

    Examples:
        >>> fit_size(200, 100, 100, 100)
        (100, 50)
        >>> fit_size(100, 200, 100, 100)
        (50, 100)
    """
    ratio = width / height

    resize_width = new_width
    resize_height = round_half_away(new_width / ratio)

    if resize_width > new_width or resize_height > new_height:
        # Width-first overflows the box, so base the size on height instead
        resize_height = new_height
        resize_width = int(new_height * ratio)

    return (_at_least_one(resize_width), _at_least_one(resize_height))


def fill_size(width: int, height: int, new_width: int, new_height: int) -> tuple[int, int]:
    """Smallest size with the source ratio that covers the whole box.

    Examples:
        >>> fill_size(200, 100, 100, 100)
        (200, 100)
        >>> fill_size(100, 200, 100, 100)
        (100, 200)
    """
    ratio = width / height

    optimum_width = new_width
    optimum_height = round_half_away(new_width / ratio)

    if optimum_width < new_width or optimum_height < new_height:
        # Width-first leaves blank areas, so base the size on height instead
        optimum_width = int(new_height * ratio)
        optimum_height = new_height

    return (_at_least_one(optimum_width), _at_least_one(optimum_height))


def plan_resize(
    mode: "str | ResizeMode",
    width: int,
    height: int,
    new_width: int,
    new_height: int,
) -> ResizePlan:
    """Compute the resize plan for a mode.

    Args:
        mode: Resize mode name
        width: Current width
        height: Current height
        new_width: Requested width (ignored by exactHeight)
        new_height: Requested height (ignored by exactWidth)

    Returns:
        ResizePlan with the resample size and optional crop

    Raises:
        InvalidResizeModeError: If mode is unknown
    """
    resize_mode = ResizeMode.parse(mode)

    match resize_mode:
        case ResizeMode.EXACT:
            return ResizePlan(*exact_size(new_width, new_height))
        case ResizeMode.EXACT_WIDTH:
            return ResizePlan(*exact_width_size(width, height, new_width))
        case ResizeMode.EXACT_HEIGHT:
            return ResizePlan(*exact_height_size(width, height, new_height))
        case ResizeMode.FIT:
            return ResizePlan(*fit_size(width, height, new_width, new_height))
        case ResizeMode.FILL:
            fill_width, fill_height = fill_size(width, height, new_width, new_height)
            return ResizePlan(
                fill_width,
                fill_height,
                crop=(_at_least_one(new_width), _at_least_one(new_height)),
            )


def resample(backend: "GraphicsBackend", image: Image, new_width: int, new_height: int) -> Image:
    """Resample an image into a newly allocated surface.

    The source image is not released. If the copy fails the new surface is
    released before the error propagates.

    Args:
        backend: Backend that owns the image
        image: Source image
        new_width: Target width
        new_height: Target height

    Returns:
        New Image of the requested size
    """
    target = backend.create_blank(new_width, new_height, full_alpha=image.is_alpha_capable())
    try:
        backend.copy_resample(
            image,
            target,
            src_rect=(0, 0, image.width, image.height),
            dst_rect=(0, 0, new_width, new_height),
        )
    except Exception:
        backend.release(target)
        raise

    return image.derive(target.core, new_width, new_height, pixel_format=target.pixel_format)
