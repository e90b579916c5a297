"""Position resolution for crop, overlay and fill-resize.

This module maps symbolic positions ("left", "center", "bottom", ...) and raw
pixel offsets to integer offsets of a piece of content inside a container.
Axes are resolved independently.

All functions are pure and stateless. No bounds clamping is done: a resolved
offset may be negative or push the content past the container edge, and the
caller decides what that means.
"""

import math
from enum import Enum
from numbers import Real


class Position(str, Enum):
    """Symbolic alignment keywords."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"
    CENTER = "center"


_START = frozenset({Position.LEFT.value, Position.TOP.value})
_END = frozenset({Position.RIGHT.value, Position.BOTTOM.value})

PositionValue = int | float | str | Position


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's ``round`` rounds halves to even; offsets and resize candidates
    use the conventional rule instead so that 2.5 -> 3 and -2.5 -> -3.

    Examples:
        >>> round_half_away(2.5)
        3
        >>> round_half_away(-2.5)
        -3
        >>> round_half_away(2.4)
        2
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def resolve_axis(position: PositionValue, container_extent: int, content_extent: int) -> int:
    """Resolve a position on one axis to a pixel offset.

    Args:
        position: Pixel offset, or one of "left"/"top" (start),
            "right"/"bottom" (end), "center". Any real number is an
            offset (floats truncate toward zero); unrecognized keywords
            resolve as "center".
        container_extent: Size of the container along this axis
        content_extent: Size of the content along this axis

    Returns:
        Offset of the content's leading edge from the container's

    Examples:
        >>> resolve_axis("center", 100, 20)
        40
        >>> resolve_axis("left", 100, 20)
        0
        >>> resolve_axis("right", 100, 20)
        80
        >>> resolve_axis(-15, 100, 20)
        -15
    """
    if isinstance(position, bool):
        raise TypeError("position must be an int or a keyword, not bool")

    if isinstance(position, Real):
        return int(position)
    if not isinstance(position, str):
        raise TypeError(f"position must be a number or a keyword, got {position!r}")

    keyword = position.value if isinstance(position, Position) else position.lower()

    if keyword in _START:
        return 0
    if keyword in _END:
        return container_extent - content_extent
    return round_half_away(container_extent / 2 - content_extent / 2)


def resolve_position(
    x: PositionValue,
    y: PositionValue,
    container_size: tuple[int, int],
    content_size: tuple[int, int],
) -> tuple[int, int]:
    """Resolve an (x, y) position pair against container and content sizes.

    Args:
        x: Horizontal position (offset or keyword)
        y: Vertical position (offset or keyword)
        container_size: ``(width, height)`` of the container
        content_size: ``(width, height)`` of the content

    Returns:
        ``(x, y)`` pixel offset

    Examples:
        >>> resolve_position("center", "center", (100, 100), (50, 50))
        (25, 25)
    """
    return (
        resolve_axis(x, container_size[0], content_size[0]),
        resolve_axis(y, container_size[1], content_size[1]),
    )


def parse_extent(value: int | float | str, base_extent: int) -> int:
    """Interpret an overlay dimension.

    Args:
        value: Pixel count, numeric string, or percentage string such as "50%"
        base_extent: Extent the percentage is taken of

    Returns:
        Extent in whole pixels

    Raises:
        ValueError: If the value is neither numeric nor a percentage

    Examples:
        >>> parse_extent("50%", 300)
        150
        >>> parse_extent("120", 300)
        120
    """
    if isinstance(value, (int, float)):
        return int(value)

    text = value.strip()
    if text.endswith("%"):
        return int(float(text[:-1]) / 100 * base_extent)
    return int(float(text))
