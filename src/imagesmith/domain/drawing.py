"""Drawing object descriptors.

Each shape is an immutable description of geometry plus colors. Rendering is
done elsewhere by dispatching on the concrete type, so the set of shapes is
closed: Line, Rectangle, Ellipse, Polygon, QuadraticBezier and CubicBezier.

A border or fill color of None suppresses that pass.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from numbers import Real
from typing import Any

from imagesmith.domain.color import BLACK, WHITE, Color
from imagesmith.exceptions import InvalidGeometryError

Coordinate = tuple[float, float]


def _as_point(value: Any) -> Any:
    """Normalize list-like pairs to tuples, leaving anything else for validation."""
    if isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 2:
        return (value[0], value[1])
    return value


def _check_point(shape: str, label: str, value: Any) -> None:
    if not (
        isinstance(value, tuple)
        and len(value) == 2
        and all(isinstance(v, Real) and not isinstance(v, bool) for v in value)
    ):
        raise InvalidGeometryError(shape, f"{label} must be an (x, y) pair of numbers, got {value!r}")


def _check_size(shape: str, width: Any, height: Any) -> None:
    for label, value in (("width", width), ("height", height)):
        if not isinstance(value, Real) or value <= 0:
            raise InvalidGeometryError(shape, f"{label} must be a positive number, got {value!r}")


def _check_border(shape: str, border_size: Any) -> None:
    if not isinstance(border_size, int) or border_size < 0:
        raise InvalidGeometryError(shape, f"border size must be a non-negative int, got {border_size!r}")


def _set_colors(obj: Any, *names: str) -> None:
    for name in names:
        object.__setattr__(obj, name, Color.parse(getattr(obj, name)))


@dataclass(frozen=True)
class Line:
    """A straight line between two points.

    Attributes:
        point1: Start point
        point2: End point
        thickness: Line width in pixels
        color: Line color
    """

    point1: Coordinate
    point2: Coordinate
    thickness: int = 1
    color: Color | None = BLACK

    def __post_init__(self) -> None:
        object.__setattr__(self, "point1", _as_point(self.point1))
        object.__setattr__(self, "point2", _as_point(self.point2))
        _set_colors(self, "color")

    def validate(self) -> None:
        _check_point("line", "point1", self.point1)
        _check_point("line", "point2", self.point2)
        if not isinstance(self.thickness, int) or self.thickness < 1:
            raise InvalidGeometryError("line", f"thickness must be >= 1, got {self.thickness!r}")


@dataclass(frozen=True)
class Rectangle:
    """An axis-aligned rectangle.

    ``pos`` is the top-left corner measured from the top-left of the canvas.
    """

    width: int
    height: int
    pos: Coordinate = (0, 0)
    border_size: int = 1
    border_color: Color | None = BLACK
    fill_color: Color | None = WHITE

    def __post_init__(self) -> None:
        object.__setattr__(self, "pos", _as_point(self.pos))
        _set_colors(self, "border_color", "fill_color")

    def validate(self) -> None:
        _check_size("rectangle", self.width, self.height)
        _check_point("rectangle", "pos", self.pos)
        _check_border("rectangle", self.border_size)

    def bounds(self) -> tuple[float, float, float, float]:
        """Return ``(x0, y0, x1, y1)`` with inclusive far corner."""
        x, y = self.pos
        return (x, y, x + self.width - 1, y + self.height - 1)


@dataclass(frozen=True)
class Ellipse:
    """An axis-aligned ellipse inscribed in a ``width`` x ``height`` box at ``pos``."""

    width: int
    height: int
    pos: Coordinate = (0, 0)
    border_size: int = 1
    border_color: Color | None = BLACK
    fill_color: Color | None = WHITE

    def __post_init__(self) -> None:
        object.__setattr__(self, "pos", _as_point(self.pos))
        _set_colors(self, "border_color", "fill_color")

    def validate(self) -> None:
        _check_size("ellipse", self.width, self.height)
        _check_point("ellipse", "pos", self.pos)
        _check_border("ellipse", self.border_size)

    def bounds(self) -> tuple[float, float, float, float]:
        """Return the bounding box as ``(x0, y0, x1, y1)``."""
        x, y = self.pos
        return (x, y, x + self.width - 1, y + self.height - 1)


@dataclass(frozen=True)
class Polygon:
    """A closed polygon through three or more points."""

    points: tuple[Coordinate, ...] = field(default_factory=tuple)
    border_size: int = 1
    border_color: Color | None = BLACK
    fill_color: Color | None = WHITE

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(_as_point(p) for p in self.points))
        _set_colors(self, "border_color", "fill_color")

    def validate(self) -> None:
        if len(self.points) < 3:
            raise InvalidGeometryError(
                "polygon", f"needs at least 3 points, got {len(self.points)}"
            )
        for idx, point in enumerate(self.points):
            _check_point("polygon", f"point {idx}", point)
        _check_border("polygon", self.border_size)


@dataclass(frozen=True)
class QuadraticBezier:
    """A quadratic Bezier curve with one control point."""

    point1: Coordinate
    control: Coordinate
    point2: Coordinate
    color: Color | None = BLACK

    def __post_init__(self) -> None:
        for name in ("point1", "control", "point2"):
            object.__setattr__(self, name, _as_point(getattr(self, name)))
        _set_colors(self, "color")

    def validate(self) -> None:
        for name in ("point1", "control", "point2"):
            _check_point("quadratic bezier", name, getattr(self, name))

    def control_points(self) -> list[Coordinate]:
        return [self.point1, self.control, self.point2]


@dataclass(frozen=True)
class CubicBezier:
    """A cubic Bezier curve with two control points."""

    point1: Coordinate
    control1: Coordinate
    control2: Coordinate
    point2: Coordinate
    color: Color | None = BLACK

    def __post_init__(self) -> None:
        for name in ("point1", "control1", "control2", "point2"):
            object.__setattr__(self, name, _as_point(getattr(self, name)))
        _set_colors(self, "color")

    def validate(self) -> None:
        for name in ("point1", "control1", "control2", "point2"):
            _check_point("cubic bezier", name, getattr(self, name))

    def control_points(self) -> list[Coordinate]:
        return [self.point1, self.control1, self.control2, self.point2]


DrawingObject = Line | Rectangle | Ellipse | Polygon | QuadraticBezier | CubicBezier

DRAWING_OBJECT_TYPES: dict[str, type] = {
    "Line": Line,
    "Rectangle": Rectangle,
    "Ellipse": Ellipse,
    "Polygon": Polygon,
    "QuadraticBezier": QuadraticBezier,
    "CubicBezier": CubicBezier,
}
