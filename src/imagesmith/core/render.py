"""Drawing object rendering.

Dispatches each drawing object variant to the matching backend primitive.
Curves are flattened to polylines first. Backends draw each shape on a
scratch layer and composite it in one step, so a shape that fails
validation or rendering leaves the surface untouched.
"""

from typing import TYPE_CHECKING

from imagesmith.core._bezier import flatten_cubic, flatten_quadratic
from imagesmith.domain import (
    CubicBezier,
    DrawingObject,
    Ellipse,
    Image,
    Line,
    Polygon,
    QuadraticBezier,
    Rectangle,
)
from imagesmith.exceptions import InvalidDrawingObjectError, InvalidGeometryError

if TYPE_CHECKING:
    from imagesmith.backends.base import GraphicsBackend

# Maximum deviation of a flattened curve from the true curve, in pixels
BEZIER_TOLERANCE = 0.25


def render(obj: DrawingObject, image: Image, backend: "GraphicsBackend") -> None:
    """Draw a shape onto an image.

    Args:
        obj: Drawing object to render
        image: Target surface, modified in place
        backend: Backend that owns the surface

    Raises:
        InvalidGeometryError: If the shape's geometry is invalid or the
            backend rejects it
        InvalidDrawingObjectError: If obj is not a drawing object
    """
    match obj:
        case Line():
            obj.validate()
            if obj.color is not None:
                _call(
                    "line",
                    backend.draw_line,
                    image,
                    obj.point1,
                    obj.point2,
                    obj.thickness,
                    obj.color,
                )

        case Rectangle():
            obj.validate()
            _call(
                "rectangle",
                backend.draw_rectangle,
                image,
                obj.bounds(),
                obj.border_size,
                obj.border_color,
                obj.fill_color,
            )

        case Ellipse():
            obj.validate()
            _call(
                "ellipse",
                backend.draw_ellipse,
                image,
                obj.bounds(),
                obj.border_size,
                obj.border_color,
                obj.fill_color,
            )

        case Polygon():
            obj.validate()
            _call(
                "polygon",
                backend.draw_polygon,
                image,
                list(obj.points),
                obj.border_size,
                obj.border_color,
                obj.fill_color,
            )

        case QuadraticBezier():
            obj.validate()
            if obj.color is not None:
                points = flatten_quadratic(obj.control_points(), BEZIER_TOLERANCE)
                _call("quadratic bezier", backend.draw_polyline, image, points, 1, obj.color)

        case CubicBezier():
            obj.validate()
            if obj.color is not None:
                points = flatten_cubic(obj.control_points(), BEZIER_TOLERANCE)
                _call("cubic bezier", backend.draw_polyline, image, points, 1, obj.color)

        case _:
            raise InvalidDrawingObjectError(type(obj).__name__)


def _call(shape: str, primitive, *args) -> None:  # noqa: ANN001
    try:
        primitive(*args)
    except (ValueError, TypeError, OverflowError) as e:
        raise InvalidGeometryError(shape, str(e)) from e
