"""Unit tests for drawing object rendering dispatch."""

from unittest.mock import MagicMock

import pytest

from imagesmith.core.render import render
from imagesmith.domain import (
    BLACK,
    Color,
    CubicBezier,
    Ellipse,
    Image,
    Line,
    Polygon,
    QuadraticBezier,
    Rectangle,
)
from imagesmith.exceptions import InvalidDrawingObjectError, InvalidGeometryError


@pytest.fixture
def image() -> Image:
    return Image(core="core", width=100, height=100, backend="mock")


@pytest.fixture
def backend() -> MagicMock:
    return MagicMock()


class TestRenderDispatch:
    """Tests that each shape reaches the matching backend primitive."""

    def test_line(self, image: Image, backend: MagicMock) -> None:
        """Test Line goes to draw_line."""
        render(Line((0, 0), (10, 5), 3, "#ff0000"), image, backend)
        backend.draw_line.assert_called_once_with(
            image, (0, 0), (10, 5), 3, Color(255, 0, 0)
        )

    def test_line_without_color_draws_nothing(self, image: Image, backend: MagicMock) -> None:
        """Test a line with color None is skipped."""
        render(Line((0, 0), (10, 5), color=None), image, backend)
        backend.draw_line.assert_not_called()

    def test_rectangle(self, image: Image, backend: MagicMock) -> None:
        """Test Rectangle passes inclusive bounds and both colors."""
        render(Rectangle(10, 20, (5, 5), 2, "#000000", None), image, backend)
        backend.draw_rectangle.assert_called_once_with(image, (5, 5, 14, 24), 2, BLACK, None)

    def test_ellipse(self, image: Image, backend: MagicMock) -> None:
        """Test Ellipse goes to draw_ellipse."""
        render(Ellipse(10, 10), image, backend)
        backend.draw_ellipse.assert_called_once()

    def test_polygon(self, image: Image, backend: MagicMock) -> None:
        """Test Polygon passes its points as a list."""
        render(Polygon(((0, 0), (10, 0), (5, 5))), image, backend)
        args = backend.draw_polygon.call_args.args
        assert args[1] == [(0, 0), (10, 0), (5, 5)]

    def test_quadratic_bezier_uses_polyline(self, image: Image, backend: MagicMock) -> None:
        """Test curves are flattened and drawn as a 1px polyline."""
        render(QuadraticBezier((0, 0), (50, 100), (100, 0)), image, backend)
        _, points, thickness, color = backend.draw_polyline.call_args.args
        assert points[0] == (0, 0) and points[-1] == (100, 0)
        assert len(points) > 2
        assert thickness == 1
        assert color == BLACK

    def test_cubic_bezier_uses_polyline(self, image: Image, backend: MagicMock) -> None:
        """Test cubic curves are flattened too."""
        render(CubicBezier((0, 0), (0, 50), (100, 50), (100, 0)), image, backend)
        backend.draw_polyline.assert_called_once()

    def test_unknown_object(self, image: Image, backend: MagicMock) -> None:
        """Test anything that is not a shape is rejected."""
        with pytest.raises(InvalidDrawingObjectError):
            render("circle", image, backend)  # type: ignore[arg-type]


class TestRenderValidation:
    """Tests that invalid geometry never reaches the backend."""

    def test_degenerate_polygon(self, image: Image, backend: MagicMock) -> None:
        """Test a two-point polygon fails before drawing."""
        with pytest.raises(InvalidGeometryError):
            render(Polygon(((0, 0), (1, 1))), image, backend)
        backend.draw_polygon.assert_not_called()

    def test_backend_value_error_wrapped(self, image: Image, backend: MagicMock) -> None:
        """Test backend rejections surface as InvalidGeometryError."""
        backend.draw_ellipse.side_effect = ValueError("x1 must be greater than or equal to x0")
        with pytest.raises(InvalidGeometryError, match="ellipse"):
            render(Ellipse(10, 10), image, backend)
