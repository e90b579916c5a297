"""Integration tests running the same editing scenarios on every backend.

Both backends must agree on geometry, on the inverted alpha convention
(0 opaque, max_alpha transparent) and on file round trips.
"""

import importlib
from collections.abc import Iterator
from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image as PILImage

from imagesmith.backends import BACKEND_PATHS, GraphicsBackend
from imagesmith.core import Editor
from imagesmith.domain import BLACK, Color, ImageType, PixelFormat
from imagesmith.exceptions import InvalidArgumentError, InvalidGeometryError

REQUIREMENTS = {"pillow": "PIL", "opencv": "cv2"}


@pytest.fixture(params=sorted(BACKEND_PATHS))
def backend(request) -> GraphicsBackend:
    pytest.importorskip(REQUIREMENTS[request.param])
    module_name, _, class_name = BACKEND_PATHS[request.param].partition(":")
    return getattr(importlib.import_module(module_name), class_name)()


@pytest.fixture
def editor(backend: GraphicsBackend) -> Iterator[Editor]:
    with Editor(backend) as editor:
        yield editor


def rgb(editor: Editor, x: int, y: int) -> tuple[int, int, int]:
    return editor.backend.get_pixel(editor.get_image(), x, y)[:3]


class TestSurfaces:
    """Tests for allocation and pixel access."""

    def test_available(self, backend):
        assert backend.is_available()

    def test_blank_is_opaque_black(self, backend):
        image = backend.create_blank(4, 3)
        assert image.size == (4, 3)
        assert image.backend == backend.name
        assert image.pixel_format == PixelFormat.RGB
        assert backend.get_pixel(image, 3, 2) == (0, 0, 0, 0)

    def test_full_alpha_blank_is_transparent(self, backend):
        image = backend.create_blank(2, 2, full_alpha=True)
        assert image.pixel_format == PixelFormat.RGBA
        assert backend.get_pixel(image, 0, 0)[3] == backend.max_alpha

    def test_pixel_round_trip(self, backend):
        image = backend.create_blank(2, 2)
        backend.set_pixel(image, 1, 0, (10, 20, 30, 40))
        assert backend.get_pixel(image, 1, 0) == (10, 20, 30, 40)

    def test_array_is_rgba(self, backend):
        image = backend.create_blank(3, 2)
        backend.set_pixel(image, 0, 0, (255, 0, 0, 0))
        array = backend.to_array(image)
        assert array.shape == (2, 3, 4)
        assert tuple(array[0, 0]) == (255, 0, 0, 255)

    def test_from_array_keeps_provenance(self, backend):
        image = backend.create_blank(3, 2)
        image.image_type = ImageType.PNG
        array = np.zeros((5, 4, 4), dtype=np.uint8)
        array[..., 1] = 200
        array[..., 3] = 255

        derived = backend.from_array(image, array)

        assert derived.size == (4, 5)
        assert derived.image_type == ImageType.PNG
        assert backend.get_pixel(derived, 3, 4) == (0, 200, 0, 0)

    def test_release(self, backend):
        image = backend.create_blank(1, 1)
        backend.release(image)
        assert image.released


class TestEditing:
    """Tests for editor operations on each backend."""

    def test_resize_modes(self, editor):
        editor.blank(200, 100).resize_fit(100, 100)
        assert editor.get_image().size == (100, 50)
        editor.blank(200, 100).resize_fill(100, 100)
        assert editor.get_image().size == (100, 100)
        editor.blank(200, 100).resize_exact_height(25)
        assert editor.get_image().size == (50, 25)

    def test_center_crop(self, editor, backend):
        image = backend.create_blank(100, 100)
        backend.set_pixel(image, 25, 25, (255, 0, 0, 0))

        editor.open(image).crop(50, 50)

        assert rgb(editor, 0, 0) == (255, 0, 0)

    def test_crop_outside_is_transparent(self, editor):
        editor.blank(10, 10).crop(4, 4, 8, 8)
        assert editor.backend.get_pixel(editor.get_image(), 3, 3) == (0, 0, 0, 255)

    def test_rotate_quarter_turn(self, editor):
        editor.blank(30, 10).rotate(90)
        assert editor.get_image().size == (10, 30)

    def test_flood_fill(self, editor):
        editor.blank(8, 8).line((4, 0), (4, 7), 1, "#ffffff").fill("#00ff00", 0, 0)
        assert rgb(editor, 1, 1) == (0, 255, 0)
        assert rgb(editor, 7, 7) == (0, 0, 0)

    def test_rectangle_and_ellipse(self, editor):
        editor.blank(40, 20)
        editor.rectangle(10, 10, (0, 0), 0, None, "#0000ff")
        editor.ellipse(19, 19, (20, 0), 0, None, "#ff0000")
        assert rgb(editor, 5, 5) == (0, 0, 255)
        assert rgb(editor, 29, 9) == (255, 0, 0)
        assert rgb(editor, 15, 15) == (0, 0, 0)

    def test_polygon_fill(self, editor):
        editor.blank(20, 20).polygon([(0, 0), (19, 0), (0, 19)], 0, None, "#ff0000")
        assert rgb(editor, 2, 2) == (255, 0, 0)
        assert rgb(editor, 18, 18) == (0, 0, 0)

    def test_translucent_draw_blends(self, editor):
        editor.blank(6, 6).rectangle(6, 6, (0, 0), 0, None, Color(255, 255, 255, 0.5))
        r, g, b, transparency = editor.backend.get_pixel(editor.get_image(), 3, 3)
        assert 120 <= r <= 136
        assert transparency == 0

    def test_rejected_geometry_is_invalid_argument(self, editor):
        editor.blank(20, 20)
        try:
            editor.line((0, 0), (1e12, 5), 1, "#ffffff")
        except InvalidArgumentError:
            assert editor.backend.to_array(editor.get_image())[..., :3].max() == 0

    def test_text_draws(self, editor):
        editor.blank(60, 30).text("Hi", 20, 2, 2, "#ffffff")
        array = editor.backend.to_array(editor.get_image())
        assert array[..., 0].max() > 128

    def test_opacity(self, editor):
        editor.blank(2, 2).opacity(0.5)
        assert editor.backend.get_pixel(editor.get_image(), 0, 0)[3] == 127
        assert editor.get_image().pixel_format == PixelFormat.RGBA

    def test_overlay(self, editor, backend):
        overlay = backend.create_blank(2, 2)
        for x in range(2):
            for y in range(2):
                backend.set_pixel(overlay, x, y, (255, 255, 0, 0))

        editor.blank(6, 6).overlay(overlay, "right", "bottom")

        assert rgb(editor, 5, 5) == (255, 255, 0)
        assert rgb(editor, 3, 3) == (0, 0, 0)
        assert not overlay.released

    def test_filters(self, editor, backend):
        image = backend.create_blank(6, 6)
        backend.set_pixel(image, 2, 2, (200, 100, 50, 0))
        editor.open(image).grayscale()
        r, g, b = rgb(editor, 2, 2)
        assert r == g == b
        editor.dither().sobel()
        assert editor.get_image().size == (6, 6)

    def test_compare_and_equal(self, editor, backend):
        first = backend.create_blank(16, 16)
        second = backend.create_blank(16, 16)
        assert editor.compare(first, second) == 0
        assert editor.equal(first, second)
        backend.set_pixel(second, 0, 0, (1, 0, 0, 0))
        assert not editor.equal(first, second)


class TestFiles:
    """Tests for reading and writing files."""

    @pytest.mark.parametrize(
        ("name", "image_type", "pil_format"),
        [
            ("out.png", ImageType.PNG, "PNG"),
            ("out.jpg", ImageType.JPEG, "JPEG"),
            ("out.gif", ImageType.GIF, "GIF"),
        ],
    )
    def test_write_and_read(self, editor, tmp_path, name, image_type, pil_format):
        path = tmp_path / name
        editor.blank(12, 7).fill("#ffffff").save(path)

        with PILImage.open(path) as saved:
            assert saved.format == pil_format
            assert saved.size == (12, 7)

        reopened = editor.open(path).get_image()
        assert reopened.image_type == image_type
        assert reopened.size == (12, 7)
        assert rgb(editor, 6, 3) == (255, 255, 255)

    def test_png_alpha_preserved(self, editor, tmp_path):
        source = tmp_path / "alpha.png"
        image = PILImage.new("RGBA", (4, 4), (255, 0, 0, 255))
        image.putpixel((0, 0), (0, 0, 0, 0))
        image.save(source)

        editor.open(source)
        assert editor.get_image().pixel_format == PixelFormat.RGBA
        assert editor.backend.get_pixel(editor.get_image(), 0, 0)[3] == 255

        target = tmp_path / "copy.png"
        editor.resize_exact(8, 8).save(target)
        with PILImage.open(target) as saved:
            assert saved.mode == "RGBA"
            assert saved.getpixel((0, 0))[3] < 128

    def test_opaque_png_saved_without_alpha(self, editor, tmp_path):
        path = tmp_path / "opaque.png"
        editor.blank(3, 3).save(path)
        with PILImage.open(path) as saved:
            assert saved.mode == "RGB"

    def test_black_constant_matches_blank(self, editor, tmp_path):
        path = tmp_path / "black.png"
        PILImage.new("RGB", (2, 2), BLACK.get_hex_string()).save(path)
        editor.blank(2, 2)
        assert editor.equal(editor.get_image(), path)


class TestOpenCVErrors:
    """Tests for OpenCV errors raised while drawing."""

    @pytest.fixture
    def editor(self) -> Iterator[Editor]:
        pytest.importorskip("cv2")
        from imagesmith.backends.opencv import OpenCVBackend

        with Editor(OpenCVBackend()) as editor:
            yield editor

    def test_unparseable_point(self, editor):
        editor.blank(20, 20)
        with pytest.raises(InvalidGeometryError, match="line"):
            editor.line((0, 0), (1e12, 5), 1, "#ffffff")
        assert editor.backend.to_array(editor.get_image())[..., :3].max() == 0

    @pytest.mark.parametrize(
        ("primitive", "draw"),
        [
            ("rectangle", lambda e: e.rectangle(5, 5, (0, 0), 1, "#fff", "#fff")),
            ("ellipse", lambda e: e.ellipse(5, 5, (0, 0), 1, "#fff", "#fff")),
            ("fillPoly", lambda e: e.polygon([(0, 0), (5, 0), (0, 5)], 0, None, "#fff")),
            ("polylines", lambda e: e.bezier_quad((0, 0), (5, 10), (10, 0), "#fff")),
        ],
    )
    def test_native_error_becomes_geometry_error(self, editor, primitive, draw):
        import cv2

        editor.blank(10, 10)
        with patch.object(cv2, primitive, side_effect=cv2.error("bad argument")):
            with pytest.raises(InvalidGeometryError):
                draw(editor)
        assert editor.get_image().size == (10, 10)
