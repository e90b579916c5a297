"""OpenCV graphics backend.

Surfaces are ``(height, width, 4)`` uint8 numpy arrays in BGRA order.
Shapes and text are drawn on a transparent layer and composited so that
translucent colors blend, matching the Pillow backend.

OpenCV has no GIF encoder and only decodes GIF in recent builds, so GIF
files go through Pillow on the way in and out.
"""

import math
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

import cv2
import numpy as np
from PIL import Image as PILImage

from imagesmith.backends.base import Coordinate, GraphicsBackend, Pixel, Rect
from imagesmith.domain import Color, Image, ImageType, PixelFormat
from imagesmith.utils.logging import get_logger

logger = get_logger(__name__)

_FONT = cv2.FONT_HERSHEY_SIMPLEX


def _extract(array: np.ndarray, x: int, y: int, width: int, height: int) -> np.ndarray:
    """Cut a region out of ``array``; parts outside read as transparent black."""
    region = np.zeros((height, width, 4), dtype=np.uint8)
    rows, cols = array.shape[:2]

    left, top = max(x, 0), max(y, 0)
    right, bottom = min(x + width, cols), min(y + height, rows)
    if right > left and bottom > top:
        region[top - y : bottom - y, left - x : right - x] = array[top:bottom, left:right]
    return region


def _place(dst: np.ndarray, region: np.ndarray, x: int, y: int, blend: bool) -> None:
    """Write ``region`` into ``dst`` at ``(x, y)``, clipping to ``dst``."""
    rows, cols = dst.shape[:2]
    left, top = max(x, 0), max(y, 0)
    right = min(x + region.shape[1], cols)
    bottom = min(y + region.shape[0], rows)
    if right <= left or bottom <= top:
        return

    src = region[top - y : bottom - y, left - x : right - x]
    if not blend:
        dst[top:bottom, left:right] = src
        return

    under = dst[top:bottom, left:right].astype(np.float32) / 255.0
    over = src.astype(np.float32) / 255.0

    over_alpha = over[..., 3:4]
    under_alpha = under[..., 3:4]
    out_alpha = over_alpha + under_alpha * (1.0 - over_alpha)

    safe_alpha = np.where(out_alpha > 0, out_alpha, 1.0)
    out_color = (
        over[..., :3] * over_alpha + under[..., :3] * under_alpha * (1.0 - over_alpha)
    ) / safe_alpha

    out = np.concatenate([out_color, out_alpha], axis=2)
    dst[top:bottom, left:right] = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)


@contextmanager
def _drawing_errors() -> Iterator[None]:
    """Re-raise OpenCV argument errors as ValueError."""
    try:
        yield
    except cv2.error as e:
        raise ValueError(str(e).strip()) from e


def _points(points: Sequence[Coordinate]) -> np.ndarray:
    return np.array([[round(px), round(py)] for px, py in points], dtype=np.int32)


def _to_bgra(array: np.ndarray) -> np.ndarray:
    if array.dtype == np.uint16:
        array = (array >> 8).astype(np.uint8)
    if array.ndim == 2:
        return cv2.cvtColor(array, cv2.COLOR_GRAY2BGRA)
    if array.shape[2] == 3:
        return cv2.cvtColor(array, cv2.COLOR_BGR2BGRA)
    return array


class OpenCVBackend(GraphicsBackend):
    """Graphics backend on top of OpenCV and numpy."""

    name = "opencv"
    max_alpha = 255

    def is_available(self) -> bool:
        # warpAffine is what rotate() is built on
        return hasattr(cv2, "imread") and hasattr(cv2, "warpAffine")

    # Surfaces

    def _wrap(self, array: np.ndarray, pixel_format: PixelFormat) -> Image:
        return Image(
            core=array,
            width=array.shape[1],
            height=array.shape[0],
            backend=self.name,
            pixel_format=pixel_format,
        )

    def create_blank(self, width: int, height: int, full_alpha: bool = False) -> Image:
        array = np.zeros((height, width, 4), dtype=np.uint8)
        if full_alpha:
            return self._wrap(array, PixelFormat.RGBA)

        array[..., 3] = 255
        return self._wrap(array, PixelFormat.RGB)

    def release(self, image: Image) -> None:
        image.core = None

    def copy_resample(
        self,
        src: Image,
        dst: Image,
        src_rect: Rect,
        dst_rect: Rect,
        blend: bool = False,
    ) -> None:
        sx, sy, sw, sh = src_rect
        dx, dy, dw, dh = dst_rect

        region = _extract(src.core, sx, sy, sw, sh)
        if (dw, dh) != (sw, sh):
            shrinking = dw < sw or dh < sh
            interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_CUBIC
            region = cv2.resize(region, (dw, dh), interpolation=interpolation)

        _place(dst.core, region, dx, dy, blend)

    def get_pixel(self, image: Image, x: int, y: int) -> Pixel:
        b, g, r, a = (int(v) for v in image.core[y, x])
        return (r, g, b, self.max_alpha - a)

    def set_pixel(self, image: Image, x: int, y: int, pixel: Pixel) -> None:
        r, g, b, transparency = pixel
        image.core[y, x] = (b, g, r, self.max_alpha - transparency)

    def to_array(self, image: Image) -> np.ndarray:
        return cv2.cvtColor(image.core, cv2.COLOR_BGRA2RGBA)

    def from_array(self, image: Image, array: np.ndarray) -> Image:
        core = cv2.cvtColor(np.ascontiguousarray(array, dtype=np.uint8), cv2.COLOR_RGBA2BGRA)
        return image.derive(core, core.shape[1], core.shape[0])

    # Drawing

    def allocate_color(self, color: Color) -> tuple[int, int, int, int]:
        return (color.b, color.g, color.r, round(color.alpha * 255))

    def _layer(self, image: Image) -> np.ndarray:
        return np.zeros_like(image.core)

    def _commit(self, image: Image, layer: np.ndarray) -> None:
        _place(image.core, layer, 0, 0, blend=True)

    def draw_line(
        self, image: Image, point1: Coordinate, point2: Coordinate, thickness: int, color: Color
    ) -> None:
        layer = self._layer(image)
        start = (round(point1[0]), round(point1[1]))
        end = (round(point2[0]), round(point2[1]))
        with _drawing_errors():
            cv2.line(layer, start, end, self.allocate_color(color), thickness)
        self._commit(image, layer)

    def draw_polyline(
        self, image: Image, points: Sequence[Coordinate], thickness: int, color: Color
    ) -> None:
        layer = self._layer(image)
        with _drawing_errors():
            cv2.polylines(layer, [_points(points)], False, self.allocate_color(color), thickness)
        self._commit(image, layer)

    def draw_rectangle(
        self,
        image: Image,
        bounds: tuple[float, float, float, float],
        border_size: int,
        border_color: Color | None,
        fill_color: Color | None,
    ) -> None:
        layer = self._layer(image)
        x0, y0, x1, y1 = (round(v) for v in bounds)
        with _drawing_errors():
            if fill_color is not None:
                cv2.rectangle(layer, (x0, y0), (x1, y1), self.allocate_color(fill_color), cv2.FILLED)
            if border_color is not None and border_size > 0:
                cv2.rectangle(
                    layer, (x0, y0), (x1, y1), self.allocate_color(border_color), border_size
                )
        self._commit(image, layer)

    def draw_ellipse(
        self,
        image: Image,
        bounds: tuple[float, float, float, float],
        border_size: int,
        border_color: Color | None,
        fill_color: Color | None,
    ) -> None:
        layer = self._layer(image)
        x0, y0, x1, y1 = bounds
        center = (round((x0 + x1) / 2), round((y0 + y1) / 2))
        axes = (max(round((x1 - x0) / 2), 0), max(round((y1 - y0) / 2), 0))
        with _drawing_errors():
            if fill_color is not None:
                cv2.ellipse(
                    layer, center, axes, 0, 0, 360, self.allocate_color(fill_color), cv2.FILLED
                )
            if border_color is not None and border_size > 0:
                cv2.ellipse(
                    layer, center, axes, 0, 0, 360, self.allocate_color(border_color), border_size
                )
        self._commit(image, layer)

    def draw_polygon(
        self,
        image: Image,
        points: Sequence[Coordinate],
        border_size: int,
        border_color: Color | None,
        fill_color: Color | None,
    ) -> None:
        layer = self._layer(image)
        vertices = _points(points)
        with _drawing_errors():
            if fill_color is not None:
                cv2.fillPoly(layer, [vertices], self.allocate_color(fill_color))
            if border_color is not None and border_size > 0:
                cv2.polylines(
                    layer, [vertices], True, self.allocate_color(border_color), border_size
                )
        self._commit(image, layer)

    def flood_fill(self, image: Image, x: int, y: int, color: Color) -> None:
        rows, cols = image.core.shape[:2]
        if not (0 <= x < cols and 0 <= y < rows):
            return

        # floodFill only takes 1 or 3 channel images, so compute the region as a mask
        bgr = np.ascontiguousarray(image.core[..., :3])
        mask = np.zeros((rows + 2, cols + 2), dtype=np.uint8)
        flags = 4 | cv2.FLOODFILL_MASK_ONLY | (255 << 8)
        cv2.floodFill(bgr, mask, (x, y), (0, 0, 0), (0, 0, 0), (0, 0, 0), flags)

        region = mask[1:-1, 1:-1] == 255
        image.core[region] = self.allocate_color(color)

    def render_text(
        self,
        image: Image,
        text: str,
        size: int,
        x: int,
        y: int,
        color: Color,
        font_path: Path | None,
        angle: float,
    ) -> None:
        if font_path is not None:
            logger.debug(
                "TrueType fonts are not supported, using Hershey font",
                font=str(font_path),
                backend=self.name,
            )

        native = self.allocate_color(color)
        thickness = max(1, size // 12)
        scale = cv2.getFontScaleFromHeight(_FONT, size, thickness)

        if not angle:
            layer = self._layer(image)
            cv2.putText(layer, text, (x, y), _FONT, scale, native, thickness)
            self._commit(image, layer)
            return

        # Square layer centred on the baseline origin, rotated about its centre
        (text_width, text_height), baseline = cv2.getTextSize(text, _FONT, scale, thickness)
        radius = math.ceil(math.hypot(text_width, text_height + baseline)) + 1
        side = radius * 2
        layer = np.zeros((side, side, 4), dtype=np.uint8)
        cv2.putText(layer, text, (radius, radius), _FONT, scale, native, thickness)

        matrix = cv2.getRotationMatrix2D((radius, radius), angle, 1.0)
        rotated = cv2.warpAffine(layer, matrix, (side, side), flags=cv2.INTER_LINEAR)
        _place(image.core, rotated, x - radius, y - radius, blend=True)

    # Transforms

    def rotate(self, image: Image, angle: float, background: Color) -> Image:
        rows, cols = image.core.shape[:2]
        center = (cols / 2, rows / 2)

        # Positive angles rotate counter-clockwise
        matrix = cv2.getRotationMatrix2D(center, angle, 1.0)
        cos, sin = abs(matrix[0, 0]), abs(matrix[0, 1])
        new_cols = int(round(rows * sin + cols * cos))
        new_rows = int(round(rows * cos + cols * sin))
        matrix[0, 2] += new_cols / 2 - center[0]
        matrix[1, 2] += new_rows / 2 - center[1]

        core = cv2.warpAffine(
            image.core,
            matrix,
            (new_cols, new_rows),
            flags=cv2.INTER_CUBIC,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=self.allocate_color(background),
        )
        return image.derive(core, new_cols, new_rows)

    def grayscale(self, image: Image) -> None:
        gray = cv2.cvtColor(np.ascontiguousarray(image.core[..., :3]), cv2.COLOR_BGR2GRAY)
        image.core[..., :3] = gray[..., np.newaxis]

    # Codecs

    def read(self, path: Path, image_type: ImageType) -> Image:
        array = None
        if image_type != ImageType.GIF:
            array = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)

        if array is None:
            with PILImage.open(path) as opened:
                has_alpha = opened.mode in ("RGBA", "LA", "P") and (
                    opened.mode != "P" or "transparency" in opened.info
                )
                rgba = np.array(opened.convert("RGBA"))
            core = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA)
            pixel_format = PixelFormat.RGBA if has_alpha else PixelFormat.RGB
        else:
            has_alpha = array.ndim == 3 and array.shape[2] == 4
            core = _to_bgra(array)
            pixel_format = PixelFormat.RGBA if has_alpha else PixelFormat.RGB

        image = self._wrap(np.ascontiguousarray(core), pixel_format)
        image.image_type = image_type
        image.image_file = path
        return image

    def write(
        self,
        image: Image,
        path: Path,
        image_type: ImageType,
        quality: int,
        interlace: bool,
    ) -> None:
        core = image.core

        if image_type == ImageType.GIF:
            rgba = cv2.cvtColor(core, cv2.COLOR_BGRA2RGBA)
            PILImage.fromarray(rgba, "RGBA").save(path, "GIF")
        else:
            # imencode picks the codec from the extension we pass, not from path
            if image_type == ImageType.PNG:
                extension, params = ".png", []
                opaque = bool((core[..., 3] == 255).all())
                if image.pixel_format == PixelFormat.RGB and opaque:
                    core = cv2.cvtColor(core, cv2.COLOR_BGRA2BGR)
            else:
                extension = ".jpg"
                params = [
                    cv2.IMWRITE_JPEG_QUALITY,
                    int(quality),
                    cv2.IMWRITE_JPEG_PROGRESSIVE,
                    int(interlace),
                ]
                core = cv2.cvtColor(core, cv2.COLOR_BGRA2BGR)

            encoded, buffer = cv2.imencode(extension, core, params)
            if not encoded:
                raise OSError(f"OpenCV could not encode {image_type.value} to {path}")
            path.write_bytes(buffer.tobytes())

        logger.debug("Image written", path=str(path), format=image_type.value, backend=self.name)
