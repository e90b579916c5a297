"""Pillow graphics backend.

Surfaces are ``PIL.Image.Image`` objects held in RGBA mode regardless of the
source format; the logical format is tracked on the Image wrapper. Shapes
and text are drawn on a transparent layer and alpha-composited so that
translucent colors blend with what is underneath.
"""

import math
from collections.abc import Sequence
from pathlib import Path

import numpy as np
from PIL import Image as PILImage
from PIL import ImageDraw, ImageFont

from imagesmith.backends.base import Coordinate, GraphicsBackend, Pixel, Rect
from imagesmith.domain import Color, Image, ImageType, PixelFormat
from imagesmith.utils.logging import get_logger

logger = get_logger(__name__)

_RESAMPLE = PILImage.Resampling.BICUBIC

_SAVE_FORMATS = {
    ImageType.JPEG: "JPEG",
    ImageType.PNG: "PNG",
    ImageType.GIF: "GIF",
}


def _pixel_format_of(pil_image: PILImage.Image) -> PixelFormat:
    if pil_image.mode == "P":
        return PixelFormat.INDEXED
    if pil_image.mode in ("RGBA", "LA", "RGBa", "La") or "transparency" in pil_image.info:
        return PixelFormat.RGBA
    return PixelFormat.RGB


def _composite(base: PILImage.Image, layer: PILImage.Image, x: int, y: int) -> None:
    """Alpha-composite ``layer`` onto ``base`` at ``(x, y)``, clipping to ``base``.

    ``Image.alpha_composite`` rejects negative offsets, so the visible part
    is cut out first.
    """
    left = max(x, 0)
    top = max(y, 0)
    right = min(x + layer.width, base.width)
    bottom = min(y + layer.height, base.height)
    if right <= left or bottom <= top:
        return

    visible = layer.crop((left - x, top - y, right - x, bottom - y))
    base.alpha_composite(visible, dest=(left, top))


class PillowBackend(GraphicsBackend):
    """Graphics backend on top of Pillow."""

    name = "pillow"
    max_alpha = 255

    def is_available(self) -> bool:
        # The C core and rotation are required; some minimal builds lack them
        return hasattr(PILImage, "core") and hasattr(PILImage.Image, "rotate")

    # Surfaces

    def _wrap(self, pil_image: PILImage.Image, pixel_format: PixelFormat) -> Image:
        return Image(
            core=pil_image,
            width=pil_image.width,
            height=pil_image.height,
            backend=self.name,
            pixel_format=pixel_format,
        )

    def create_blank(self, width: int, height: int, full_alpha: bool = False) -> Image:
        if full_alpha:
            core = PILImage.new("RGBA", (width, height), (0, 0, 0, 0))
            return self._wrap(core, PixelFormat.RGBA)

        core = PILImage.new("RGBA", (width, height), (0, 0, 0, 255))
        return self._wrap(core, PixelFormat.RGB)

    def release(self, image: Image) -> None:
        if image.core is not None:
            image.core.close()
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

        # crop() pads areas outside the source with transparent black
        region = src.core.crop((sx, sy, sx + sw, sy + sh))
        if (dw, dh) != (sw, sh):
            region = region.resize((dw, dh), _RESAMPLE)

        if blend:
            _composite(dst.core, region, dx, dy)
        else:
            dst.core.paste(region, (dx, dy))

    def get_pixel(self, image: Image, x: int, y: int) -> Pixel:
        r, g, b, a = image.core.getpixel((x, y))
        return (r, g, b, self.max_alpha - a)

    def set_pixel(self, image: Image, x: int, y: int, pixel: Pixel) -> None:
        r, g, b, transparency = pixel
        image.core.putpixel((x, y), (r, g, b, self.max_alpha - transparency))

    def to_array(self, image: Image) -> np.ndarray:
        return np.array(image.core, dtype=np.uint8)

    def from_array(self, image: Image, array: np.ndarray) -> Image:
        core = PILImage.fromarray(np.ascontiguousarray(array, dtype=np.uint8), "RGBA")
        return image.derive(core, core.width, core.height)

    # Drawing

    def allocate_color(self, color: Color) -> tuple[int, int, int, int]:
        return (color.r, color.g, color.b, round(color.alpha * 255))

    def _layer(self, image: Image) -> tuple[PILImage.Image, ImageDraw.ImageDraw]:
        layer = PILImage.new("RGBA", image.core.size, (0, 0, 0, 0))
        return layer, ImageDraw.Draw(layer)

    def _commit(self, image: Image, layer: PILImage.Image) -> None:
        image.core.alpha_composite(layer)
        layer.close()

    def draw_line(
        self, image: Image, point1: Coordinate, point2: Coordinate, thickness: int, color: Color
    ) -> None:
        layer, draw = self._layer(image)
        draw.line([point1, point2], fill=self.allocate_color(color), width=thickness)
        self._commit(image, layer)

    def draw_polyline(
        self, image: Image, points: Sequence[Coordinate], thickness: int, color: Color
    ) -> None:
        layer, draw = self._layer(image)
        draw.line(list(points), fill=self.allocate_color(color), width=thickness, joint="curve")
        self._commit(image, layer)

    def _outline_args(
        self, border_size: int, border_color: Color | None, fill_color: Color | None
    ) -> dict:
        has_border = border_color is not None and border_size > 0
        return {
            "fill": self.allocate_color(fill_color) if fill_color is not None else None,
            "outline": self.allocate_color(border_color) if has_border else None,
            "width": border_size if has_border else 0,
        }

    def draw_rectangle(
        self,
        image: Image,
        bounds: tuple[float, float, float, float],
        border_size: int,
        border_color: Color | None,
        fill_color: Color | None,
    ) -> None:
        layer, draw = self._layer(image)
        draw.rectangle(bounds, **self._outline_args(border_size, border_color, fill_color))
        self._commit(image, layer)

    def draw_ellipse(
        self,
        image: Image,
        bounds: tuple[float, float, float, float],
        border_size: int,
        border_color: Color | None,
        fill_color: Color | None,
    ) -> None:
        layer, draw = self._layer(image)
        draw.ellipse(bounds, **self._outline_args(border_size, border_color, fill_color))
        self._commit(image, layer)

    def draw_polygon(
        self,
        image: Image,
        points: Sequence[Coordinate],
        border_size: int,
        border_color: Color | None,
        fill_color: Color | None,
    ) -> None:
        layer, draw = self._layer(image)
        draw.polygon(list(points), **self._outline_args(border_size, border_color, fill_color))
        self._commit(image, layer)

    def flood_fill(self, image: Image, x: int, y: int, color: Color) -> None:
        if not (0 <= x < image.width and 0 <= y < image.height):
            return
        ImageDraw.floodfill(image.core, (x, y), self.allocate_color(color), thresh=0)

    def _font(self, size: int, font_path: Path | None) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        if font_path is not None:
            return ImageFont.truetype(str(font_path), size)
        return ImageFont.load_default(size=size)

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
        font = self._font(size, font_path)
        fill = self.allocate_color(color)

        if not angle:
            layer, draw = self._layer(image)
            draw.text((x, y), text, font=font, fill=fill, anchor="ls")
            self._commit(image, layer)
            return

        # Draw on a square layer centred on the baseline origin so rotating
        # about the centre turns the text around (x, y) without clipping
        left, top, right, bottom = font.getbbox(text, anchor="ls")
        radius = math.ceil(
            max(math.hypot(cx, cy) for cx in (left, right) for cy in (top, bottom))
        ) + 1
        side = radius * 2
        layer = PILImage.new("RGBA", (side, side), (0, 0, 0, 0))
        ImageDraw.Draw(layer).text((radius, radius), text, font=font, fill=fill, anchor="ls")
        rotated = layer.rotate(angle, resample=_RESAMPLE)
        layer.close()

        _composite(image.core, rotated, x - radius, y - radius)
        rotated.close()

    # Transforms

    def rotate(self, image: Image, angle: float, background: Color) -> Image:
        core = image.core.rotate(
            angle,
            resample=_RESAMPLE,
            expand=True,
            fillcolor=self.allocate_color(background),
        )
        return image.derive(core, core.width, core.height)

    def grayscale(self, image: Image) -> None:
        core = image.core
        luminance = core.convert("L")
        alpha = core.getchannel("A")
        core.paste(PILImage.merge("RGBA", (luminance, luminance, luminance, alpha)))
        luminance.close()
        alpha.close()

    # Codecs

    def read(self, path: Path, image_type: ImageType) -> Image:
        with PILImage.open(path) as opened:
            opened.load()
            pixel_format = _pixel_format_of(opened)
            core = opened.convert("RGBA")

        image = self._wrap(core, pixel_format)
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
        save_format = _SAVE_FORMATS.get(image_type, "JPEG")

        if save_format == "JPEG":
            rgb = core.convert("RGB")
            rgb.save(path, "JPEG", quality=quality, progressive=interlace)
            rgb.close()
        elif save_format == "PNG":
            opaque = core.getextrema()[3][0] == 255
            if image.pixel_format == PixelFormat.RGB and opaque:
                rgb = core.convert("RGB")
                rgb.save(path, "PNG")
                rgb.close()
            else:
                core.save(path, "PNG")
        else:
            core.save(path, "GIF")

        logger.debug("Image written", path=str(path), format=save_format, backend=self.name)
