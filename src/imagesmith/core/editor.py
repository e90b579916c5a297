"""The fluent image editor.

An Editor owns at most one Image and every mutating method returns the
editor so calls can be chained::

    editor.open("in.png").resize_fill(200, 200).grayscale().save("out.png")

Operations that produce a new surface (crop, resize, rotate, some filters)
go through a staged replacement: the new surface is built while the old one
stays active, and only once it is complete is the old one released and the
new one installed. If building fails the partial surface is released and
the editor keeps the image it had.
"""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from imagesmith.backends.base import Coordinate, GraphicsBackend
from imagesmith.config import ImagesmithSettings, get_default_settings
from imagesmith.core.compare import compare as compare_images
from imagesmith.core.compare import equal as equal_images
from imagesmith.core.filters import Dither, Filter, Grayscale, Sobel
from imagesmith.core.geometry import (
    PositionValue,
    parse_extent,
    resolve_position,
    round_half_away,
)
from imagesmith.core.render import render
from imagesmith.core.resize import ResizeMode, plan_resize, resample
from imagesmith.domain import (
    BLACK,
    Color,
    CubicBezier,
    DrawingObject,
    Ellipse,
    Image,
    ImageType,
    Line,
    PixelFormat,
    Polygon,
    QuadraticBezier,
    Rectangle,
)
from imagesmith.exceptions import InvalidArgumentError, NoActiveImageError
from imagesmith.io import read_image, write_image
from imagesmith.utils import OperationLogger, OperationStats, get_logger

ColorValue = Color | str | None


@dataclass
class _Stage:
    """Surfaces involved in one staged operation."""

    source: Image
    replacement: Image | None = None


def _positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgumentError(f"{name} must be a positive int, got {value!r}")
    return value


class Editor:
    """Single-image editor bound to one graphics backend.

    Example:
        backend = PillowBackend()
        with Editor(backend) as editor:
            editor.open("photo.jpg").crop(100, 100, "left", "top").save("crop.jpg")
    """

    def __init__(
        self,
        backend: GraphicsBackend,
        settings: ImagesmithSettings | None = None,
    ) -> None:
        """Initialize an empty editor.

        Args:
            backend: Graphics backend that allocates and edits surfaces
            settings: Defaults for saving, text and comparison
        """
        self.backend = backend
        self.settings = settings or get_default_settings()
        self.logger = get_logger(__name__).bind(backend=backend.name)
        self.operation_logger = OperationLogger(self.logger)
        self._image: Image | None = None

    def __enter__(self) -> "Editor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.free()

    def __repr__(self) -> str:
        image = self._image
        size = f"{image.width}x{image.height}" if image is not None else "empty"
        return f"Editor(backend={self.backend.name!r}, image={size})"

    @property
    def stats(self) -> OperationStats:
        """Operation counts and timings for this editor."""
        return self.operation_logger.stats

    # Lifecycle

    def is_available(self) -> bool:
        """Whether the bound backend can be used on this system."""
        return self.backend.is_available()

    def _image_check(self, operation: str) -> Image:
        if self._image is None or self._image.released:
            raise NoActiveImageError(operation)
        return self._image

    def _install(self, image: Image) -> None:
        """Make ``image`` active, releasing the previous surface."""
        previous = self._image
        self._image = image
        if previous is not None and previous is not image:
            self.backend.release(previous)

    def open(self, source: Image | str | Path) -> "Editor":
        """Open an Image or an image file.

        Raises:
            InvalidArgumentError: If source is neither an Image nor a path
            ImageLoadError: If the file cannot be read
        """
        if isinstance(source, Image):
            return self.open_image(source)
        if isinstance(source, (str, Path)):
            return self.open_file(source)
        raise InvalidArgumentError(
            f"Cannot open {type(source).__name__}; expected an Image or a path"
        )

    def open_image(self, image: Image) -> "Editor":
        """Take ownership of an already loaded Image."""
        self._install(self.backend.check_owned(image))
        return self

    def open_file(self, path: str | Path) -> "Editor":
        """Load an image file and make it the active image."""
        self._install(read_image(path, self.backend))
        return self

    def set_image(self, image: Image | None) -> None:
        """Replace the active image without releasing the previous one."""
        self._image = image

    def get_image(self) -> Image | None:
        """Return the active image, or None."""
        return self._image

    def blank(self, width: int, height: int) -> "Editor":
        """Start over with an opaque black canvas."""
        canvas = self.backend.create_blank(
            _positive_int("width", width), _positive_int("height", height)
        )
        self._install(canvas)
        return self

    def free(self) -> None:
        """Release the active image. Calling it again does nothing."""
        if self._image is not None:
            self.backend.release(self._image)
            self._image = None

    # Staging

    @contextmanager
    def _staged(self, operation: str, **details: object) -> Iterator[_Stage]:
        stage = _Stage(self._image_check(operation))
        self.operation_logger.log_operation_start(operation, **details)

        try:
            yield stage
        except Exception as e:
            if stage.replacement is not None and stage.replacement is not stage.source:
                self.backend.release(stage.replacement)
            self.operation_logger.log_operation_error(operation, e)
            raise

        if stage.replacement is not None and stage.replacement is not stage.source:
            self.backend.release(stage.source)
            self._image = stage.replacement
            self.operation_logger.log_surface_replaced(
                operation, stage.source.size, stage.replacement.size
            )

        self.operation_logger.log_operation_complete(operation, *self._image.size)

    def _cut(self, source: Image, width: int, height: int, x: int, y: int) -> Image:
        """Copy a ``width`` x ``height`` region at ``(x, y)`` into a new surface."""
        target = self.backend.create_blank(width, height, full_alpha=source.is_alpha_capable())
        try:
            self.backend.copy_resample(
                source,
                target,
                src_rect=(x, y, width, height),
                dst_rect=(0, 0, width, height),
            )
        except Exception:
            self.backend.release(target)
            raise
        return source.derive(target.core, width, height, pixel_format=target.pixel_format)

    # Geometry

    def crop(
        self,
        width: int,
        height: int,
        x_pos: PositionValue = "center",
        y_pos: PositionValue = "center",
    ) -> "Editor":
        """Cut out a region of the image.

        Positions are pixel offsets or keywords ("left", "center", "right" for
        x; "top", "center", "bottom" for y). The region is not clamped to the
        image: areas outside it come out transparent black.
        """
        width = _positive_int("width", width)
        height = _positive_int("height", height)

        with self._staged("crop", width=width, height=height, x=x_pos, y=y_pos) as stage:
            x, y = resolve_position(x_pos, y_pos, stage.source.size, (width, height))
            stage.replacement = self._cut(stage.source, width, height, x, y)
        return self

    def resize(
        self,
        width: int | None,
        height: int | None,
        mode: ResizeMode | str = ResizeMode.FIT,
    ) -> "Editor":
        """Resize using one of the five resize modes.

        Args:
            width: Target width (unused by exactHeight)
            height: Target height (unused by exactWidth)
            mode: "exact", "exactWidth", "exactHeight", "fit" or "fill"

        Raises:
            InvalidResizeModeError: If mode is unknown; the image is unchanged
            InvalidArgumentError: If a dimension the mode needs is missing
        """
        resize_mode = ResizeMode.parse(mode)
        if resize_mode != ResizeMode.EXACT_HEIGHT:
            width = _positive_int("width", width)
        if resize_mode != ResizeMode.EXACT_WIDTH:
            height = _positive_int("height", height)

        with self._staged("resize", mode=resize_mode.value, width=width, height=height) as stage:
            source = stage.source
            plan = plan_resize(resize_mode, source.width, source.height, width or 0, height or 0)
            stage.replacement = resample(self.backend, source, plan.width, plan.height)

            if plan.crop is not None:
                resized = stage.replacement
                crop_width, crop_height = plan.crop
                x, y = resolve_position("center", "center", resized.size, plan.crop)
                stage.replacement = self._cut(resized, crop_width, crop_height, x, y)
                self.backend.release(resized)

        return self

    def resize_exact(self, width: int, height: int) -> "Editor":
        """Resize to exactly ``width`` x ``height``, ignoring the aspect ratio."""
        return self.resize(width, height, ResizeMode.EXACT)

    def resize_exact_width(self, width: int) -> "Editor":
        """Resize to ``width``, height following the aspect ratio."""
        return self.resize(width, None, ResizeMode.EXACT_WIDTH)

    def resize_exact_height(self, height: int) -> "Editor":
        """Resize to ``height``, width following the aspect ratio."""
        return self.resize(None, height, ResizeMode.EXACT_HEIGHT)

    def resize_fit(self, width: int, height: int) -> "Editor":
        """Resize to fit inside the box without cropping."""
        return self.resize(width, height, ResizeMode.FIT)

    def resize_fill(self, width: int, height: int) -> "Editor":
        """Resize to cover the box, then crop the excess from the center."""
        return self.resize(width, height, ResizeMode.FILL)

    def rotate(self, angle: float, color: ColorValue = None) -> "Editor":
        """Rotate counter-clockwise by ``angle`` degrees.

        The canvas grows to hold the rotated image; uncovered corners are
        painted with ``color`` (black by default).
        """
        background = Color.parse(color) or BLACK
        with self._staged("rotate", angle=angle) as stage:
            stage.replacement = self.backend.rotate(stage.source, angle, background)
        return self

    # Pixels

    def fill(self, color: ColorValue, x: int = 0, y: int = 0) -> "Editor":
        """Flood fill the area connected to ``(x, y)`` with ``color``."""
        fill_color = Color.parse(color)
        if fill_color is None:
            raise InvalidArgumentError("fill() needs a color")

        with self._staged("fill", x=x, y=y) as stage:
            self.backend.flood_fill(stage.source, x, y, fill_color)
        return self

    def opacity(self, opacity: float) -> "Editor":
        """Scale the opacity of every visible pixel by ``opacity`` (0.0-1.0).

        Fully transparent pixels are left alone. This visits every pixel
        through the backend one at a time, so it is slow on large images.
        """
        opacity = max(0.0, min(1.0, float(opacity)))
        max_alpha = self.backend.max_alpha

        with self._staged("opacity", opacity=opacity) as stage:
            image = stage.source
            for y in range(image.height):
                for x in range(image.width):
                    r, g, b, transparency = self.backend.get_pixel(image, x, y)
                    if transparency < max_alpha:
                        visibility = round_half_away((max_alpha - transparency) * opacity)
                        self.backend.set_pixel(image, x, y, (r, g, b, max_alpha - visibility))
            if image.pixel_format == PixelFormat.RGB:
                image.pixel_format = PixelFormat.RGBA
        return self

    def overlay(
        self,
        overlay: Image | str | Path,
        x_pos: PositionValue = "center",
        y_pos: PositionValue = "center",
        width: int | str | None = None,
        height: int | str | None = None,
    ) -> "Editor":
        """Composite another image on top of this one.

        When both ``width`` and ``height`` are given the overlay is first
        resized to fit that box; either may be a pixel count or a percentage
        of this image's size such as ``"50%"``. Translucent overlay pixels
        blend with the image underneath.

        An overlay passed as an Image is not modified or released.
        """
        base = self._image_check("overlay")

        owned = not isinstance(overlay, Image)
        if owned:
            overlay = read_image(overlay, self.backend)
        else:
            self.backend.check_owned(overlay)

        try:
            if width and height:
                try:
                    box = (parse_extent(width, base.width), parse_extent(height, base.height))
                except ValueError as e:
                    raise InvalidArgumentError(f"Invalid overlay size: {e}") from e

                if not owned:
                    overlay = resample(self.backend, overlay, overlay.width, overlay.height)
                    owned = True

                helper = Editor(self.backend, self.settings)
                helper.set_image(overlay)
                overlay = helper.resize_fit(*box).get_image()

            with self._staged("overlay", x=x_pos, y=y_pos) as stage:
                x, y = resolve_position(x_pos, y_pos, stage.source.size, overlay.size)
                self.backend.copy_resample(
                    overlay,
                    stage.source,
                    src_rect=(0, 0, overlay.width, overlay.height),
                    dst_rect=(x, y, overlay.width, overlay.height),
                    blend=True,
                )
        finally:
            if owned:
                self.backend.release(overlay)

        return self

    # Drawing

    def draw(self, drawing_object: DrawingObject) -> "Editor":
        """Render a drawing object onto the image.

        Raises:
            InvalidGeometryError: If the shape cannot be drawn; the image is unchanged
        """
        with self._staged("draw", shape=type(drawing_object).__name__) as stage:
            render(drawing_object, stage.source, self.backend)
        return self

    def line(
        self,
        point1: Coordinate,
        point2: Coordinate,
        thickness: int = 1,
        color: ColorValue = "#000000",
    ) -> "Editor":
        return self.draw(Line(point1, point2, thickness, color))

    def rectangle(
        self,
        width: int,
        height: int,
        pos: Coordinate = (0, 0),
        border_size: int = 1,
        border_color: ColorValue = "#000000",
        fill_color: ColorValue = "#FFFFFF",
    ) -> "Editor":
        return self.draw(Rectangle(width, height, pos, border_size, border_color, fill_color))

    def ellipse(
        self,
        width: int,
        height: int,
        pos: Coordinate = (0, 0),
        border_size: int = 1,
        border_color: ColorValue = "#000000",
        fill_color: ColorValue = "#FFFFFF",
    ) -> "Editor":
        return self.draw(Ellipse(width, height, pos, border_size, border_color, fill_color))

    def polygon(
        self,
        points: Sequence[Coordinate],
        border_size: int = 1,
        border_color: ColorValue = "#000000",
        fill_color: ColorValue = "#FFFFFF",
    ) -> "Editor":
        return self.draw(Polygon(tuple(points), border_size, border_color, fill_color))

    def bezier_quad(
        self,
        point1: Coordinate,
        control: Coordinate,
        point2: Coordinate,
        color: ColorValue = "#000000",
    ) -> "Editor":
        return self.draw(QuadraticBezier(point1, control, point2, color))

    def bezier_cubic(
        self,
        point1: Coordinate,
        control1: Coordinate,
        control2: Coordinate,
        point2: Coordinate,
        color: ColorValue = "#000000",
    ) -> "Editor":
        return self.draw(CubicBezier(point1, control1, control2, point2, color))

    def text(
        self,
        text: str,
        size: int | None = None,
        x: int = 0,
        y: int = 0,
        color: ColorValue = None,
        font: str | Path | None = None,
        angle: float = 0,
    ) -> "Editor":
        """Write text with its top-left corner near ``(x, y)``.

        The baseline is placed at ``y + size``. Without a font the configured
        default is used, then the backend's built-in font.

        Raises:
            InvalidArgumentError: If the font file cannot be loaded
        """
        size = _positive_int("size", size if size is not None else self.settings.text.default_size)
        text_color = Color.parse(color) or BLACK
        font_path = Path(font) if font else self.settings.text.font_path

        with self._staged("text", size=size, x=x, y=y) as stage:
            try:
                self.backend.render_text(
                    stage.source, text, size, x, y + size, text_color, font_path, angle
                )
            except OSError as e:
                raise InvalidArgumentError(f"Cannot load font '{font_path}': {e}") from e
        return self

    # Filters

    def apply(self, image_filter: Filter) -> "Editor":
        """Run a filter over the image."""
        with self._staged("apply", filter=type(image_filter).__name__) as stage:
            stage.replacement = image_filter.apply(stage.source, self.backend)
        return self

    def grayscale(self) -> "Editor":
        return self.apply(Grayscale())

    def greyscale(self) -> "Editor":
        """Alias of grayscale()."""
        return self.grayscale()

    def dither(self) -> "Editor":
        return self.apply(Dither())

    def sobel(self) -> "Editor":
        return self.apply(Sobel())

    # Output

    def save(
        self,
        path: str | Path,
        image_type: ImageType | str | None = None,
        quality: int | None = None,
        interlace: bool = False,
        permission: int | None = None,
    ) -> "Editor":
        """Write the image to ``path``.

        Args:
            path: Destination file; missing directories are created
            image_type: "JPEG", "PNG" or "GIF"; inferred from the extension
                and then from the source image when None
            quality: JPEG quality 0-100 (clamped), default from settings
            interlace: Write a progressive JPEG
            permission: Mode for created directories, default from settings

        Raises:
            DirectoryCreateError: If the target directory cannot be created
            ImageSaveError: If encoding or writing fails
        """
        image = self._image_check("save")
        save_settings = self.settings.save
        written = write_image(
            image,
            path,
            self.backend,
            image_type=image_type,
            quality=quality,
            interlace=interlace,
            permission=permission if permission is not None else save_settings.dir_permission,
            default_quality=save_settings.jpeg_quality,
        )
        self.logger.debug("Saved", path=str(path), type=written.value)
        return self

    # Comparison

    def compare(self, image1: Image | str | Path, image2: Image | str | Path) -> int:
        """Hamming distance between the difference hashes of two images.

        0 means most likely identical, 1-10 a possible variation, more than
        10 most likely different images.
        """
        return compare_images(
            image1,
            image2,
            self.backend,
            width=self.settings.compare.hash_width,
            height=self.settings.compare.hash_height,
        )

    def equal(self, image1: Image | str | Path, image2: Image | str | Path) -> bool:
        """Whether two images have the same size and identical RGB pixels."""
        return equal_images(image1, image2, self.backend)
