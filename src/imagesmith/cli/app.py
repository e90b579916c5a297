"""Typer application: backend listing, image info, resize, crop and comparison.

Every command builds its editor from the registry stored on the context by
the global callback, so ``--backend`` applies to all of them.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

from imagesmith import __version__
from imagesmith.cli.output import (
    console,
    print_backends,
    print_comparison,
    print_equality,
    print_error,
    print_header,
    print_image_info,
    print_step,
    print_success,
)
from imagesmith.config import BackendConfig, ImagesmithSettings, LoggingConfig
from imagesmith.core import BackendRegistry, Editor, ResizeMode
from imagesmith.exceptions import ImageIOError, ImagesmithError
from imagesmith.utils import configure_logging

app = typer.Typer(
    name="imagesmith",
    help="Resize, crop and compare images with Pillow or OpenCV.",
    add_completion=False,
    no_args_is_help=True,
)


@dataclass
class CliState:
    """Settings and registry shared by the commands of one invocation."""

    settings: ImagesmithSettings
    registry: BackendRegistry


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]imagesmith[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_options(
    ctx: typer.Context,
    backend: Annotated[
        str | None,
        typer.Option(
            "--backend",
            "-b",
            help="Comma-separated backend priority (default: pillow,opencv)",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Backend-agnostic image editing from the command line."""
    names = [name for name in (backend or "").split(",") if name.strip()]
    backend_config = BackendConfig(priority=names) if names else BackendConfig()

    settings = ImagesmithSettings(
        backend=backend_config,
        logging=LoggingConfig(log_file=log_file, log_level=log_level),
    )
    configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
    )
    ctx.obj = CliState(settings=settings, registry=BackendRegistry(settings=settings))


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj


def _position(value: str) -> int | str:
    """Interpret a position option as a pixel offset when it is numeric."""
    try:
        return int(value)
    except ValueError:
        return value


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "428 KB")
    """
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"

    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def _fail(error: ImagesmithError) -> typer.Exit:
    if isinstance(error, ImageIOError):
        print_error(f"{error.action} {error.path}", details=error.reason)
    else:
        print_error(str(error))
    return typer.Exit(code=1)


def _finish(editor: Editor, output: Path, started: float) -> None:
    image = editor.get_image()
    print_success(
        output_path=str(output),
        file_size=_format_file_size(output),
        total_time_s=time.perf_counter() - started,
        width=image.width,
        height=image.height,
    )


@app.command()
def backends(ctx: typer.Context) -> None:
    """List backend candidates in priority order and whether they can be used."""
    registry = _state(ctx).registry

    rows = []
    selected_found = False
    for name in registry.backend_list:
        backend = registry.load_backend(name)
        available = backend is not None and Editor(backend).is_available()
        selected = available and not selected_found
        selected_found = selected_found or selected
        rows.append((name, available, selected))

    print_backends(rows)
    if not selected_found:
        print_error("No supported backend")
        raise typer.Exit(code=1)


@app.command()
def info(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Image file", show_default=False)],
) -> None:
    """Show size, format and pixel layout of an image."""
    registry = _state(ctx).registry
    try:
        with registry.create_editor() as editor:
            image = editor.open(path).get_image()
            print_image_info(
                path=str(path),
                width=image.width,
                height=image.height,
                image_type=image.image_type.value,
                pixel_format=image.pixel_format.value,
                backend=image.backend,
            )
    except ImagesmithError as e:
        raise _fail(e) from e


@app.command()
def resize(
    ctx: typer.Context,
    input_image: Annotated[Path, typer.Argument(help="Input image", show_default=False)],
    output: Annotated[Path, typer.Argument(help="Output image", show_default=False)],
    width: Annotated[
        int | None,
        typer.Option("--width", "-w", help="Target width in pixels", min=1),
    ] = None,
    height: Annotated[
        int | None,
        typer.Option("--height", "-H", help="Target height in pixels", min=1),
    ] = None,
    mode: Annotated[
        str,
        typer.Option(
            "--mode",
            "-m",
            help="Resize mode (exact|exactWidth|exactHeight|fit|fill)",
        ),
    ] = ResizeMode.FIT.value,
    quality: Annotated[
        int | None,
        typer.Option("--quality", "-q", help="JPEG quality 0-100", min=0, max=100),
    ] = None,
) -> None:
    """Resize an image and write the result.

    Example:
        imagesmith resize photo.jpg thumb.jpg -w 200 -H 200 --mode fill
    """
    state = _state(ctx)
    print_header(__version__)
    started = time.perf_counter()

    try:
        with state.registry.create_editor() as editor:
            print_step(f"Resizing ({mode})")
            editor.open(input_image).resize(width, height, mode).save(output, quality=quality)
            _finish(editor, output, started)
    except ImagesmithError as e:
        raise _fail(e) from e


@app.command()
def crop(
    ctx: typer.Context,
    input_image: Annotated[Path, typer.Argument(help="Input image", show_default=False)],
    output: Annotated[Path, typer.Argument(help="Output image", show_default=False)],
    width: Annotated[int, typer.Option("--width", "-w", help="Crop width", min=1)],
    height: Annotated[int, typer.Option("--height", "-H", help="Crop height", min=1)],
    x: Annotated[
        str,
        typer.Option("--x", "-x", help="Horizontal offset or left|center|right"),
    ] = "center",
    y: Annotated[
        str,
        typer.Option("--y", "-y", help="Vertical offset or top|center|bottom"),
    ] = "center",
) -> None:
    """Crop a region of an image and write it."""
    state = _state(ctx)
    print_header(__version__)
    started = time.perf_counter()

    try:
        with state.registry.create_editor() as editor:
            print_step("Cropping")
            editor.open(input_image).crop(width, height, _position(x), _position(y))
            editor.save(output)
            _finish(editor, output, started)
    except ImagesmithError as e:
        raise _fail(e) from e


@app.command()
def compare(
    ctx: typer.Context,
    first: Annotated[Path, typer.Argument(help="First image", show_default=False)],
    second: Annotated[Path, typer.Argument(help="Second image", show_default=False)],
) -> None:
    """Estimate how alike two images look (difference hash distance)."""
    state = _state(ctx)
    try:
        with state.registry.create_editor() as editor:
            distance = editor.compare(first, second)
    except ImagesmithError as e:
        raise _fail(e) from e

    print_comparison(distance, state.settings.compare.similar_threshold)


@app.command()
def equal(
    ctx: typer.Context,
    first: Annotated[Path, typer.Argument(help="First image", show_default=False)],
    second: Annotated[Path, typer.Argument(help="Second image", show_default=False)],
) -> None:
    """Check whether two images have identical RGB pixels."""
    state = _state(ctx)
    try:
        with state.registry.create_editor() as editor:
            same = editor.equal(first, second)
    except ImagesmithError as e:
        raise _fail(e) from e

    print_equality(same)


def cli() -> None:
    """Run the imagesmith command line."""
    app()


def main() -> None:
    """Alias of cli() for ``python -m`` style launchers."""
    cli()


if __name__ == "__main__":
    cli()
