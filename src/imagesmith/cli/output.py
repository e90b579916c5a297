"""Console rendering for CLI results.

All output goes through one rich Console: a short header, step markers, the
backend table, image summaries and error lines.
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

console = Console()

# Status glyphs
SYM_STEP = "▸"
SYM_OK = "✓"
SYM_ERR = "✗"
SYM_DOT = "·"


def print_header(version: str) -> None:
    """Print the program name and version above a rule."""
    console.print(f"\n[bold]imagesmith[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Announce the next CLI step, e.g. "Loading photo.png"."""
    console.print(f"\n{SYM_STEP} {message}")


def print_backends(rows: list[tuple[str, bool, bool]]) -> None:
    """Print backend candidates in priority order.

    Args:
        rows: ``(name, available, selected)`` per candidate
    """
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("#", justify="right")
    table.add_column("Backend")
    table.add_column("Status")

    for position, (name, available, selected) in enumerate(rows, start=1):
        if available:
            status = f"[green]{SYM_OK} available[/green]"
        else:
            status = f"[red]{SYM_ERR} unavailable[/red]"
        label = f"[bold]{name}[/bold]" if selected else name
        table.add_row(str(position), label, status + (" (selected)" if selected else ""))

    console.print(table)


def print_image_info(
    path: str,
    width: int,
    height: int,
    image_type: str,
    pixel_format: str,
    backend: str,
) -> None:
    """Print image information.

    Args:
        path: Path to the image file
        width: Width in pixels
        height: Height in pixels
        image_type: Encoded format (e.g., "PNG")
        pixel_format: In-memory layout (e.g., "RGBA")
        backend: Backend that decoded the image
    """
    line1 = Text("  ")
    line1.append(path)
    line1.append(f" ({image_type})")
    console.print(line1)
    console.print(f"  {width} x {height} px {SYM_DOT} {pixel_format} {SYM_DOT} {backend}")


def _format_time(seconds: float) -> str:
    """Render a duration as ms, seconds, or minutes and seconds."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_success(
    output_path: str,
    file_size: str,
    total_time_s: float,
    width: int,
    height: int,
) -> None:
    """Report a written file with its size and the elapsed time.

    Args:
        output_path: Written file
        file_size: Size as returned by ``_format_file_size``
        total_time_s: Wall time of the command
        width: Output width in pixels
        height: Output height in pixels
    """
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(total_time_s)}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)
    console.print(f"  {width} x {height} px")


def print_comparison(distance: int, threshold: int) -> None:
    """Print a perceptual distance with its verdict.

    Args:
        distance: Hamming distance between the two hashes
        threshold: Largest distance still counted as a variation
    """
    if distance == 0:
        verdict = "[green]likely the same image[/green]"
    elif distance <= threshold:
        verdict = "[yellow]possibly a variation[/yellow]"
    else:
        verdict = "[red]likely different images[/red]"
    console.print(f"  distance {distance} {SYM_DOT} {verdict}")


def print_equality(equal: bool) -> None:
    """Print the result of a pixel-exact comparison."""
    if equal:
        console.print(f"  [green]{SYM_OK} identical pixels[/green]")
    else:
        console.print(f"  [red]{SYM_ERR} pixels differ[/red]")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: One-line summary
        details: Extra context printed indented below, if any
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
