"""Rich-formatted output for scan results."""

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from numbered_print.probe import LoadedImage


def _image_table(images: list[LoadedImage]) -> Table:
    """Build a table with one row per image, in index order."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("File", style="cyan")
    table.add_column("Dimensions", justify="right")
    table.add_column("Size", justify="right", style="dim")
    for image in images:
        table.add_row(
            str(image.index),
            image.name,
            f"{image.width}×{image.height}",
            image.size_text,
        )
    return table


def print_summary(
    images: list[LoadedImage],
    console: Console | None = None,
    stats: str | None = None,
    folder: str | None = None,
) -> None:
    """Print the loaded images as a Rich panel.

    Args:
        images: Loaded images, in index order.
        console: Rich console (defaults to a new Console).
        stats: Optional stats line shown under the table.
        folder: Folder or URL shown in the panel title.
    """
    c = console or Console()
    parts = [_image_table(images)]
    if stats:
        parts.append(Text(stats, style="dim"))
    title = f"Images: {folder}" if folder else "Images"
    c.print(Panel(Group(*parts), title=title, border_style="blue"))


def print_no_images(folder: str, console: Console | None = None) -> None:
    """Print the empty-scan state."""
    c = console or Console()
    c.print(f"[yellow]No images found in {folder}.[/]")
    c.print("[dim]Images must be named 1.png, 2.jpg, ... starting at 1.[/]")
