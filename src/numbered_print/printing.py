"""Hand the rendered page to the browser for viewing or printing to PDF."""

import logging
import webbrowser
from pathlib import Path
from typing import Callable

from numbered_print.probe import LoadedImage
from numbered_print.render import write_page

logger = logging.getLogger(__name__)


def open_page(path: Path, opener: Callable[[str], bool] | None = None) -> None:
    """Open ``path`` in the default browser. Raises RuntimeError if none is available."""
    opener = opener or webbrowser.open
    uri = path.resolve().as_uri()
    logger.debug("Opening %s", uri)
    if not opener(uri):
        raise RuntimeError(
            f"Could not open a browser. Open {path} manually and print it from there."
        )


def export_pdf(
    images: list[LoadedImage],
    config: dict,
    out_path: Path,
    stats: str | None = None,
    opener: Callable[[str], bool] | None = None,
) -> Path:
    """Write the page with auto-print enabled and open it, so the browser shows its print dialog.

    Raises:
        ValueError: When there are no images to print.
        RuntimeError: When no browser could be opened.
    """
    if not images:
        raise ValueError("No images loaded. Load images before exporting a PDF.")
    path = write_page(images, config, out_path, stats=stats, auto_print=True)
    open_page(path, opener)
    return path
