"""Discover numbered images by probing 1.ext, 2.ext, ... until a run of misses."""

import io
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import requests
from PIL import Image

logger = logging.getLogger(__name__)

USER_AGENT = "numbered-print/0.1.0"
DEFAULT_MAX_INDEX = 9999
SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_file_size(num_bytes: float) -> str:
    """Format a byte count as e.g. '0 Bytes', '512 Bytes', '1.5 KB'."""
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[unit]}"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one fetch attempt for an index + extension."""

    index: int
    extension: str
    found: bool


@dataclass(frozen=True)
class LoadedImage:
    """One image found by the scan."""

    index: int
    path: str
    width: int
    height: int
    estimated_bytes: int

    @property
    def name(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1].rsplit("\\", 1)[-1]

    @property
    def size_text(self) -> str:
        return format_file_size(self.estimated_bytes)


@dataclass
class LoopState:
    """Counters of a single scan."""

    current_index: int = 1
    consecutive_misses: int = 0
    loaded: int = 0

    @property
    def probed(self) -> int:
        """Highest index probed so far."""
        return self.current_index - 1


class ScanToken:
    """Cancellation flag checked by the scan before every probe."""

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class LocalFolderSource:
    """Reads numbered images from a directory on disk."""

    def __init__(self, folder: Path):
        if not folder.is_dir():
            raise NotADirectoryError(f"Not a directory: {folder}")
        self.folder = folder

    def locate(self, filename: str) -> str:
        return str(self.folder / filename)

    def fetch(self, location: str) -> bytes:
        return Path(location).read_bytes()

    def __str__(self) -> str:
        return str(self.folder)


class HttpFolderSource:
    """Fetches numbered images relative to an HTTP(S) base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        auth: tuple[str, str] | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        if auth is not None:
            self.session.auth = auth

    def locate(self, filename: str) -> str:
        return self.base_url + filename

    def fetch(self, location: str) -> bytes:
        resp = self.session.get(location, timeout=self.timeout)
        resp.raise_for_status()
        return resp.content

    def __str__(self) -> str:
        return self.base_url


def is_url(folder: str) -> bool:
    return folder.startswith(("http://", "https://"))


def open_source(
    folder: str | Path,
    timeout: float = 10.0,
    auth: tuple[str, str] | None = None,
) -> LocalFolderSource | HttpFolderSource:
    """Pick an image source for a local directory or an HTTP(S) base URL."""
    if isinstance(folder, str) and is_url(folder):
        return HttpFolderSource(folder, timeout=timeout, auth=auth)
    return LocalFolderSource(Path(folder))


def estimate_byte_size(img: Image.Image) -> int:
    """Estimate the printed size of an image from a JPEG (quality 80) re-encode."""
    buffer = io.BytesIO()
    try:
        img.convert("RGB").save(buffer, "JPEG", quality=80)
    except (OSError, ValueError):
        # Fall back to raw RGBA size
        return img.width * img.height * 4
    return buffer.tell()


def load_image(source, index: int, extension: str) -> LoadedImage | None:
    """Probe ``<index>.<extension>``. Returns None on any fetch or decode failure."""
    location = source.locate(f"{index}.{extension}")
    try:
        data = source.fetch(location)
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            width, height = img.size
            estimated = estimate_byte_size(img)
    except (OSError, ValueError, requests.RequestException, Image.DecompressionBombError) as exc:
        logger.debug("Miss %s: %s", location, exc)
        return None
    return LoadedImage(
        index=index,
        path=location,
        width=width,
        height=height,
        estimated_bytes=estimated,
    )


def _cancelled(cancel: ScanToken | None) -> bool:
    return cancel is not None and cancel.cancelled


def discover(
    folder,
    extensions: list[str],
    max_consecutive_misses: int,
    max_index: int = DEFAULT_MAX_INDEX,
    start_index: int = 1,
    on_probe: Callable[[ProbeResult], None] | None = None,
    on_loaded: Callable[[LoadedImage, LoopState], None] | None = None,
    cancel: ScanToken | None = None,
    delay: float = 0.0,
    state: LoopState | None = None,
) -> list[LoadedImage]:
    """Scan ``start_index``, ``start_index + 1``, ... for images.

    Each index is tried with every extension in order; the first one that loads
    wins and the rest are skipped. The scan stops after ``max_consecutive_misses``
    indices in a row yield nothing, once ``max_index`` has been probed, or when
    ``cancel`` is set. Fetch failures count as misses and are never raised.

    Args:
        folder: Local directory, HTTP(S) base URL, or an already opened source.
        extensions: Candidate extensions, tried in order for each index.
        max_consecutive_misses: Number of empty indices in a row that ends the scan.
        max_index: Absolute ceiling on the index.
        start_index: First index to probe.
        on_probe: Called with every ProbeResult.
        on_loaded: Called with each LoadedImage and the current LoopState.
        cancel: Token that stops the scan before its next probe when set; the
            record of the index in progress is then dropped.
        delay: Seconds to sleep between indices.
        state: LoopState to update in place (a fresh one is used if None).

    Returns:
        Loaded images in increasing index order.
    """
    if max_consecutive_misses < 1:
        raise ValueError(
            f"max_consecutive_misses must be at least 1. Got {max_consecutive_misses}."
        )
    if not extensions:
        raise ValueError("At least one image extension is required.")
    if start_index < 1:
        raise ValueError(f"start_index must be at least 1. Got {start_index}.")

    source = open_source(folder) if isinstance(folder, (str, Path)) else folder
    if state is None:
        state = LoopState()
    state.current_index = start_index
    state.consecutive_misses = 0
    state.loaded = 0

    images: list[LoadedImage] = []
    while state.consecutive_misses < max_consecutive_misses and state.current_index <= max_index:
        if _cancelled(cancel):
            break
        index = state.current_index
        record = None
        for ext in extensions:
            if _cancelled(cancel):
                break
            record = load_image(source, index, ext)
            if on_probe is not None:
                on_probe(ProbeResult(index=index, extension=ext, found=record is not None))
            if record is not None:
                break
        if _cancelled(cancel):
            logger.debug("Scan of %s cancelled at index %d", source, index)
            break

        if record is None:
            state.consecutive_misses += 1
        else:
            state.consecutive_misses = 0
            state.loaded += 1
            images.append(record)
            logger.info("Loaded %s (%dx%d)", record.path, record.width, record.height)
            if on_loaded is not None:
                on_loaded(record, state)
        state.current_index += 1
        if delay:
            time.sleep(delay)

    logger.debug(
        "Scan of %s finished: %d image(s), last index probed %d",
        source,
        len(images),
        state.probed,
    )
    return images
