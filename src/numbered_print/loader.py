"""Hold the current image sequence and rescan it on reload."""

import logging
from typing import Callable

from numbered_print.probe import (
    DEFAULT_MAX_INDEX,
    LoadedImage,
    LoopState,
    ProbeResult,
    ScanToken,
    discover,
)

logger = logging.getLogger(__name__)


class ImageLoader:
    """Runs scans against one source; a new reload supersedes any scan in flight."""

    def __init__(
        self,
        source,
        extensions: list[str],
        max_consecutive_misses: int,
        max_index: int = DEFAULT_MAX_INDEX,
        delay: float = 0.0,
    ):
        self.source = source
        self.extensions = list(extensions)
        self.max_consecutive_misses = max_consecutive_misses
        self.max_index = max_index
        self.delay = delay
        self.images: list[LoadedImage] = []
        self.state = LoopState()
        self.generation = 0
        self._token: ScanToken | None = None

    def cancel(self) -> None:
        """Cancel the active scan, if any. Its results will be discarded."""
        if self._token is not None:
            self._token.cancel()
            self._token = None

    def reload(
        self,
        on_probe: Callable[[ProbeResult], None] | None = None,
        on_loaded: Callable[[LoadedImage, LoopState], None] | None = None,
    ) -> list[LoadedImage]:
        """Clear the sequence and scan again. Returns the newest scan's images."""
        self.cancel()
        token = ScanToken()
        self._token = token
        self.generation += 1
        generation = self.generation
        self.images = []
        self.state = LoopState()

        state = LoopState()
        images = discover(
            self.source,
            self.extensions,
            self.max_consecutive_misses,
            max_index=self.max_index,
            on_probe=on_probe,
            on_loaded=on_loaded,
            cancel=token,
            delay=self.delay,
            state=state,
        )

        if token.cancelled or generation != self.generation:
            logger.debug("Discarding results of superseded scan %d", generation)
            return self.images

        self._token = None
        self.images = images
        self.state = state
        return images

    def stats_text(self) -> str:
        return (
            f"Loaded {len(self.images)} image(s) | "
            f"Progress: {self.state.probed} | "
            f"Press R to reload"
        )
