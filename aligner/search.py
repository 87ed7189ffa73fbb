import threading
import time
from dataclasses import dataclass

import numpy as np

from aligner.compositor import Compositor
from aligner.config import SolverConfig
from aligner.disorder import calculate_disorder
from aligner.errors import InvalidCaptchaError, SearchCancelled

WORST_DISORDER = 999.0


class CancellationToken:
    """Set from any thread; the search checks it before every offset."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise SearchCancelled("Offset search was cancelled")


@dataclass
class ResultImageData:
    best_offset: int
    width: int
    height: int
    pixels: np.ndarray
    disorder: float


class AlignmentSolver:
    def __init__(self, config=None):
        self.config = config or SolverConfig()

    def solve(self, assets, custom_offset=None, cancel_token=None):
        """
        Finds the background offset whose composite has the lowest disorder.

        custom_offset skips the search and composites that single offset
        (truncated toward zero). The reported best_offset is the negated
        internal offset.
        """
        fg = assets.foreground
        if fg is None or fg.pixels is None:
            raise InvalidCaptchaError("Captcha has no foreground image")

        started = time.perf_counter()
        compositor = Compositor(fg.width, fg.height, self.config)

        if custom_offset is not None:
            offsets = [int(custom_offset)]
        else:
            offsets = compositor.candidate_offsets(assets.background_width)

        best_disorder = WORST_DISORDER
        best_pixels = None
        best_offset = None

        for offset in offsets:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            pixels = compositor.composite(assets.background, fg, offset)
            disorder = calculate_disorder(
                pixels,
                compositor.canvas_width,
                compositor.canvas_height,
                threshold=self.config.dark_threshold,
                min_size=self.config.min_component_size,
            )

            # Strict comparison: the first offset tried wins ties
            if disorder < best_disorder:
                best_disorder = disorder
                best_pixels = pixels.copy()
                best_offset = offset

        elapsed = time.perf_counter() - started
        print(
            f"find_best_alignment() took {elapsed:.3f}s over {len(offsets)} offsets, "
            f"best_offset={best_offset}, best_disorder={best_disorder:.4f}"
        )

        return ResultImageData(
            best_offset=-best_offset,
            width=compositor.canvas_width,
            height=compositor.canvas_height,
            pixels=best_pixels,
            disorder=best_disorder,
        )


def find_best_alignment(assets, custom_offset=None, config=None, cancel_token=None):
    return AlignmentSolver(config).solve(assets, custom_offset, cancel_token)
