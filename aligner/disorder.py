import numpy as np

from aligner.layers import to_argb

DARK_THRESHOLD = 64
MIN_COMPONENT_SIZE = 24


def dark_mask(pixels, threshold=DARK_THRESHOLD):
    """True where the red channel of the ARGB pixel is below threshold."""
    red = (to_argb(pixels) >> 16) & 0xFF
    return red < threshold


def label_signal(pixels, width, height, threshold=DARK_THRESHOLD, min_size=MIN_COMPONENT_SIZE):
    """
    Marks dark pixels belonging to 4-connected clusters of at least min_size pixels.

    Neighbours are idx +/- 1 and idx +/- width on the flat buffer, without row
    bounds checks: a pixel on a row edge connects to the opposite edge of the
    next/previous row. Scores are calibrated with this wrap, keep it.
    Returns a flat uint8 array (1 = signal).
    """
    total = width * height
    pixels = to_argb(pixels)
    if pixels.size != total:
        raise ValueError(f"Expected {total} pixels for {width}x{height}, got {pixels.size}")

    dark = dark_mask(pixels, threshold).tolist()
    visited = [False] * total
    signal = np.zeros(total, dtype=np.uint8)
    steps = (1, -1, width, -width)

    for start in np.flatnonzero(dark).tolist():
        if visited[start]:
            continue

        members = []
        stack = [start]
        while stack:
            idx = stack.pop()
            if idx < 0 or idx >= total or visited[idx]:
                continue
            visited[idx] = True

            if dark[idx]:
                members.append(idx)
                stack.extend(idx + step for step in steps)

        if len(members) >= min_size:
            signal[members] = 1

    return signal


def calculate_disorder(pixels, width, height, threshold=DARK_THRESHOLD, min_size=MIN_COMPONENT_SIZE):
    """
    Vertical signal/non-signal transitions per signal pixel. Lower means the glyph
    strokes form longer unbroken vertical runs.
    """
    if width * height == 0:
        return 0.0

    signal = label_signal(pixels, width, height, threshold, min_size)
    transitions = np.count_nonzero(signal[:-width] != signal[width:])
    total = max(np.count_nonzero(signal), 1)

    return float(np.float32(transitions) / np.float32(total))
