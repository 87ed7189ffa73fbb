import numpy as np

from aligner.layers import Layer

DARK = 0xFF000000
LIGHT = 0xFFFFFFFF
CLEAR = 0x00000000
FILL = 0xFFEEEEEE


def make_layer(width, height, fill=CLEAR, dark=()):
    """dark: iterable of (x, y) pixels set to opaque black."""
    arr = np.full((height, width), fill, dtype=np.uint32)
    for x, y in dark:
        arr[y, x] = DARK
    return Layer(arr.reshape(-1), width, height)


def grid(rows):
    """Flat ARGB buffer from strings of '#' (dark) and '.' (light)."""
    pixels = [DARK if ch == "#" else LIGHT for row in rows for ch in row]
    return pixels, len(rows[0]), len(rows)
