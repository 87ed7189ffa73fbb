from aligner.disorder import DARK_THRESHOLD, dark_mask
from aligner.layers import argb_to_rgba


def render_ascii(result, threshold=DARK_THRESHOLD):
    dark = dark_mask(result.pixels, threshold).reshape(result.height, result.width)
    return "\n".join("".join("#" if px else "." for px in row) for row in dark)


def to_image(result):
    return argb_to_rgba(result.pixels, result.width, result.height)


def save_result(result, path):
    to_image(result).save(path)
