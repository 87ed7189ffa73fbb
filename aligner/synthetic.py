import random

import numpy as np
from PIL import Image, ImageDraw

from aligner.config import SolverConfig
from aligner.layers import CaptchaAssets, Layer

STROKE = (0, 0, 0, 255)
TRANSPARENT = (0, 0, 0, 0)


def generate_slider_captcha(
    fg_width=40, shift=5, slack=8, bars=3, noise=0.0, seed=None, config=None
):
    """
    Builds a captcha whose correct answer is `shift`.

    Horizontal bars are drawn on a transparent foreground, then a vertical band
    in the middle third is cut out and pasted into an opaque background `shift`
    pixels further right. The background is `slack` pixels wider than the canvas,
    so the searched offsets are 0..-slack.
    """
    config = config or SolverConfig()
    if not 0 <= shift <= slack:
        raise ValueError(f"shift must be within [0, {slack}], got {shift}")

    rng = random.Random(seed)
    height = config.thumb_height
    band_start, band_end = fg_width // 3, 2 * fg_width // 3
    canvas_height = fg_width + config.padding * 2
    bg_width = canvas_height + slack

    # 1. Glyph bars crossing the band, at least 6px sticking out on each side
    glyphs = Image.new("RGBA", (fg_width, height), TRANSPARENT)
    draw = ImageDraw.Draw(glyphs)
    row_step = height // (bars + 1)
    for i in range(bars):
        y = row_step * (i + 1) - 2
        x0 = rng.randint(0, max(band_start - 6, 0))
        x1 = rng.randint(min(band_end + 6, fg_width - 1), fg_width - 1)
        draw.rectangle((x0, y, x1, y + 4), fill=STROKE)

    # 2. Cut the band out of the foreground
    arr = np.array(glyphs)
    band = arr[:, band_start:band_end].copy()
    arr[:, band_start:band_end] = 0
    fg = Image.fromarray(arr)

    # 3. Opaque background holding the band, shifted right
    bg = Image.new("RGBA", (bg_width, height), (0xEE, 0xEE, 0xEE, 255))
    band_img = Image.fromarray(band)
    bg.alpha_composite(band_img, dest=(band_start + shift, 0))

    if noise > 0:
        bg_arr = np.array(bg)
        speckle = np.random.default_rng(rng.randrange(2**32)).random((height, bg_width)) < noise
        bg_arr[speckle] = STROKE
        bg = Image.fromarray(bg_arr)

    assets = CaptchaAssets(Layer.from_image(fg), Layer.from_image(bg), challenge=f"synthetic-{shift}")
    return assets, shift
