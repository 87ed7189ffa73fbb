import pytest

from aligner.layers import CaptchaAssets

from helpers import LIGHT, make_layer


@pytest.fixture
def bar_captcha():
    """
    40x80 foreground holding the left half of a bar (x 0..9, y 30..39); the
    background holds the right half at x 13..22. They join at internal offset -3.
    """
    fg = make_layer(40, 80, dark=[(x, y) for x in range(0, 10) for y in range(30, 40)])
    bg = make_layer(77, 80, fill=LIGHT, dark=[(x, y) for x in range(13, 23) for y in range(30, 40)])
    return CaptchaAssets(fg, bg, challenge="bar")
