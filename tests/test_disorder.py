import numpy as np
import pytest

from aligner.disorder import calculate_disorder, dark_mask, label_signal

from helpers import DARK, LIGHT, grid


def test_red_channel_threshold_boundary():
    pixels = [0xFF3FFFFF, 0xFF40FFFF, 0xFF000000, 0xFFFF0000]
    assert dark_mask(pixels).tolist() == [True, False, True, False]


def test_signed_argb_values_are_accepted():
    # 0xFF000000 as a signed 32-bit int
    assert dark_mask([-16777216]).tolist() == [True]


def _block(width, height, cells):
    arr = np.full(width * height, LIGHT, dtype=np.uint32)
    for x, y in cells:
        arr[y * width + x] = DARK
    return arr


def test_component_of_23_pixels_is_noise():
    cells = [(x, y) for y in range(2, 5) for x in range(2, 10)][:-1]
    assert len(cells) == 23
    signal = label_signal(_block(12, 12, cells), 12, 12)
    assert signal.sum() == 0


def test_component_of_24_pixels_is_signal():
    cells = [(x, y) for y in range(2, 5) for x in range(2, 10)]
    assert len(cells) == 24
    signal = label_signal(_block(12, 12, cells), 12, 12)
    assert signal.sum() == 24
    assert all(signal[y * 12 + x] == 1 for x, y in cells)


def test_flood_fill_wraps_across_row_edges():
    # Column 3 rows 0..11 touches column 0 rows 1..12 through the flat-buffer wrap
    cells = [(3, y) for y in range(0, 12)] + [(0, y) for y in range(1, 13)]
    signal = label_signal(_block(4, 13, cells), 4, 13)
    assert signal.sum() == 24


def test_all_light_buffer_scores_zero():
    pixels = [LIGHT] * 100
    assert calculate_disorder(pixels, 10, 10) == 0.0


def test_unbroken_stroke_scores_lower_than_broken_stroke():
    solid = grid(["..######.."] * 10)
    broken = grid(["..######.."] * 4 + [".........."] + ["..######.."] * 5)

    solid_score = calculate_disorder(*solid)
    broken_score = calculate_disorder(*broken)

    assert solid_score == 0.0
    assert broken_score == pytest.approx(12 / 54)
    assert solid_score < broken_score


def test_pieces_below_minimum_size_are_discarded():
    # 3px wide column split into two 15px pieces: both are noise
    split = grid(["...###...."] * 5 + [".........."] + ["...###...."] * 4)
    pixels, width, height = split
    assert label_signal(pixels, width, height).sum() == 0
    assert calculate_disorder(pixels, width, height) == 0.0


def test_transitions_are_counted_per_column():
    # 24px block in the middle of an 8x8 buffer: 4 columns x 2 edges
    rows = ["........"] * 2 + ["..####.."] * 6
    pixels, width, height = grid(rows)
    assert calculate_disorder(pixels, width, height) == pytest.approx(4 / 24)


def test_score_is_deterministic():
    pixels, width, height = grid(["..######.."] * 4 + [".........."] + ["..######.."] * 5)
    first = calculate_disorder(pixels, width, height)
    assert all(calculate_disorder(pixels, width, height) == first for _ in range(3))
    assert isinstance(first, float)


def test_custom_threshold_and_min_size():
    pixels, width, height = grid(["##........"] + [".........."] * 9)
    assert label_signal(pixels, width, height, min_size=2).sum() == 2
    assert label_signal(pixels, width, height, threshold=0, min_size=1).sum() == 0


def test_wrong_buffer_length_is_rejected():
    with pytest.raises(ValueError):
        label_signal([LIGHT] * 10, 4, 4)
