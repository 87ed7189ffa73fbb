import math

import numpy as np
from PIL import Image

from aligner.config import SolverConfig
from aligner.errors import InvalidCaptchaError
from aligner.layers import rgba_to_argb


def _argb_to_tuple(color):
    return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF, (color >> 24) & 0xFF)


def translation(tx, ty=0.0):
    return np.array([[1.0, 0.0, tx], [0.0, 1.0, ty], [0.0, 0.0, 1.0]])


def flip_rotate_matrix(scale):
    """
    Horizontal flip with scale, then a 90 degree rotation (y pointing down).
    Maps drawing (x, y) to device (scale * y, scale * x).
    """
    flip_scale = np.array([[-scale, 0.0, 0.0], [0.0, scale, 0.0], [0.0, 0.0, 1.0]])
    rotate = np.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    return flip_scale @ rotate


class Compositor:
    """
    Merges the background and foreground layers of one captcha onto a fresh canvas
    for a given horizontal offset of the background.

    Geometry is fixed by the foreground size:
        scale         = thumb_height // fg_height
        canvas_height = fg_width * scale + 2 * padding
        canvas_width  = thumb_height
    """

    def __init__(self, fg_width, fg_height, config=None):
        config = config or SolverConfig()
        if fg_width <= 0 or fg_height <= 0:
            raise InvalidCaptchaError(f"Foreground size {fg_width}x{fg_height} is empty")

        self.scale = config.thumb_height // fg_height
        if self.scale == 0:
            raise InvalidCaptchaError(
                f"Foreground height {fg_height} exceeds thumbnail height {config.thumb_height}"
            )

        self.fg_width = fg_width
        self.fg_height = fg_height
        self.thumb_height = config.thumb_height
        self.canvas_width = config.thumb_height
        self.canvas_height = fg_width * self.scale + config.padding * 2
        self.width_diff = self.canvas_height - fg_width
        self.half_diff = self.width_diff / 2
        self.fill = _argb_to_tuple(config.background_color)
        self.matrix = flip_rotate_matrix(self.scale)

    @property
    def size(self):
        return self.canvas_width, self.canvas_height

    def candidate_offsets(self, bg_width):
        """Every shift keeping the background inside the canvas, from 0 downwards."""
        if bg_width is None:
            return [0]
        limit = max(bg_width - self.canvas_height, 0)
        return list(range(0, -limit - 1, -1))

    def _draw(self, canvas, img, tx):
        # Pillow's affine data maps output (device) pixels back into the layer
        inverse = np.linalg.inv(self.matrix @ translation(tx))
        data = tuple(float(v) for v in inverse[:2].reshape(-1))
        warped = img.transform(
            self.size, Image.Transform.AFFINE, data, resample=Image.Resampling.NEAREST
        )
        return Image.alpha_composite(canvas, warped)

    def _fill_rect(self, canvas, x0, y0, x1, y1):
        """Fills a drawing-frame rectangle, covering device pixels whose centre falls inside."""
        corners = self.matrix @ np.array([[x0, x1], [y0, y1], [1.0, 1.0]])
        left, right = sorted(corners[0])
        top, bottom = sorted(corners[1])
        box = (
            max(math.ceil(left - 0.5), 0),
            max(math.ceil(top - 0.5), 0),
            min(math.ceil(right - 0.5), self.canvas_width),
            min(math.ceil(bottom - 0.5), self.canvas_height),
        )
        if box[0] < box[2] and box[1] < box[3]:
            canvas.paste(self.fill, box)

    def composite(self, background, foreground, offset):
        """Returns the composited canvas as a flat ARGB uint32 array."""
        if foreground is None:
            raise InvalidCaptchaError("Foreground layer is required")

        canvas = Image.new("RGBA", self.size, self.fill)

        if background is not None:
            clip_width = background.width - self.width_diff
            if clip_width > 0:
                bg_img = background.to_image().crop((0, 0, clip_width, background.height))
                canvas = self._draw(canvas, bg_img, self.half_diff + offset)

        canvas = self._draw(canvas, foreground.to_image(), self.half_diff)

        # Margins never hold foreground strokes, only background noise
        self._fill_rect(canvas, 0, 0, self.half_diff, self.canvas_width)
        self._fill_rect(
            canvas,
            self.canvas_height - self.half_diff,
            0,
            self.canvas_height,
            self.canvas_width,
        )

        return rgba_to_argb(canvas)
