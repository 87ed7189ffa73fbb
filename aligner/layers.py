import base64
import io
from pathlib import Path

import numpy as np
from PIL import Image

from aligner.errors import InvalidCaptchaError


def to_argb(pixels):
    """
    Normalizes any integer sequence to a flat uint32 ARGB array.
    Signed 32-bit values (e.g. 0xFF000000 stored as -16777216) are masked to unsigned.
    """
    arr = np.asarray(pixels)
    if arr.dtype != np.uint32:
        arr = (arr.astype(np.int64) & 0xFFFFFFFF).astype(np.uint32)
    return arr.reshape(-1)


def argb_to_rgba(pixels, width, height):
    argb = to_argb(pixels).reshape(height, width)
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = (argb >> 16) & 0xFF
    rgba[..., 1] = (argb >> 8) & 0xFF
    rgba[..., 2] = argb & 0xFF
    rgba[..., 3] = argb >> 24
    return Image.fromarray(rgba)


def rgba_to_argb(img):
    arr = np.asarray(img.convert("RGBA"), dtype=np.uint32)
    argb = (arr[..., 3] << 24) | (arr[..., 0] << 16) | (arr[..., 1] << 8) | arr[..., 2]
    return argb.reshape(-1)


class Layer:
    """Read-only ARGB pixel buffer (row-major) with its dimensions."""

    def __init__(self, pixels, width, height):
        pixels = to_argb(pixels).copy()
        if width <= 0 or height <= 0:
            raise ValueError(f"Layer size must be positive, got {width}x{height}")
        if pixels.size != width * height:
            raise ValueError(
                f"Expected {width * height} pixels for {width}x{height}, got {pixels.size}"
            )
        pixels.setflags(write=False)
        self.pixels = pixels
        self.width = width
        self.height = height

    @classmethod
    def from_image(cls, img):
        return cls(rgba_to_argb(img), img.width, img.height)

    @classmethod
    def open(cls, path):
        with Image.open(path) as img:
            return cls.from_image(img)

    def to_image(self):
        return argb_to_rgba(self.pixels, self.width, self.height)

    @property
    def size(self):
        return self.width, self.height

    def __repr__(self):
        return f"Layer({self.width}x{self.height})"


def _decode_png(data, field):
    try:
        raw = base64.b64decode(data, validate=True)
        with Image.open(io.BytesIO(raw)) as img:
            return Layer.from_image(img)
    except (ValueError, OSError) as e:
        raise InvalidCaptchaError(f"Could not decode '{field}': {e}") from e


class CaptchaAssets:
    """
    Foreground (glyphs) and optional background (noise) of one slider captcha.
    The foreground may be None for payloads that carry no image; solving those fails.
    """

    def __init__(self, foreground, background=None, challenge=None):
        self.foreground = foreground
        self.background = background
        self.challenge = challenge

    @property
    def background_width(self):
        return self.background.width if self.background is not None else None

    @classmethod
    def from_files(cls, fg_path, bg_path=None, challenge=None):
        fg = Layer.open(fg_path)
        bg = Layer.open(bg_path) if bg_path else None
        return cls(fg, bg, challenge=challenge or Path(fg_path).stem)

    @classmethod
    def from_json(cls, payload):
        """
        Builds assets from a slider captcha payload:
        {"challenge": ..., "img": <b64 png>, "img_width": w, "img_height": h,
         "bg": <b64 png>, "bg_width": w}
        Declared sizes must match the decoded images.
        """
        challenge = payload.get("challenge")

        fg = None
        if payload.get("img"):
            fg = _decode_png(payload["img"], "img")
            declared = (payload.get("img_width"), payload.get("img_height"))
            if declared != (None, None) and declared != fg.size:
                raise InvalidCaptchaError(
                    f"img is {fg.width}x{fg.height} but payload declares {declared[0]}x{declared[1]}"
                )

        bg = None
        if payload.get("bg"):
            bg = _decode_png(payload["bg"], "bg")
            bg_width = payload.get("bg_width")
            if bg_width is not None and bg_width != bg.width:
                raise InvalidCaptchaError(
                    f"bg is {bg.width} wide but payload declares {bg_width}"
                )

        return cls(fg, bg, challenge=challenge)
