# watermarker/blend.py
from typing import Tuple

from . import clamp

Pixel = Tuple[int, int, int, int]

MAX_16 = 65535


def _to16(value: int) -> int:
    # 0xAB -> 0xABAB, same scale as a 16-bit codec would report
    return value * 257


def _premultiply(value: int, alpha: int) -> int:
    # 16-bit channel already multiplied by alpha, truncated
    return _to16(value) * alpha // 255


def _unpremultiply(value: int, alpha: int) -> int:
    if alpha == 255:
        return value
    out = (_to16(value) * MAX_16 // _to16(alpha)) >> 8
    return int(clamp(out, 0, 255))


def blend_colors(base: Pixel, overlay: Pixel, opacity: float) -> Pixel:
    """
    Blend one overlay pixel onto one base pixel.

    Both pixels are straight (non-premultiplied) RGBA tuples on the 0-255
    scale, as Pillow stores them. Channels are lifted to 16 bits and
    multiplied by their own alpha before mixing; the overlay alpha times
    ``opacity`` is the blend weight. The mix is done in floating point and
    truncated (not rounded) back to 8 bits, then divided by the base alpha
    again. The result always keeps the base alpha.
    """
    br, bg, bb, ba = base
    or_, og, ob, oa = overlay

    # Transparent watermark pixel: keep the base as is
    if oa == 0:
        return base

    alpha = _to16(oa) / float(MAX_16) * opacity

    mixed = []
    for b, o in ((br, or_), (bg, og), (bb, ob)):
        b8 = _premultiply(b, ba) >> 8
        o8 = _premultiply(o, oa) >> 8
        mixed.append(int(clamp(int(b8 * (1 - alpha) + o8 * alpha), 0, 255)))

    if ba == 0:
        return (0, 0, 0, 0)
    r, g, b = (_unpremultiply(c, ba) for c in mixed)
    return (r, g, b, ba)
