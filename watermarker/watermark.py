# watermarker/watermark.py
import logging
from dataclasses import dataclass

from PIL import Image

from . import ensure_rgba, new_canvas
from .blend import blend_colors
from .codec import open_image
from .placement import Position, compute_offset

logger = logging.getLogger("watermark")

DEFAULT_OPACITY = 0.5
DEFAULT_PADDING = 10


@dataclass
class Options:
    position: Position = Position.BOTTOM_RIGHT
    opacity: float = DEFAULT_OPACITY
    padding_x: int = DEFAULT_PADDING
    padding_y: int = DEFAULT_PADDING


def default_options() -> Options:
    return Options(
        position=Position.BOTTOM_RIGHT,
        opacity=DEFAULT_OPACITY,
        padding_x=DEFAULT_PADDING,
        padding_y=DEFAULT_PADDING,
    )


def options_from_config(config) -> Options:
    """
    Arma las opciones de colocación a partir de la sección "watermark".

    Config soportada:
      - position: center | top-left | top-right | bottom-left | bottom-right
      - opacity: opacidad global (0.0–1.0, default: 0.5)
      - padding_x / padding_y: margen en px desde el borde (default: 10)
    """
    config = config or {}
    return Options(
        position=Position.from_name(config.get("position", Position.BOTTOM_RIGHT)),
        opacity=float(config.get("opacity", DEFAULT_OPACITY)),
        padding_x=int(config.get("padding_x", DEFAULT_PADDING)),
        padding_y=int(config.get("padding_y", DEFAULT_PADDING)),
    )


def normalize_opacity(opacity: float) -> float:
    if opacity <= 0:
        return DEFAULT_OPACITY
    if opacity > 1:
        return 1.0
    return opacity


def _draw(out_px, size, wm_px, wm_size, x, y, opacity) -> None:
    """
    Composite every watermark pixel at offset (x, y), skipping whatever
    lands outside the canvas. Reads the canvas as it is now, so a later
    draw over the same area blends on top of an earlier one.
    """
    width, height = size
    wm_w, wm_h = wm_size
    for wy in range(wm_h):
        dy = y + wy
        if dy < 0 or dy >= height:
            continue
        for wx in range(wm_w):
            dx = x + wx
            if dx < 0 or dx >= width:
                continue
            out_px[dx, dy] = blend_colors(out_px[dx, dy], wm_px[wx, wy], opacity)


def apply(src: Image.Image, watermark: Image.Image, opts: Options = None) -> Image.Image:
    """
    Superpone la marca de agua una sola vez sobre la imagen base.

    Devuelve una imagen RGBA nueva; `src` no se modifica. Opacidad <= 0
    usa el default 0.5 y más de 1 se limita a 1.
    """
    opts = opts or default_options()
    out = new_canvas(src)
    wm = ensure_rgba(watermark)

    x, y = compute_offset(out.width, out.height, wm.width, wm.height,
                          opts.position, opts.padding_x, opts.padding_y)
    opacity = normalize_opacity(opts.opacity)
    logger.debug("Watermark %sx%s at (%s, %s) position=%s opacity=%s",
                 wm.width, wm.height, x, y, opts.position, opacity)

    if wm.width and wm.height:
        _draw(out.load(), out.size, wm.load(), wm.size, x, y, opacity)
    return out


def _origins(limit: int, stride: int):
    if stride <= 0:
        # the grid would never advance; a single row/column of tiles
        yield 0
        return
    yield from range(0, limit, stride)


def tile(src: Image.Image, watermark: Image.Image, opacity: float, spacing: int) -> Image.Image:
    """
    Repite la marca de agua en mosaico sobre toda la imagen.

    Los mosaicos arrancan en (0, 0) y avanzan por el tamaño de la marca más
    `spacing`, fila por fila. Los que se salen por derecha/abajo se recortan.
    La opacidad se usa tal cual, sin default ni límite.
    """
    out = new_canvas(src)
    wm = ensure_rgba(watermark)
    if not (wm.width and wm.height):
        return out

    stride_x = wm.width + spacing
    stride_y = wm.height + spacing

    out_px, wm_px = out.load(), wm.load()
    count = 0
    for ty in _origins(out.height, stride_y):
        for tx in _origins(out.width, stride_x):
            _draw(out_px, out.size, wm_px, wm.size, tx, ty, opacity)
            count += 1

    logger.debug("Tiled %s watermark(s) with stride (%s, %s)", count, stride_x, stride_y)
    return out


def apply_from_paths(src_path: str, watermark_path: str, opts: Options = None) -> Image.Image:
    """
    Load both images from disk and apply the watermark.
    Open/decode errors are raised as is.
    """
    src = open_image(src_path)
    wm = open_image(watermark_path)
    return apply(src, wm, opts)


def tile_from_paths(src_path: str, watermark_path: str, opacity: float, spacing: int) -> Image.Image:
    src = open_image(src_path)
    wm = open_image(watermark_path)
    return tile(src, wm, opacity, spacing)
