# watermarker/pipeline.py
"""
Image pipeline: decode -> watermark (single stamp or tiled) -> encode.

Reads the "watermark" and "output" sections of the settings:
- watermark.tile selects the tiled renderer, using watermark.spacing
- otherwise a single stamp at watermark.position with padding
- output.format / output.quality drive the encoder
"""

import datetime
import logging
import os
import uuid
from typing import Any, Dict, List, Tuple

from PIL import Image

from . import codec
from .watermark import apply, options_from_config, tile, DEFAULT_OPACITY

logger = logging.getLogger("pipeline")

DEFAULT_SPACING = 50


def _unique_suffix() -> str:
    ts = datetime.datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    rand = uuid.uuid4().hex[:6]
    return f"{ts}-{rand}"


def _output_settings(config: Dict[str, Any]) -> Tuple[str, int]:
    out_cfg = config.get("output", {}) or {}
    fmt = (out_cfg.get("format") or "JPEG").upper()
    quality = int(out_cfg.get("quality", codec.DEFAULT_JPEG_QUALITY))
    return fmt, quality


def watermark_image(base: Image.Image, watermark: Image.Image, config: Dict[str, Any]) -> Image.Image:
    """
    Apply the watermark to an already decoded image according to config.
    """
    wm_cfg = config.get("watermark", {}) or {}
    if wm_cfg.get("tile"):
        opacity = float(wm_cfg.get("opacity", DEFAULT_OPACITY))
        spacing = int(wm_cfg.get("spacing", DEFAULT_SPACING))
        logger.info("Tiling watermark (opacity=%s, spacing=%s)", opacity, spacing)
        return tile(base, watermark, opacity, spacing)

    opts = options_from_config(wm_cfg)
    logger.info("Applying watermark at %s (opacity=%s)", opts.position, opts.opacity)
    return apply(base, watermark, opts)


def process_image(image_bytes: bytes, watermark: Image.Image, config: Dict[str, Any]) -> Tuple[bytes, str]:
    """
    Process raw image bytes and return (encoded_bytes, suggested_filename).
    """
    base = codec.decode(image_bytes)
    result = watermark_image(base, watermark, config)

    fmt, quality = _output_settings(config)
    out_bytes = codec.encode(result, fmt, quality)
    filename = f"watermark-{_unique_suffix()}{codec.extension_for(fmt)}"
    return out_bytes, filename


def process_directory(input_dir: str, output_dir: str, watermark: Image.Image,
                      config: Dict[str, Any]) -> List[str]:
    """
    Watermark every image file in `input_dir` and write the results into
    `output_dir` as <name>_watermark.<ext>. Files that cannot be read or
    decoded are logged and skipped. Returns the written paths.
    """
    os.makedirs(output_dir, exist_ok=True)
    fmt, quality = _output_settings(config)
    ext = codec.extension_for(fmt)

    written: List[str] = []
    for name in sorted(os.listdir(input_dir)):
        if not codec.is_image_file(name):
            continue
        path = os.path.join(input_dir, name)
        logger.info("Processing %s", path)
        try:
            base = codec.open_image(path)
            result = watermark_image(base, watermark, config)
            # encode before opening the target so a failure leaves no stub file
            out_bytes = codec.encode(result, fmt, quality)
            out_path = os.path.join(output_dir, f"{os.path.splitext(name)[0]}_watermark{ext}")
            with open(out_path, "wb") as f:
                f.write(out_bytes)
        except OSError as e:
            logger.exception("Skipping %s: %s", path, e)
            continue
        written.append(out_path)
    return written
