# watermarker/codec.py
"""
Decode/encode helpers around Pillow.

Everything that touches bytes, files or the network lives here so the
renderers only ever see in-memory ``Image`` objects.
"""

import io
import logging
from typing import BinaryIO, Union

import requests
from PIL import Image, UnidentifiedImageError

from . import ensure_rgb

logger = logging.getLogger("codec")

DEFAULT_JPEG_QUALITY = 85
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "bmp", "gif", "tif", "tiff", "webp")


class DecodeError(OSError):
    """The data is not an image Pillow can read (unsupported or corrupt)."""


def decode(data: Union[bytes, BinaryIO]) -> Image.Image:
    """
    Decode an image from raw bytes or a binary file object.
    Pixels are loaded eagerly so truncated files fail here and not later.
    """
    fp = io.BytesIO(data) if isinstance(data, (bytes, bytearray)) else data
    try:
        img = Image.open(fp)
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise DecodeError(f"Cannot decode image: {e}") from e
    return img


def open_image(path: str) -> Image.Image:
    """
    Open and decode an image from disk.
    Missing or unreadable files raise the usual OSError from open().
    """
    with open(path, "rb") as f:
        return decode(f)


def _load_image_from_url(url: str) -> Image.Image:
    logger.info("Downloading image %s", url)
    r = requests.get(url, timeout=15)
    r.raise_for_status()
    return decode(r.content)


def load_image(source: str) -> Image.Image:
    """
    Load an image from a local path or an http(s) URL.
    """
    if source.startswith("http://") or source.startswith("https://"):
        return _load_image_from_url(source)
    return open_image(source)


def is_image_file(name: str) -> bool:
    return name.rsplit(".", 1)[-1].lower() in IMAGE_EXTENSIONS


def _jpeg_quality(quality) -> int:
    if quality is None or quality <= 0 or quality > 100:
        return DEFAULT_JPEG_QUALITY
    return int(quality)


def save_jpeg(img: Image.Image, fp: BinaryIO, quality: int = DEFAULT_JPEG_QUALITY) -> None:
    """
    Write the image as JPEG. Quality outside 1-100 falls back to 85.
    JPEG has no alpha, so the alpha channel is dropped.
    """
    ensure_rgb(img).save(fp, format="JPEG", quality=_jpeg_quality(quality))


def save_png(img: Image.Image, fp: BinaryIO) -> None:
    """
    Write the image as PNG (lossless, alpha kept).
    """
    img.save(fp, format="PNG")


def encode_jpeg(img: Image.Image, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    buf = io.BytesIO()
    save_jpeg(img, buf, quality)
    return buf.getvalue()


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    save_png(img, buf)
    return buf.getvalue()


def encode(img: Image.Image, fmt: str = "JPEG", quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """
    Encode to the given format name ("JPEG"/"JPG" or "PNG").
    """
    fmt = (fmt or "JPEG").upper()
    if fmt in ("JPEG", "JPG"):
        return encode_jpeg(img, quality)
    if fmt == "PNG":
        return encode_png(img)
    raise ValueError(f"Unsupported output format: {fmt}")


def extension_for(fmt: str) -> str:
    return ".png" if (fmt or "").upper() == "PNG" else ".jpg"
